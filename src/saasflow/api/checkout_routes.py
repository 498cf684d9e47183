import logging

from fastapi import APIRouter, Depends

from saasflow.api.dependencies import get_checkout_creator, get_current_user
from saasflow.models.schemas import CheckoutBody, CheckoutResponse
from saasflow.services.checkout import CheckoutSessionCreator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    req: CheckoutBody,
    user: dict = Depends(get_current_user),
    creator: CheckoutSessionCreator = Depends(get_checkout_creator),
) -> CheckoutResponse:
    checkout_url = await creator.create_checkout_session(
        req.product_id,
        user["email"],
        user["id"],
        req.product_type,
        credits_amount=req.credits_amount,
        discount_code=req.discount_code,
    )
    return CheckoutResponse(checkout_url=checkout_url)
