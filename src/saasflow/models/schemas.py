from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


# ──────────────────────────────────────────────
# Deployment
# ──────────────────────────────────────────────


class Environment(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TEST = "test"


# ──────────────────────────────────────────────
# Checkout
# ──────────────────────────────────────────────


class ProductType(str, Enum):
    SUBSCRIPTION = "subscription"
    CREDITS = "credits"


class CheckoutRequest(BaseModel):
    """Everything the payment provider needs to open a hosted checkout."""

    product_id: str = Field(min_length=1)
    customer_email: str
    user_id: str
    product_type: ProductType
    credits_amount: int | None = Field(default=None, ge=0)
    discount_code: str | None = None

    def to_payload(self, success_url: str | None = None) -> dict:
        payload: dict = {
            "product_id": self.product_id,
            "customer": {"email": self.customer_email},
            "metadata": {
                "user_id": self.user_id,
                "product_type": self.product_type.value,
                "credits": self.credits_amount or 0,
            },
        }
        if success_url:
            payload["success_url"] = success_url
        if self.discount_code:
            payload["discount_code"] = self.discount_code
        return payload


class CheckoutBody(BaseModel):
    """Body of POST /api/checkout; customer identity comes from the session."""

    product_id: str = Field(min_length=1)
    product_type: ProductType = ProductType.SUBSCRIPTION
    credits_amount: int | None = Field(default=None, ge=0)
    discount_code: str | None = None

    @field_validator("discount_code", mode="before")
    @classmethod
    def strip_discount_code(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip() or None
        return v


class CheckoutResponse(BaseModel):
    checkout_url: str


# ──────────────────────────────────────────────
# Auth
# ──────────────────────────────────────────────


class ActionStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class AuthSession(BaseModel):
    access_token: str
    refresh_token: str


class UserResponse(BaseModel):
    id: str
    email: str
