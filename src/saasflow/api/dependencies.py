import logging

import jwt as pyjwt
from jwt import PyJWKClient
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from saasflow.config import settings
from saasflow.services.checkout import CheckoutSessionCreator
from saasflow.services.identity import IdentityProvider, SupabaseIdentityProvider

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"

_jwks_client: PyJWKClient | None = None


def _get_jwks_client() -> PyJWKClient:
    global _jwks_client
    if _jwks_client is None:
        _jwks_client = PyJWKClient(
            f"{settings.supabase_url}/auth/v1/.well-known/jwks.json",
            cache_jwk_set=True,
            lifespan=3600,
        )
    return _jwks_client


_identity_provider: IdentityProvider | None = None
_checkout_creator: CheckoutSessionCreator | None = None

security = HTTPBearer(auto_error=False)


def get_identity_provider() -> IdentityProvider:
    global _identity_provider
    if _identity_provider is None:
        _identity_provider = SupabaseIdentityProvider()
    return _identity_provider


def get_checkout_creator() -> CheckoutSessionCreator:
    global _checkout_creator
    if _checkout_creator is None:
        _checkout_creator = CheckoutSessionCreator()
    return _checkout_creator


def decode_supabase_jwt(token: str) -> dict:
    """Decode and verify a Supabase JWT using the JWKS public key."""
    try:
        signing_key = _get_jwks_client().get_signing_key_from_jwt(token)
    except Exception:
        logger.exception("JWKS key fetch failed")
        raise HTTPException(
            status_code=503, detail="Authentication service temporarily unavailable"
        )

    try:
        payload = pyjwt.decode(
            token,
            signing_key.key,
            audience="authenticated",
            algorithms=["ES256"],
            leeway=10,
        )
        return payload
    except pyjwt.PyJWTError:
        logger.warning("JWT decode failed for token")
        raise HTTPException(status_code=401, detail="Invalid or expired token")


def get_access_token(
    request: Request,
    cred: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Bearer header first, then the session cookie set at sign-in."""
    if cred is not None:
        return cred.credentials
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


async def get_current_user(token: str | None = Depends(get_access_token)) -> dict:
    """Extract the user (id, email, access token) from a Supabase JWT."""
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_supabase_jwt(token)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: no sub claim")

    return {"id": user_id, "email": payload.get("email", ""), "access_token": token}
