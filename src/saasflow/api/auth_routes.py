import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from saasflow.api.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_access_token,
    get_current_user,
    get_identity_provider,
)
from saasflow.api.redirects import encoded_redirect, redirect
from saasflow.config import settings
from saasflow.models.schemas import ActionStatus, AuthSession, Environment, UserResponse
from saasflow.services import IdentityError
from saasflow.services.identity import IdentityProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth")

RESET_PASSWORD_PATH = "/dashboard/reset-password"


def _origin(request: Request) -> str:
    return (request.headers.get("origin") or settings.site_url).rstrip("/")


def _is_local_path(url: str) -> bool:
    """Only same-site paths; "//host" and "/\\host" are treated as absolute by browsers."""
    return url.startswith("/") and not url.startswith(("//", "/\\"))


def _set_session_cookies(response: RedirectResponse, session: AuthSession) -> None:
    secure = settings.environment is Environment.PRODUCTION
    for name, value in (
        (ACCESS_TOKEN_COOKIE, session.access_token),
        (REFRESH_TOKEN_COOKIE, session.refresh_token),
    ):
        response.set_cookie(name, value, httponly=True, secure=secure, samesite="lax")


@router.post("/sign-up")
async def sign_up(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> RedirectResponse:
    email = email.strip()
    if not email or not password:
        return encoded_redirect(ActionStatus.ERROR, "/sign-up", "Email and password are required")

    try:
        await identity.sign_up(email, password, f"{_origin(request)}/auth/callback")
    except IdentityError as e:
        logger.error("Sign-up failed: %s %s", e.code, e.message)
        return encoded_redirect(ActionStatus.ERROR, "/sign-up", e.message)

    return encoded_redirect(ActionStatus.SUCCESS, "/dashboard", "Thanks for signing up!")


@router.post("/sign-in")
async def sign_in(
    email: str = Form(""),
    password: str = Form(""),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> RedirectResponse:
    try:
        session = await identity.sign_in_with_password(email.strip(), password)
    except IdentityError as e:
        return encoded_redirect(ActionStatus.ERROR, "/sign-in", e.message)

    response = redirect("/dashboard")
    _set_session_cookies(response, session)
    return response


@router.post("/forgot-password")
async def forgot_password(
    request: Request,
    email: str = Form(""),
    callback_url: str = Form("", alias="callbackUrl"),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> RedirectResponse:
    email = email.strip()
    if not email:
        return encoded_redirect(ActionStatus.ERROR, "/forgot-password", "Email is required")

    try:
        await identity.reset_password_for_email(
            email,
            f"{_origin(request)}/auth/callback?redirect_to={RESET_PASSWORD_PATH}",
        )
    except IdentityError as e:
        logger.error("Password reset email failed: %s", e.message)
        return encoded_redirect(ActionStatus.ERROR, "/forgot-password", "Could not reset password")

    if callback_url and _is_local_path(callback_url):
        return redirect(callback_url)
    if callback_url:
        logger.warning("Ignoring non-local callbackUrl on password reset")

    return encoded_redirect(
        ActionStatus.SUCCESS,
        "/forgot-password",
        "Check your email for a link to reset your password.",
    )


@router.post("/reset-password")
async def reset_password(
    password: str = Form(""),
    confirm_password: str = Form("", alias="confirmPassword"),
    user: dict = Depends(get_current_user),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> RedirectResponse:
    # Each failed check ends the action; only one redirect is ever produced.
    if not password or not confirm_password:
        return encoded_redirect(
            ActionStatus.ERROR, RESET_PASSWORD_PATH, "Password and confirm password are required"
        )

    if password != confirm_password:
        return encoded_redirect(ActionStatus.ERROR, RESET_PASSWORD_PATH, "Passwords do not match")

    try:
        await identity.update_password(user["id"], password)
    except IdentityError as e:
        logger.error("Password update failed for user %s: %s", user["id"], e.message)
        return encoded_redirect(ActionStatus.ERROR, RESET_PASSWORD_PATH, "Password update failed")

    return encoded_redirect(ActionStatus.SUCCESS, RESET_PASSWORD_PATH, "Password updated")


@router.post("/sign-out")
async def sign_out(
    token: str | None = Depends(get_access_token),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> RedirectResponse:
    if token:
        try:
            await identity.sign_out(token)
        except IdentityError as e:
            logger.warning("Session revocation failed: %s", e.message)

    response = redirect("/sign-in")
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)
    return response


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)) -> UserResponse:
    return UserResponse(id=str(user["id"]), email=user["email"])
