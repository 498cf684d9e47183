"""Identity provider boundary (Supabase Auth)."""

import logging
from typing import Protocol

from supabase import AuthError

from saasflow.models.schemas import AuthSession
from saasflow.services import IdentityError
from saasflow.supabase_client import create_public_client, get_supabase

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    async def sign_up(self, email: str, password: str, email_redirect_to: str) -> None: ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession: ...

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None: ...

    async def update_password(self, user_id: str, password: str) -> None: ...

    async def sign_out(self, access_token: str) -> None: ...


def _wrap(e: AuthError) -> IdentityError:
    return IdentityError(e.message, getattr(e, "code", None))


class SupabaseIdentityProvider:
    async def sign_up(self, email: str, password: str, email_redirect_to: str) -> None:
        sb = await create_public_client()
        try:
            await sb.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"email_redirect_to": email_redirect_to},
                }
            )
        except AuthError as e:
            raise _wrap(e) from e

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        sb = await create_public_client()
        try:
            result = await sb.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            raise _wrap(e) from e
        if result.session is None:
            raise IdentityError("Sign-in did not return a session")
        return AuthSession(
            access_token=result.session.access_token,
            refresh_token=result.session.refresh_token,
        )

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        sb = await create_public_client()
        try:
            await sb.auth.reset_password_for_email(email, {"redirect_to": redirect_to})
        except AuthError as e:
            raise _wrap(e) from e

    async def update_password(self, user_id: str, password: str) -> None:
        sb = await get_supabase()
        try:
            await sb.auth.admin.update_user_by_id(user_id, {"password": password})
        except AuthError as e:
            raise _wrap(e) from e

    async def sign_out(self, access_token: str) -> None:
        sb = await get_supabase()
        try:
            await sb.auth.admin.sign_out(access_token)
        except AuthError as e:
            raise _wrap(e) from e
