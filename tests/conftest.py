import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Set env vars before any saasflow imports
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("ENVIRONMENT", "test")

from saasflow.models.schemas import AuthSession
from saasflow.services import IdentityError


# ──────────────────────────────────────────────
# Auth helpers
# ──────────────────────────────────────────────

FAKE_USER = {
    "id": "test-user-id-123",
    "email": "test@example.com",
    "access_token": "fake-supabase-jwt",
}


class FakeIdentityProvider:
    """In-memory IdentityProvider that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.error: IdentityError | None = None
        self.session = AuthSession(access_token="access-abc", refresh_token="refresh-xyz")

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if self.error is not None:
            raise self.error

    async def sign_up(self, email, password, email_redirect_to):
        self._record("sign_up", email, password, email_redirect_to)

    async def sign_in_with_password(self, email, password):
        self._record("sign_in_with_password", email, password)
        return self.session

    async def reset_password_for_email(self, email, redirect_to):
        self._record("reset_password_for_email", email, redirect_to)

    async def update_password(self, user_id, password):
        self._record("update_password", user_id, password)

    async def sign_out(self, access_token):
        self._record("sign_out", access_token)


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


# ──────────────────────────────────────────────
# Mock httpx client
# ──────────────────────────────────────────────

def make_response(status_code=200, json_data=None, text=""):
    """Create a mock httpx.Response. json_data=None means the body is not JSON."""
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    if json_data is None:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = json_data
    response.text = text
    return response


@pytest.fixture
def mock_http():
    """Patch httpx.AsyncClient; tests set mock_http.post to drive the response."""
    with patch("httpx.AsyncClient") as MockClient:
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(return_value=make_response(json_data={}))
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=None)
        MockClient.return_value = mock_client
        mock_client.factory = MockClient
        yield mock_client
