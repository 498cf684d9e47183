"""Hosted checkout sessions via the Creem payments API."""

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Protocol

import httpx
from pydantic import ValidationError

from saasflow.config import Settings, settings
from saasflow.models.schemas import CheckoutRequest, Environment, ProductType
from saasflow.services import (
    GENERIC_CHECKOUT_MESSAGE,
    CheckoutConfigurationError,
    CheckoutError,
    CheckoutInputError,
    CheckoutNetworkError,
    CheckoutTimeoutError,
    ContractViolationError,
    ProviderRejectionError,
)

logger = logging.getLogger(__name__)

CHECKOUTS_PATH = "/checkouts"


# ──────────────────────────────────────────────
# Configuration capability
# ──────────────────────────────────────────────


class ConfigProvider(Protocol):
    def get(self, key: str) -> str | None:
        """Return the value for an upper-case key, or None when unset/empty."""
        ...


class SettingsConfigProvider:
    """Looks keys up on the process Settings (CREEM_API_URL -> creem_api_url)."""

    def __init__(self, source: Settings | None = None) -> None:
        self._source = source if source is not None else settings

    def get(self, key: str) -> str | None:
        value = getattr(self._source, key.lower(), None)
        return str(value) if value else None


class MappingConfigProvider:
    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = dict(values)

    def get(self, key: str) -> str | None:
        return self._values.get(key) or None


# ──────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────


def checkout_endpoint(api_url: str) -> str:
    if api_url.endswith("/"):
        api_url = api_url[:-1]
    return f"{api_url}{CHECKOUTS_PATH}"


def _error_body(response: httpx.Response) -> str:
    """Provider error body, re-serialized when it is JSON, raw text otherwise."""
    try:
        return json.dumps(response.json())
    except ValueError:
        return response.text


def _build_request(
    product_id: str,
    customer_email: str,
    user_id: str,
    product_type: ProductType | str,
    credits_amount: int | None,
    discount_code: str | None,
) -> CheckoutRequest:
    try:
        return CheckoutRequest(
            product_id=product_id,
            customer_email=customer_email,
            user_id=user_id,
            product_type=product_type,
            credits_amount=credits_amount,
            discount_code=discount_code,
        )
    except ValidationError as e:
        raise CheckoutInputError(f"Invalid checkout request: {e}") from e


# ──────────────────────────────────────────────
# Creator
# ──────────────────────────────────────────────


class CheckoutSessionCreator:
    def __init__(
        self,
        config: ConfigProvider | None = None,
        environment: Environment | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.config = config if config is not None else SettingsConfigProvider()
        self.environment = environment if environment is not None else settings.environment
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.checkout_timeout
        )

    async def create_checkout_session(
        self,
        product_id: str,
        customer_email: str,
        user_id: str,
        product_type: ProductType | str,
        credits_amount: int | None = None,
        discount_code: str | None = None,
    ) -> str:
        """Create a checkout session and return the URL to redirect the user to.

        Every failure is logged with full detail. In production the caller only
        ever sees a CheckoutError carrying GENERIC_CHECKOUT_MESSAGE; elsewhere the
        original error propagates. Invalid arguments raise CheckoutInputError.
        """
        try:
            request = _build_request(
                product_id,
                customer_email,
                user_id,
                product_type,
                credits_amount,
                discount_code,
            )
            return await self._create(request)
        except CheckoutError as exc:
            logger.exception("Error creating checkout session (%s)", exc.kind)
            if self.environment is not Environment.PRODUCTION:
                raise

        # Raised outside the except block so no detail rides along on __context__
        raise CheckoutError(GENERIC_CHECKOUT_MESSAGE)

    async def _create(self, request: CheckoutRequest) -> str:
        api_url = self.config.get("CREEM_API_URL")
        if not api_url:
            raise CheckoutConfigurationError("CREEM_API_URL environment variable is not set")
        api_key = self.config.get("CREEM_API_KEY")
        if not api_key:
            raise CheckoutConfigurationError("CREEM_API_KEY environment variable is not set")

        payload = request.to_payload(success_url=self.config.get("CREEM_SUCCESS_URL"))
        endpoint = checkout_endpoint(api_url)

        try:
            response = await asyncio.wait_for(
                self._post(endpoint, api_key, payload),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise CheckoutTimeoutError(
                f"Checkout request timed out after {self.timeout_seconds:g}s"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise CheckoutNetworkError(f"Checkout request failed: {e!r}") from e

        if not response.is_success:
            raise ProviderRejectionError(response.status_code, _error_body(response))

        try:
            data = response.json()
        except ValueError as e:
            raise ContractViolationError("API response is not valid JSON") from e

        checkout_url = data.get("checkout_url") if isinstance(data, dict) else None
        if not isinstance(checkout_url, str) or not checkout_url:
            raise ContractViolationError("API response is missing checkout_url")

        logger.info(
            "Checkout session created (user=%s, product=%s, type=%s)",
            request.user_id,
            request.product_id,
            request.product_type.value,
        )
        return checkout_url

    async def _post(self, endpoint: str, api_key: str, payload: dict) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            return await client.post(
                endpoint,
                headers={
                    "x-api-key": api_key,
                    "Content-Type": "application/json",
                },
                json=payload,
            )


async def create_checkout_session(
    product_id: str,
    customer_email: str,
    user_id: str,
    product_type: ProductType | str,
    credits_amount: int | None = None,
    discount_code: str | None = None,
) -> str:
    """Shortcut using the process settings for config and environment."""
    return await CheckoutSessionCreator().create_checkout_session(
        product_id,
        customer_email,
        user_id,
        product_type,
        credits_amount=credits_amount,
        discount_code=discount_code,
    )
