GENERIC_CHECKOUT_MESSAGE = "Failed to create checkout session. Please try again later."


class CheckoutError(Exception):
    """Base class for checkout failures.

    Raised as-is (with GENERIC_CHECKOUT_MESSAGE) when details are redacted.
    """

    kind = "checkout"
    retryable = False


class CheckoutConfigurationError(CheckoutError):
    """A required CREEM_* setting is missing."""

    kind = "configuration"


class CheckoutTimeoutError(CheckoutError):
    """The provider did not answer before the deadline."""

    kind = "timeout"
    retryable = True


class CheckoutNetworkError(CheckoutError):
    """Transport failure other than a timeout (DNS, refused connection, ...)."""

    kind = "network"
    retryable = True


class ProviderRejectionError(CheckoutError):
    """The provider answered with a non-success status."""

    kind = "provider_rejection"

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"API request failed with status {status_code}: {body}")


class CheckoutInputError(CheckoutError):
    """The caller passed arguments that cannot form a checkout request."""

    kind = "invalid_request"


class ContractViolationError(CheckoutError):
    """The provider answered 2xx without a usable checkout_url."""

    kind = "contract_violation"


class IdentityError(Exception):
    """The identity provider rejected or failed an auth operation."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)
