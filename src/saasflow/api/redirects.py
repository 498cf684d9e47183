from urllib.parse import quote

from fastapi.responses import RedirectResponse

from saasflow.models.schemas import ActionStatus


def encoded_redirect_url(status: ActionStatus, path: str, message: str) -> str:
    """Append ``<status>=<message>`` to path, e.g. ``/sign-in?error=Bad%20password``."""
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{status.value}={quote(message, safe='')}"


def encoded_redirect(status: ActionStatus, path: str, message: str) -> RedirectResponse:
    return RedirectResponse(encoded_redirect_url(status, path, message), status_code=303)


def redirect(path: str) -> RedirectResponse:
    return RedirectResponse(path, status_code=303)
