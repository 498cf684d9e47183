import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from saasflow.api.auth_routes import router as auth_router
from saasflow.api.checkout_routes import router as checkout_router
from saasflow.config import settings
from saasflow.services import CheckoutError

_MAX_BODY_SIZE = 65_536  # 64 KB, form posts and small JSON bodies only

# HTTP status per checkout failure kind; anything else (incl. redacted) is 502
_CHECKOUT_ERROR_STATUS = {
    "invalid_request": 400,
    "configuration": 503,
    "timeout": 504,
}


class LimitRequestBodyMiddleware(BaseHTTPMiddleware):
    """Reject requests whose Content-Length exceeds _MAX_BODY_SIZE."""

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and not content_length.isdigit():
            return JSONResponse(
                status_code=400,
                content={"detail": "Invalid Content-Length header"},
            )
        if content_length and int(content_length) > _MAX_BODY_SIZE:
            return JSONResponse(
                status_code=413,
                content={"detail": "Request body too large"},
            )
        return await call_next(request)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("saasflow backend starting (environment=%s)", settings.environment.value)
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="saasflow API",
    description="Auth actions and hosted checkout sessions for a subscription SaaS",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware (configure via CORS_ORIGINS env var)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",")],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# Reject oversized request bodies (runs before route handlers)
app.add_middleware(LimitRequestBodyMiddleware)

app.include_router(auth_router)
app.include_router(checkout_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok"}


@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError):
    status_code = _CHECKOUT_ERROR_STATUS.get(exc.kind, 502)
    logger.warning("Checkout failed on %s %s -> %d", request.method, request.url.path, status_code)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc)},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("saasflow.main:app", host="0.0.0.0", port=8000, reload=True)
