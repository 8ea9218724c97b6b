"""HTTP entry point for the paydemo service."""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from paydemo import __version__
from paydemo.models.catalog import CheckoutRequest, ProductRequest
from paydemo.tools.stripe_api import StripeToolError, create_checkout_session, create_product
from paydemo.utils.config_loader import load_settings
from paydemo.utils.logging import configure_logging, get_logger
from paydemo.webhook.endpoint import handle_webhook
from paydemo.webhook.handler import build_handler_registry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request

    from paydemo.models.config import Settings
    from paydemo.webhook.handler import HandlerRegistry

# Configure logging on module load
configure_logging()
logger = get_logger("main")


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    """Create a JSON error response."""
    return JSONResponse({"error": error, "message": message}, status_code=status_code)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log one line per request with its status and duration."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "Request handled",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response


async def index(request: Request) -> PlainTextResponse:
    """Liveness text for humans."""
    del request  # unused but required by Starlette routing
    return PlainTextResponse("paydemo api server is running")


async def hello(request: Request) -> JSONResponse:
    """Greeting used by the browser UI to check connectivity."""
    del request  # unused but required by Starlette routing
    return JSONResponse({"message": "Hello paydemo!"})


async def health(request: Request) -> JSONResponse:
    """Health check."""
    settings: Settings = request.app.state.settings
    return JSONResponse(
        {
            "status": "healthy",
            "version": __version__,
            "payments_enabled": settings.payments_enabled,
        }
    )


async def webhook(request: Request) -> Response:
    """Receive a payment provider webhook delivery."""
    settings: Settings = request.app.state.settings
    # Signature covers the exact bytes, so read them before any parsing
    body = await request.body()
    result = await handle_webhook(
        body,
        request.headers.get(settings.signature_header),
        settings,
        request.app.state.handlers,
    )
    return Response(result.content, status_code=result.status_code, media_type=result.media_type)


async def _read_json(request: Request) -> Any:
    try:
        return json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError(f"Invalid JSON: {e}") from e


async def products(request: Request) -> JSONResponse:
    """Create a product with a default price."""
    settings: Settings = request.app.state.settings
    if not settings.stripe_api_key:
        return _error_response(503, "not_configured", "Payments API key not configured")

    try:
        product_request = ProductRequest.from_json(
            await _read_json(request), default_currency=settings.currency
        )
    except ValueError as e:
        return _error_response(400, "invalid_request", str(e))

    try:
        created = await run_in_threadpool(create_product, settings.stripe_api_key, product_request)
    except StripeToolError as e:
        logger.error("Failed to create product", extra={"error": str(e)})
        return _error_response(502, "provider_error", str(e))

    return JSONResponse(created, status_code=201)


async def checkout_sessions(request: Request) -> JSONResponse:
    """Start a hosted checkout session for a price."""
    settings: Settings = request.app.state.settings
    if not settings.stripe_api_key:
        return _error_response(503, "not_configured", "Payments API key not configured")

    try:
        checkout_request = CheckoutRequest.from_json(await _read_json(request))
    except ValueError as e:
        return _error_response(400, "invalid_request", str(e))

    try:
        session = await run_in_threadpool(
            create_checkout_session,
            settings.stripe_api_key,
            checkout_request,
            settings.success_url,
            settings.cancel_url,
        )
    except StripeToolError as e:
        logger.error("Failed to create checkout session", extra={"error": str(e)})
        return _error_response(502, "provider_error", str(e))

    return JSONResponse(session, status_code=201)


def create_app(
    settings: Settings | None = None,
    handlers: HandlerRegistry | None = None,
) -> Starlette:
    """Build the ASGI application.

    Settings are loaded from the environment when not given; a missing
    webhook secret aborts startup with ``ConfigLoaderError``.

    Args:
        settings: Process settings.
        handlers: Webhook handler registry, the default registry when omitted.

    Returns:
        Starlette application.
    """
    if settings is None:
        settings = load_settings()

    app = Starlette(
        routes=[
            Route("/", index, methods=["GET"]),
            Route("/api/hello", hello, methods=["GET"]),
            Route("/health", health, methods=["GET"]),
            Route("/webhook", webhook, methods=["POST"]),
            Route("/api/products", products, methods=["POST"]),
            Route("/api/checkout-sessions", checkout_sessions, methods=["POST"]),
        ],
        middleware=[
            Middleware(RequestLogMiddleware),
            Middleware(
                CORSMiddleware,
                allow_origins=list(settings.allowed_origins),
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            ),
        ],
    )
    app.state.settings = settings
    app.state.handlers = handlers if handlers is not None else build_handler_registry()

    logger.info(
        "Webhook endpoint configured",
        extra={
            "version": __version__,
            "secret_hint": settings.secret_hint,
            "signature_header": settings.signature_header,
            "tolerance_seconds": settings.tolerance_seconds,
        },
    )
    return app


# For local development
if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    print(f"Starting paydemo v{__version__} on http://{settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
