"""Payment provider API calls: products, prices and checkout sessions."""

import uuid
from typing import Any

import stripe

from paydemo.models.catalog import CheckoutRequest, ProductRequest  # noqa: TC001
from paydemo.utils.logging import get_logger
from paydemo.utils.retry import RetryConfig, RetryError, retry_with_backoff

logger = get_logger("tools.stripe_api")

# Failures worth retrying with the same idempotency key
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    stripe.APIConnectionError,
    stripe.RateLimitError,
)


class StripeToolError(Exception):
    """Error raised when a provider API call fails."""

    pass


def _call(operation: str, func: Any, retry_config: RetryConfig | None, **params: Any) -> Any:
    """Invoke a provider API method with retries and a stable idempotency key.

    Raises:
        StripeToolError: If the provider rejects the call or retries run out.
    """
    # One key per logical call, reused by every retry of that call
    idempotency_key = f"paydemo-{operation}-{uuid.uuid4()}"

    try:
        return retry_with_backoff(
            lambda: func(idempotency_key=idempotency_key, **params),
            config=retry_config,
            retry_on=TRANSIENT_ERRORS,
            operation=operation,
        )
    except RetryError as e:
        raise StripeToolError(f"{operation} failed: provider unreachable") from e
    except stripe.StripeError as e:
        logger.warning(
            "Provider API call failed",
            extra={
                "operation": operation,
                "error_type": type(e).__name__,
                "http_status": getattr(e, "http_status", None),
                "request_id": getattr(e, "request_id", None),
            },
        )
        message = getattr(e, "user_message", None) or "provider rejected the request"
        raise StripeToolError(f"{operation} failed: {message}") from e


def create_product(
    api_key: str,
    request: ProductRequest,
    retry_config: RetryConfig | None = None,
) -> dict[str, Any]:
    """Create a product together with its default one-time price.

    Args:
        api_key: Provider secret API key.
        request: Validated product request.
        retry_config: Retry policy for transient failures.

    Returns:
        Dictionary with ``product_id`` and ``price_id``.

    Raises:
        StripeToolError: If the product cannot be created.
    """
    params: dict[str, Any] = {
        "name": request.name,
        "default_price_data": {
            "currency": request.currency,
            "unit_amount": request.unit_amount,
        },
    }
    if request.description:
        params["description"] = request.description

    product = _call(
        "create_product", stripe.Product.create, retry_config, api_key=api_key, **params
    )

    default_price = product.default_price
    price_id = default_price if isinstance(default_price, str) else default_price.id

    logger.info(
        "Created product",
        extra={
            "product_id": product.id,
            "price_id": price_id,
            "unit_amount": request.unit_amount,
            "currency": request.currency,
        },
    )

    return {"product_id": product.id, "price_id": price_id}


def create_checkout_session(
    api_key: str,
    request: CheckoutRequest,
    success_url: str,
    cancel_url: str,
    retry_config: RetryConfig | None = None,
) -> dict[str, Any]:
    """Start a hosted one-time payment checkout for a price.

    Args:
        api_key: Provider secret API key.
        request: Validated checkout request.
        success_url: Redirect after payment; may contain ``{CHECKOUT_SESSION_ID}``.
        cancel_url: Redirect when the buyer abandons checkout.
        retry_config: Retry policy for transient failures.

    Returns:
        Dictionary with the session ``id`` and hosted ``url``.

    Raises:
        StripeToolError: If the session cannot be created.
    """
    session = _call(
        "create_checkout_session",
        stripe.checkout.Session.create,
        retry_config,
        api_key=api_key,
        mode="payment",
        line_items=[{"price": request.price_id, "quantity": request.quantity}],
        success_url=success_url,
        cancel_url=cancel_url,
    )

    logger.info(
        "Created checkout session",
        extra={"session_id": session.id, "price_id": request.price_id},
    )

    return {"id": session.id, "url": session.url}
