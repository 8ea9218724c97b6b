"""Event dispatcher and the handlers registered at startup."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import Any

from starlette.concurrency import run_in_threadpool

from paydemo.models.event import (
    CheckoutSessionEvent,
    DispatchResult,
    DispatchStatus,
    EventKind,
    UnhandledEvent,
    VerifiedEvent,
)
from paydemo.utils.logging import get_logger

logger = get_logger("webhook.handler")

Handler = Callable[[CheckoutSessionEvent], Awaitable[Any] | Any]
HandlerRegistry = Mapping[EventKind | str, Handler]


def log_completed_checkout(event: CheckoutSessionEvent) -> None:
    """Record a completed checkout session.

    Safe to run more than once for the same session: the provider delivers
    at least once.
    """
    session = event.session
    logger.info(
        "Checkout session completed",
        extra={
            "event_id": event.id,
            "session_id": session.id,
            "payment_status": session.payment_status,
            "amount_total": session.amount_total,
            "currency": session.currency,
            "amount": session.display_amount,
            "livemode": event.livemode,
        },
    )


def build_handler_registry(
    overrides: Mapping[EventKind, Handler] | None = None,
) -> HandlerRegistry:
    """Build the read-only handler registry used for the life of the process.

    Args:
        overrides: Handlers to add or replace, keyed by event kind.

    Returns:
        Immutable mapping of event kind to handler.
    """
    handlers: dict[EventKind, Handler] = {
        EventKind.CHECKOUT_SESSION_COMPLETED: log_completed_checkout,
    }
    if overrides:
        handlers.update(overrides)
    return MappingProxyType(handlers)


async def dispatch(event: VerifiedEvent, handlers: HandlerRegistry) -> DispatchResult:
    """Route an event to its registered handler.

    Unknown and unregistered kinds are ignored but still count as success.
    Handler exceptions are logged and returned as HANDLER_FAILED, never
    raised. Plain-function handlers run in the thread pool so blocking I/O
    does not stall other requests.

    Args:
        event: A decoded, verified event.
        handlers: Registry built by ``build_handler_registry``.

    Returns:
        DispatchResult for the event.
    """
    if isinstance(event, UnhandledEvent):
        logger.info(
            "Ignoring unhandled event type",
            extra={"event_id": event.id, "event_type": event.kind},
        )
        return DispatchResult(DispatchStatus.IGNORED, event_id=event.id, kind=event.kind)

    kind = event.kind.value
    # Registries keyed by the raw type string work too
    handler = handlers.get(event.kind) or handlers.get(kind)
    if handler is None:
        logger.info(
            "No handler registered for event type",
            extra={"event_id": event.id, "event_type": kind},
        )
        return DispatchResult(DispatchStatus.IGNORED, event_id=event.id, kind=kind)

    logger.info("Dispatching webhook event", extra={"event_id": event.id, "event_type": kind})

    try:
        if inspect.iscoroutinefunction(handler):
            await handler(event)
        else:
            outcome = await run_in_threadpool(handler, event)
            if inspect.isawaitable(outcome):
                await outcome
    except Exception as e:
        logger.exception(
            "Webhook handler failed",
            extra={"event_id": event.id, "event_type": kind, "error_type": type(e).__name__},
        )
        return DispatchResult(
            DispatchStatus.HANDLER_FAILED,
            event_id=event.id,
            kind=kind,
            error=f"{type(e).__name__}: {e}",
        )

    return DispatchResult(DispatchStatus.HANDLED, event_id=event.id, kind=kind)
