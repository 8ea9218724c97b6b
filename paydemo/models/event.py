"""Verified provider event and dispatch outcome models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003
from enum import Enum

from paydemo.models.checkout_session import CheckoutSession  # noqa: TC001


class EventKind(str, Enum):
    """Provider event types this service understands."""

    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
    CHECKOUT_SESSION_EXPIRED = "checkout.session.expired"
    CHECKOUT_SESSION_ASYNC_PAYMENT_SUCCEEDED = "checkout.session.async_payment_succeeded"
    CHECKOUT_SESSION_ASYNC_PAYMENT_FAILED = "checkout.session.async_payment_failed"

    @classmethod
    def parse(cls, value: str) -> EventKind | None:
        """Return the matching kind, or None for types this service does not know."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class CheckoutSessionEvent:
    """An event whose payload is a checkout session."""

    id: str
    kind: EventKind
    created: datetime | None
    livemode: bool
    session: CheckoutSession


@dataclass(frozen=True)
class UnhandledEvent:
    """An authentic event of a type this service does not model.

    Kept so that new provider event types are acknowledged instead of
    rejected.
    """

    id: str
    kind: str
    created: datetime | None
    livemode: bool


# Closed set of decoded events
VerifiedEvent = CheckoutSessionEvent | UnhandledEvent


class DispatchStatus(str, Enum):
    """Outcome of dispatching one event."""

    HANDLED = "handled"
    IGNORED = "ignored"  # Unhandled kind, or no handler registered
    HANDLER_FAILED = "handler_failed"


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of handling one verified event.

    Never changes the HTTP status returned to the provider.
    """

    status: DispatchStatus
    event_id: str
    kind: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True unless the registered handler failed."""
        return self.status is not DispatchStatus.HANDLER_FAILED
