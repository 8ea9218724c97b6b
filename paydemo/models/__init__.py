"""Data models for paydemo."""

from paydemo.models.catalog import CheckoutRequest, ProductRequest
from paydemo.models.checkout_session import CheckoutSession
from paydemo.models.config import (
    DEFAULT_SIGNATURE_HEADER,
    DEFAULT_TOLERANCE_SECONDS,
    SUPPORTED_CURRENCIES,
    Settings,
)
from paydemo.models.event import (
    CheckoutSessionEvent,
    DispatchResult,
    DispatchStatus,
    EventKind,
    UnhandledEvent,
    VerifiedEvent,
)

__all__ = [
    "DEFAULT_SIGNATURE_HEADER",
    "DEFAULT_TOLERANCE_SECONDS",
    "SUPPORTED_CURRENCIES",
    "CheckoutRequest",
    "CheckoutSession",
    "CheckoutSessionEvent",
    "DispatchResult",
    "DispatchStatus",
    "EventKind",
    "ProductRequest",
    "Settings",
    "UnhandledEvent",
    "VerifiedEvent",
]
