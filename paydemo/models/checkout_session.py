"""Checkout session model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Currencies whose smallest unit is the whole unit
ZERO_DECIMAL_CURRENCIES = {"jpy", "krw", "vnd"}


@dataclass(frozen=True)
class CheckoutSession:
    """A provider-hosted checkout session as carried in an event's ``data.object``."""

    id: str
    status: str | None = None
    payment_status: str | None = None
    amount_total: int | None = None
    currency: str | None = None
    mode: str | None = None
    customer_email: str | None = None
    client_reference_id: str | None = None
    payment_intent: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not isinstance(self.id, str) or not self.id:
            raise ValueError(f"Checkout session id must be a non-empty string, got {self.id!r}")

        if self.payment_status is not None and not isinstance(self.payment_status, str):
            raise ValueError(f"payment_status must be a string, got {self.payment_status!r}")

        if self.amount_total is not None and (
            isinstance(self.amount_total, bool) or not isinstance(self.amount_total, int)
        ):
            raise ValueError(f"amount_total must be an integer, got {self.amount_total!r}")

        if self.amount_total is not None and self.amount_total < 0:
            raise ValueError(f"amount_total must not be negative, got {self.amount_total}")

    @classmethod
    def from_event_object(cls, obj: dict[str, Any]) -> CheckoutSession:
        """Create a CheckoutSession from an event's ``data.object``.

        Args:
            obj: The checkout session object.

        Returns:
            CheckoutSession instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        if obj.get("object", "checkout.session") != "checkout.session":
            raise ValueError(f"Expected a checkout.session object, got {obj.get('object')!r}")

        customer_details = obj.get("customer_details") or {}
        payment_intent = obj.get("payment_intent")
        if isinstance(payment_intent, dict):
            # Expanded by the provider when requested
            payment_intent = payment_intent.get("id")

        return cls(
            id=obj["id"],
            status=obj.get("status"),
            payment_status=obj.get("payment_status"),
            amount_total=obj.get("amount_total"),
            currency=obj.get("currency"),
            mode=obj.get("mode"),
            customer_email=customer_details.get("email") or obj.get("customer_email"),
            client_reference_id=obj.get("client_reference_id"),
            payment_intent=payment_intent,
            metadata=dict(obj.get("metadata") or {}),
        )

    @property
    def is_paid(self) -> bool:
        """Whether the provider reports the funds as collected."""
        return self.payment_status in {"paid", "no_payment_required"}

    @property
    def display_amount(self) -> str:
        """Amount formatted for logs, e.g. ``12.50 USD``."""
        if self.amount_total is None:
            return "unknown"
        currency = (self.currency or "").lower()
        if currency in ZERO_DECIMAL_CURRENCIES:
            return f"{self.amount_total} {currency.upper()}"
        return f"{self.amount_total / 100:.2f} {currency.upper()}".strip()
