"""Request bodies for the product and checkout routes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from paydemo.models.config import SUPPORTED_CURRENCIES

# Provider limit for a single unit amount, in the smallest currency unit
MAX_UNIT_AMOUNT = 99_999_999

PRICE_ID_PATTERN = re.compile(r"^price_[A-Za-z0-9]+$")


def _require_int(payload: dict[str, Any], key: str, default: int | None = None) -> int:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


@dataclass(frozen=True)
class ProductRequest:
    """A sellable product with one default one-time price."""

    name: str
    unit_amount: int
    currency: str = "usd"
    description: str | None = None

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.name or not self.name.strip():
            raise ValueError("name must not be empty")

        if len(self.name) > 250:
            raise ValueError("name must be at most 250 characters")

        if not 0 < self.unit_amount <= MAX_UNIT_AMOUNT:
            raise ValueError(
                f"unit_amount must be between 1 and {MAX_UNIT_AMOUNT}, got {self.unit_amount}"
            )

        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def from_json(cls, payload: Any, default_currency: str = "usd") -> ProductRequest:
        """Create a ProductRequest from a decoded JSON request body.

        Raises:
            ValueError: If the body is not an object or a field is invalid.
        """
        if not isinstance(payload, dict):
            raise ValueError("Request body must be a JSON object")

        name = payload.get("name")
        if not isinstance(name, str):
            raise ValueError("name is required")

        description = payload.get("description")
        if description is not None and not isinstance(description, str):
            raise ValueError("description must be a string")

        return cls(
            name=name.strip(),
            unit_amount=_require_int(payload, "unit_amount"),
            currency=str(payload.get("currency") or default_currency).lower(),
            description=description,
        )


@dataclass(frozen=True)
class CheckoutRequest:
    """A request to start a hosted checkout for one price."""

    price_id: str
    quantity: int = 1

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not PRICE_ID_PATTERN.match(self.price_id):
            raise ValueError(f"Invalid price id: {self.price_id!r}")

        if not 1 <= self.quantity <= 99:
            raise ValueError(f"quantity must be between 1 and 99, got {self.quantity}")

    @classmethod
    def from_json(cls, payload: Any) -> CheckoutRequest:
        """Create a CheckoutRequest from a decoded JSON request body.

        Raises:
            ValueError: If the body is not an object or a field is invalid.
        """
        if not isinstance(payload, dict):
            raise ValueError("Request body must be a JSON object")

        price_id = payload.get("price_id")
        if not isinstance(price_id, str):
            raise ValueError("price_id is required")

        return cls(price_id=price_id, quantity=_require_int(payload, "quantity", default=1))
