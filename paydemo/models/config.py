"""Configuration models for paydemo."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from paydemo.utils.logging import redact_secret

# Provider default clock skew allowance
DEFAULT_TOLERANCE_SECONDS = 300

DEFAULT_SIGNATURE_HEADER = "Stripe-Signature"

SUPPORTED_CURRENCIES = {"usd", "eur", "gbp", "jpy", "cad", "aud"}

DEFAULT_SUCCESS_URL = "http://localhost:5173/success?session_id={CHECKOUT_SESSION_ID}"
DEFAULT_CANCEL_URL = "http://localhost:5173/cancel"


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, loaded once at startup and never mutated.

    The webhook secret and vendor API key are excluded from ``repr`` so a
    stray log line or traceback cannot leak them; use ``secret_hint`` when a
    diagnostic needs to identify which secret is loaded.
    """

    webhook_secret: str = field(repr=False)
    stripe_api_key: str | None = field(default=None, repr=False)
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS
    signature_header: str = DEFAULT_SIGNATURE_HEADER
    allowed_origins: tuple[str, ...] = ("*",)
    success_url: str = DEFAULT_SUCCESS_URL
    cancel_url: str = DEFAULT_CANCEL_URL
    currency: str = "usd"
    host: str = "0.0.0.0"
    port: int = 3001

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.webhook_secret:
            raise ValueError("webhook_secret must not be empty")

        if self.tolerance_seconds <= 0:
            raise ValueError(f"tolerance_seconds must be positive, got {self.tolerance_seconds}")

        if not self.signature_header.strip():
            raise ValueError("signature_header must not be empty")

        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(
                f"Unsupported currency: {self.currency}. "
                f"Supported currencies: {', '.join(sorted(SUPPORTED_CURRENCIES))}"
            )

        if not 0 < self.port < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")

    @property
    def secret_hint(self) -> str:
        """Truncated webhook secret, safe for logs."""
        return redact_secret(self.webhook_secret)

    @property
    def payments_enabled(self) -> bool:
        """Whether vendor API routes can be served."""
        return bool(self.stripe_api_key)

    @classmethod
    def from_mapping(cls, config: dict[str, Any], webhook_secret: str) -> Settings:
        """Build settings from a parsed config file plus the webhook secret.

        Args:
            config: Non-secret options (e.g., from .paydemo.yml).
            webhook_secret: The shared signing secret.

        Returns:
            Settings instance.

        Raises:
            ValueError: If a value has the wrong type or fails validation.
        """
        origins = config.get("allowed_origins", ["*"])
        if isinstance(origins, str):
            origins = [o.strip() for o in origins.split(",") if o.strip()]

        return cls(
            webhook_secret=webhook_secret,
            stripe_api_key=config.get("stripe_api_key"),
            tolerance_seconds=int(config.get("tolerance_seconds", DEFAULT_TOLERANCE_SECONDS)),
            signature_header=config.get("signature_header", DEFAULT_SIGNATURE_HEADER),
            allowed_origins=tuple(origins),
            success_url=config.get("success_url", DEFAULT_SUCCESS_URL),
            cancel_url=config.get("cancel_url", DEFAULT_CANCEL_URL),
            currency=str(config.get("currency", "usd")).lower(),
            host=config.get("host", "0.0.0.0"),
            port=int(config.get("port", 3001)),
        )
