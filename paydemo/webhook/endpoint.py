"""Webhook endpoint: verify, decode and dispatch one inbound delivery."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from paydemo.utils.logging import get_logger
from paydemo.webhook.events import DecodeError, decode_event
from paydemo.webhook.handler import HandlerRegistry, dispatch
from paydemo.webhook.validators import VerificationError, VerificationFailure, verify_signature

if TYPE_CHECKING:
    from paydemo.models.config import Settings

logger = get_logger("webhook.endpoint")

# Stable, non-sensitive response bodies for rejected deliveries
REJECTION_MESSAGES = {
    VerificationFailure.MALFORMED_HEADER: "Malformed signature header",
    VerificationFailure.SIGNATURE_MISMATCH: "Invalid signature",
    VerificationFailure.STALE: "Signature timestamp outside tolerance",
}

UNRECOGNIZED_PAYLOAD_MESSAGE = "Unrecognized event payload"

ACKNOWLEDGEMENT = json.dumps({"received": True})


@dataclass(frozen=True)
class WebhookResponse:
    """Framework-neutral HTTP response."""

    status_code: int
    content: str
    media_type: str = "text/plain"

    @classmethod
    def reject(cls, message: str) -> WebhookResponse:
        """A 400 with a plain-text diagnostic."""
        return cls(status_code=400, content=message)

    @classmethod
    def acknowledge(cls) -> WebhookResponse:
        """A 200 with ``{"received": true}``."""
        return cls(status_code=200, content=ACKNOWLEDGEMENT, media_type="application/json")


async def handle_webhook(
    body: bytes,
    signature_header: str | None,
    settings: Settings,
    handlers: HandlerRegistry,
) -> WebhookResponse:
    """Handle one webhook delivery.

    Rejected deliveries get a 400 and are retried by the provider. Once an
    event is verified and decoded it is acknowledged with a 200, even if its
    handler fails, so a handler bug does not cause endless redelivery.

    Args:
        body: Raw request body bytes.
        signature_header: Value of the signature header, None when absent.
            An empty value counts as absent.
        settings: Process settings holding the secret and tolerance.
        handlers: Handler registry.

    Returns:
        WebhookResponse to send back.
    """
    if not signature_header:
        logger.warning(
            "Rejected webhook",
            extra={"reason": VerificationFailure.HEADER_MISSING.value},
        )
        return WebhookResponse.reject(f"Missing {settings.signature_header} header")

    verified = verify_signature(
        body,
        signature_header,
        settings.webhook_secret,
        tolerance_seconds=settings.tolerance_seconds,
    )
    if isinstance(verified, VerificationError):
        logger.warning(
            "Rejected webhook",
            extra={"reason": verified.kind.value, "detail": verified.message},
        )
        return WebhookResponse.reject(REJECTION_MESSAGES[verified.kind])

    event = decode_event(verified)
    if isinstance(event, DecodeError):
        # Authentic but undecodable: reject so the provider keeps the event
        logger.error(
            "Verified webhook could not be decoded",
            extra={"reason": event.kind.value, "detail": event.message},
        )
        return WebhookResponse.reject(UNRECOGNIZED_PAYLOAD_MESSAGE)

    kind = getattr(event.kind, "value", event.kind)
    logger.info("Verified webhook event", extra={"event_id": event.id, "event_type": kind})

    result = await dispatch(event, handlers)
    if not result.ok:
        logger.error(
            "Acknowledging event despite handler failure",
            extra={"event_id": result.event_id, "event_type": result.kind, "error": result.error},
        )

    return WebhookResponse.acknowledge()
