"""Webhook verification, decoding and dispatch."""

from paydemo.webhook.endpoint import WebhookResponse, handle_webhook
from paydemo.webhook.events import DecodeError, DecodeFailure, decode_event
from paydemo.webhook.handler import (
    Handler,
    HandlerRegistry,
    build_handler_registry,
    dispatch,
    log_completed_checkout,
)
from paydemo.webhook.validators import (
    VerificationError,
    VerificationFailure,
    VerifiedPayload,
    build_signature_header,
    compute_signature,
    verify_signature,
)

__all__ = [
    "DecodeError",
    "DecodeFailure",
    "Handler",
    "HandlerRegistry",
    "VerificationError",
    "VerificationFailure",
    "VerifiedPayload",
    "WebhookResponse",
    "build_handler_registry",
    "build_signature_header",
    "compute_signature",
    "decode_event",
    "dispatch",
    "handle_webhook",
    "log_completed_checkout",
    "verify_signature",
]
