"""Decode verified webhook payloads into typed events."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from paydemo.models.checkout_session import CheckoutSession
from paydemo.models.event import CheckoutSessionEvent, EventKind, UnhandledEvent, VerifiedEvent
from paydemo.utils.logging import get_logger
from paydemo.webhook.validators import VerifiedPayload

logger = get_logger("webhook.events")


class DecodeFailure(str, Enum):
    """Why a verified payload could not be decoded."""

    UNRECOGNIZED_SHAPE = "unrecognized_shape"


@dataclass(frozen=True)
class DecodeError:
    """A verified payload that does not look like a provider event."""

    kind: DecodeFailure
    message: str


def _unrecognized(message: str) -> DecodeError:
    return DecodeError(DecodeFailure.UNRECOGNIZED_SHAPE, message)


def _parse_created(value: Any) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def decode_event(verified: VerifiedPayload) -> VerifiedEvent | DecodeError:
    """Decode a verified payload into a typed event.

    Known kinds carrying a checkout session become ``CheckoutSessionEvent``;
    any other ``type`` becomes ``UnhandledEvent`` so that new provider event
    types are still acknowledged.

    Args:
        verified: Output of ``verify_signature``.

    Returns:
        The decoded event, or a DecodeError.

    Raises:
        TypeError: If given anything other than a VerifiedPayload.
    """
    if not isinstance(verified, VerifiedPayload):
        raise TypeError("decode_event() requires a VerifiedPayload")

    try:
        data = json.loads(verified.body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        return _unrecognized(f"Payload is not valid JSON: {e.__class__.__name__}")

    if not isinstance(data, dict):
        return _unrecognized("Payload is not a JSON object")

    event_type = data.get("type")
    if not isinstance(event_type, str) or not event_type:
        return _unrecognized("Payload has no event type")

    event_id = data.get("id")
    if not isinstance(event_id, str):
        event_id = ""

    created = _parse_created(data.get("created"))
    livemode = data.get("livemode") is True

    kind = EventKind.parse(event_type)
    if kind is None:
        logger.debug("Decoded unhandled event type", extra={"event_type": event_type})
        return UnhandledEvent(id=event_id, kind=event_type, created=created, livemode=livemode)

    section = data.get("data")
    obj = section.get("object") if isinstance(section, dict) else None
    if not isinstance(obj, dict):
        return _unrecognized(f"Event {event_type} has no data.object")

    try:
        session = CheckoutSession.from_event_object(obj)
    except KeyError as e:
        return _unrecognized(f"Event {event_type} is missing field {e}")
    except (AttributeError, TypeError, ValueError) as e:
        return _unrecognized(f"Event {event_type} has an invalid checkout session: {e}")

    return CheckoutSessionEvent(
        id=event_id,
        kind=kind,
        created=created,
        livemode=livemode,
        session=session,
    )
