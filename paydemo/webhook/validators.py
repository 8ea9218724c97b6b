"""Webhook signature verification.

The provider signs each delivery with HMAC-SHA256 over ``"<t>.<raw body>"``
and sends ``t=<unix seconds>,v1=<hex>[,v1=<hex>...]`` in a request header.
Several ``v1`` entries appear while a secret is being rolled.
"""

from __future__ import annotations

import hashlib
import hmac
import string
import time
from dataclasses import dataclass, field
from enum import Enum

from paydemo.models.config import DEFAULT_TOLERANCE_SECONDS

SIGNATURE_SCHEME = "v1"

# Longer values cannot be plausible unix seconds
MAX_TIMESTAMP_DIGITS = 12

_HEX_DIGITS = frozenset(string.hexdigits)

# Only this module can mint a VerifiedPayload
_MINT = object()


class VerificationFailure(str, Enum):
    """Why an inbound delivery was rejected."""

    HEADER_MISSING = "header_missing"
    MALFORMED_HEADER = "malformed_header"
    SIGNATURE_MISMATCH = "signature_mismatch"
    STALE = "stale"


@dataclass(frozen=True)
class VerificationError:
    """A rejected delivery. The message never contains secret or signature material."""

    kind: VerificationFailure
    message: str


@dataclass(frozen=True)
class SignatureHeader:
    """Parsed signature header."""

    timestamp: int
    raw_timestamp: str
    signatures: tuple[str, ...]


@dataclass(frozen=True)
class VerifiedPayload:
    """Raw request bytes that passed signature verification.

    Required by the event decoder, so nothing can decode an unverified body.
    """

    body: bytes
    timestamp: int
    _mint: object = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Refuse construction outside ``verify_signature``."""
        if self._mint is not _MINT:
            raise TypeError("VerifiedPayload can only be created by verify_signature()")


def _is_hex(value: str) -> bool:
    return bool(value) and all(c in _HEX_DIGITS for c in value)


def parse_signature_header(header: str) -> SignatureHeader | VerificationError:
    """Parse a ``t=...,v1=...`` signature header.

    Args:
        header: The raw header value.

    Returns:
        SignatureHeader, or a MALFORMED_HEADER error.
    """
    raw_timestamp: str | None = None
    signatures: list[str] = []

    for item in header.split(","):
        key, sep, value = item.strip().partition("=")
        if not sep:
            return VerificationError(
                VerificationFailure.MALFORMED_HEADER, "Signature header item is not key=value"
            )

        if key == "t":
            raw_timestamp = value
        elif key == SIGNATURE_SCHEME:
            if not _is_hex(value):
                return VerificationError(
                    VerificationFailure.MALFORMED_HEADER, "Signature value is not hex"
                )
            signatures.append(value.lower())
        # Other schemes (v0 test signatures, future versions) are ignored

    if raw_timestamp is None:
        return VerificationError(
            VerificationFailure.MALFORMED_HEADER, "Signature header has no timestamp"
        )

    if not raw_timestamp.isascii() or not raw_timestamp.isdigit():
        return VerificationError(
            VerificationFailure.MALFORMED_HEADER, "Signature header timestamp is not an integer"
        )

    if len(raw_timestamp) > MAX_TIMESTAMP_DIGITS:
        return VerificationError(
            VerificationFailure.MALFORMED_HEADER, "Signature header timestamp is out of range"
        )

    if not signatures:
        return VerificationError(
            VerificationFailure.MALFORMED_HEADER,
            f"Signature header has no {SIGNATURE_SCHEME} signatures",
        )

    return SignatureHeader(
        timestamp=int(raw_timestamp),
        raw_timestamp=raw_timestamp,
        signatures=tuple(signatures),
    )


def compute_signature(payload: bytes, secret: str, timestamp: int | str) -> str:
    """Compute the hex HMAC-SHA256 signature for a payload.

    Args:
        payload: The exact request body bytes.
        secret: The shared signing secret.
        timestamp: Unix seconds, as it appears in the header.

    Returns:
        Lowercase hex digest.
    """
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()


def build_signature_header(payload: bytes, secret: str, timestamp: int | None = None) -> str:
    """Build a valid signature header, e.g. for local testing tools.

    Args:
        payload: The exact request body bytes.
        secret: The shared signing secret.
        timestamp: Unix seconds, defaults to now.

    Returns:
        Header value in ``t=...,v1=...`` form.
    """
    if timestamp is None:
        timestamp = int(time.time())
    return f"t={timestamp},{SIGNATURE_SCHEME}={compute_signature(payload, secret, timestamp)}"


def verify_signature(
    payload: bytes,
    header: str,
    secret: str,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
    now: float | None = None,
) -> VerifiedPayload | VerificationError:
    """Verify that a payload was signed by the holder of ``secret``.

    The signature is checked before freshness, so a stale timestamp is only
    reported for deliveries that were otherwise authentic.

    Args:
        payload: The raw request body bytes, exactly as received.
        header: The signature header value.
        secret: The shared signing secret.
        tolerance_seconds: Allowed clock skew in either direction.
        now: Current unix time, defaults to ``time.time()``.

    Returns:
        VerifiedPayload wrapping the same bytes, or a VerificationError.
    """
    if not header:
        return VerificationError(VerificationFailure.MALFORMED_HEADER, "Signature header is empty")

    parsed = parse_signature_header(header)
    if isinstance(parsed, VerificationError):
        return parsed

    expected = compute_signature(payload, secret, parsed.raw_timestamp)
    # Check every candidate so timing does not reveal which one matched
    matched = False
    for candidate in parsed.signatures:
        if hmac.compare_digest(expected, candidate):
            matched = True

    if not matched:
        return VerificationError(
            VerificationFailure.SIGNATURE_MISMATCH,
            "No signature matches the expected signature for the payload",
        )

    current = time.time() if now is None else now
    if abs(current - parsed.timestamp) > tolerance_seconds:
        return VerificationError(
            VerificationFailure.STALE,
            f"Timestamp outside the tolerance zone of {tolerance_seconds}s",
        )

    return VerifiedPayload(body=payload, timestamp=parsed.timestamp, _mint=_MINT)
