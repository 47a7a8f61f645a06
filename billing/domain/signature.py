"""
Billing notification signature verification.

The provider signs ``"{ts}:{raw_body}"`` with HMAC-SHA256 and sends
``Paddle-Signature: ts=<unix seconds>;h1=<hex digest>``.
"""
import hashlib
import hmac
import logging
from datetime import datetime
from typing import Optional, Tuple

from core.domain.exceptions import InvalidSignatureError

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "Paddle-Signature"


def generate_signature(raw_body: bytes, timestamp: str, secret: str) -> str:
    """
    Generate the HMAC signature for a notification body.

    Args:
        raw_body: Request body exactly as received
        timestamp: Unix timestamp from the signature header
        secret: Shared webhook secret

    Returns:
        HMAC SHA-256 signature (hex)
    """
    signed_payload = timestamp.encode() + b":" + raw_body
    return hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()


def parse_signature_header(header: Optional[str]) -> Tuple[str, str]:
    """Split a ``ts=...;h1=...`` header into (timestamp, signature)."""
    if not header:
        raise InvalidSignatureError("Missing signature header")
    parts = {}
    for chunk in header.split(";"):
        key, sep, value = chunk.strip().partition("=")
        if sep:
            parts[key] = value
    if not parts.get("ts") or not parts.get("h1"):
        raise InvalidSignatureError("Malformed signature header")
    return parts["ts"], parts["h1"]


def verify_signature(
    raw_body: bytes,
    header: Optional[str],
    secret: str,
    now: Optional[datetime] = None,
    tolerance_seconds: int = 0,
) -> None:
    """
    Verify a notification signature in constant time.

    Args:
        raw_body: Request body exactly as received
        header: Value of the signature header
        secret: Shared webhook secret
        now: Current time, required when ``tolerance_seconds`` is set
        tolerance_seconds: Maximum accepted age of the signature (0 disables)

    Raises:
        InvalidSignatureError: If the signature is missing, stale or wrong
    """
    if not secret:
        raise InvalidSignatureError("Webhook secret is not configured")
    timestamp, received = parse_signature_header(header)

    expected = generate_signature(raw_body, timestamp, secret)
    if not hmac.compare_digest(expected, received):
        raise InvalidSignatureError()

    if tolerance_seconds and now is not None:
        try:
            signed_at = int(timestamp)
        except ValueError as exc:
            raise InvalidSignatureError("Malformed signature timestamp") from exc
        if abs(now.timestamp() - signed_at) > tolerance_seconds:
            raise InvalidSignatureError("Signature timestamp outside tolerance")
