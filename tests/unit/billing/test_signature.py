"""
Unit tests for billing notification signatures.
"""

from datetime import datetime, timezone

import pytest

from billing.domain.signature import generate_signature, parse_signature_header, verify_signature
from core.domain.exceptions import InvalidSignatureError

SECRET = "whsec-test"
BODY = b'{"event_id": "evt_1"}'
SIGNED_AT = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)
TS = str(int(SIGNED_AT.timestamp()))


def _header(body=BODY, ts=TS, secret=SECRET):
    return f"ts={ts};h1={generate_signature(body, ts, secret)}"


class TestVerifySignature:
    """Tests for verify_signature."""

    def test_valid_signature(self):
        verify_signature(BODY, _header(), SECRET, now=SIGNED_AT, tolerance_seconds=300)

    def test_tampered_body(self):
        with pytest.raises(InvalidSignatureError):
            verify_signature(BODY + b" ", _header(), SECRET)

    def test_wrong_secret(self):
        with pytest.raises(InvalidSignatureError):
            verify_signature(BODY, _header(secret="other"), SECRET)

    def test_missing_header(self):
        with pytest.raises(InvalidSignatureError):
            verify_signature(BODY, None, SECRET)

    def test_unconfigured_secret_rejects_everything(self):
        with pytest.raises(InvalidSignatureError):
            verify_signature(BODY, _header(secret=""), "")

    def test_stale_timestamp(self):
        later = datetime(2025, 5, 1, 12, 10, tzinfo=timezone.utc)

        with pytest.raises(InvalidSignatureError):
            verify_signature(BODY, _header(), SECRET, now=later, tolerance_seconds=300)

    def test_tolerance_disabled(self):
        later = datetime(2026, 5, 1, tzinfo=timezone.utc)

        verify_signature(BODY, _header(), SECRET, now=later, tolerance_seconds=0)


@pytest.mark.parametrize("header", ["", "ts=1", "h1=abc", "garbage"])
def test_malformed_headers(header):
    with pytest.raises(InvalidSignatureError):
        parse_signature_header(header)


def test_header_parts_may_be_spaced():
    assert parse_signature_header("ts=12; h1=abc") == ("12", "abc")
