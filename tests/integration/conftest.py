"""
Fixtures for API integration tests.
"""

import json
import time
import uuid

import pytest
from django.utils import timezone

from billing.domain.signature import generate_signature

WEBHOOK_URL = "/api/v1/billing/webhook"
WEBHOOK_SECRET = "test-webhook-secret"


@pytest.fixture
def billing_provider(monkeypatch, fake_billing_provider):
    monkeypatch.setattr(
        "api.v1.organizations.views.get_billing_provider", lambda: fake_billing_provider
    )
    return fake_billing_provider


@pytest.fixture
def post_webhook(api_client):
    """Sign and post a billing notification the way the provider does."""

    def _post_webhook(payload, secret=WEBHOOK_SECRET, timestamp=None):
        raw = json.dumps(payload).encode()
        timestamp = timestamp or str(int(time.time()))
        header = f"ts={timestamp};h1={generate_signature(raw, timestamp, secret)}"
        return api_client.post(
            WEBHOOK_URL, data=raw, content_type="application/json", HTTP_PADDLE_SIGNATURE=header
        )

    return _post_webhook


@pytest.fixture
def purchase_notification():
    """Builds a ``transaction.completed`` body echoing a charge request's custom data."""

    def _purchase_notification(custom_data, quantity, transaction_ref=None, total="100000"):
        return {
            "event_id": f"evt_{uuid.uuid4().hex[:12]}",
            "event_type": "transaction.completed",
            "occurred_at": timezone.now().isoformat(),
            "data": {
                "id": transaction_ref or f"txn_{uuid.uuid4().hex[:12]}",
                "subscription_id": "sub_fake",
                "items": [{"quantity": quantity, "price": {"id": "pri_standard_test"}}],
                "details": {"totals": {"total": total, "currency_code": "USD"}},
                "custom_data": custom_data,
            },
        }

    return _purchase_notification
