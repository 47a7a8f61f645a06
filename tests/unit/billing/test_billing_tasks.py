"""
Tests for the billing reconciliation task.
"""

import uuid

import pytest

from billing.domain.reconciliation import RETRIES_EXHAUSTED, ReconciliationEngine
from billing.infrastructure.models import DeadLetteredBillingEvent, ProcessedBillingEvent
from billing.tasks import reconcile_billing_event
from core.domain.exceptions import LedgerAlreadyExistsError
from licenses.infrastructure import ledger_operations


def _payload(event_type, organization_id, data):
    return {
        "event_id": f"evt_{uuid.uuid4().hex[:10]}",
        "event_type": event_type,
        "occurred_at": "2026-01-05T09:30:00Z",
        "data": {**data, "custom_data": {"organization_id": str(organization_id)}},
    }


@pytest.mark.django_db
class TestReconcileBillingEventTask:
    def test_purchase_is_reconciled(self, make_organization):
        organization = make_organization(is_trial=True, is_personal_trial=True)
        payload = _payload(
            "transaction.completed",
            organization.id,
            {"id": "txn_task", "subscription_id": "sub_task", "items": [{"quantity": 5}]},
        )

        result = reconcile_billing_event.apply(args=[payload]).get()

        assert result == {"event_id": payload["event_id"], "outcome": "applied"}
        assert ledger_operations.find(organization.id).total_seats == 5

    def test_redelivery_is_duplicate(self, make_organization):
        organization = make_organization()
        payload = _payload(
            "transaction.completed",
            organization.id,
            {"id": "txn_twice", "subscription_id": "sub_task", "items": [{"quantity": 2}]},
        )

        reconcile_billing_event.apply(args=[payload]).get()
        result = reconcile_billing_event.apply(args=[payload]).get()

        assert result["outcome"] == "duplicate"

    def test_exhausted_retries_dead_letter_without_marking_processed(self, make_organization):
        organization = make_organization()
        payload = _payload(
            "subscription.updated", organization.id, {"id": "sub_task", "items": [{"quantity": 3}]}
        )

        result = reconcile_billing_event.apply(args=[payload], retries=3).get()

        assert result == {"event_id": payload["event_id"], "outcome": "dead_lettered"}
        dead_letter = DeadLetteredBillingEvent.objects.get(event_id=payload["event_id"])
        assert dead_letter.reason == RETRIES_EXHAUSTED
        assert dead_letter.payload["event_type"] == "subscription.updated"
        assert not ProcessedBillingEvent.objects.filter(event_id=payload["event_id"]).exists()

    def test_ledger_creation_conflict_is_dead_lettered_when_retries_run_out(
        self, monkeypatch, make_organization
    ):
        organization = make_organization()
        payload = _payload(
            "transaction.completed",
            organization.id,
            {"id": "txn_conflict", "subscription_id": "sub_task", "items": [{"quantity": 2}]},
        )

        async def always_conflicts(engine, event):
            raise LedgerAlreadyExistsError()

        monkeypatch.setattr(ReconciliationEngine, "reconcile", always_conflicts)

        result = reconcile_billing_event.apply(args=[payload], retries=3).get()

        assert result == {"event_id": payload["event_id"], "outcome": "dead_lettered"}
        dead_letter = DeadLetteredBillingEvent.objects.get(event_id=payload["event_id"])
        assert dead_letter.reason == RETRIES_EXHAUSTED
        assert not ProcessedBillingEvent.objects.filter(event_id=payload["event_id"]).exists()
