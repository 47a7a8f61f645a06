"""
Billing reconciliation models.
"""
import uuid

from django.db import models
from django.utils import timezone


class ProcessedBillingEvent(models.Model):
    """
    Dedupe marker for a billing notification.

    Written in the same transaction as the ledger mutation it caused, so a
    marker exists if and only if the event's effect is visible.
    """

    OUTCOME_CHOICES = [
        ("applied", "Applied"),
        ("stale", "Stale"),
        ("dead_lettered", "Dead-lettered"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=100)
    organization_id = models.UUIDField(null=True, blank=True, db_index=True)
    outcome = models.CharField(max_length=20, choices=OUTCOME_CHOICES, default="applied")
    processed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "billing_processed_events"
        ordering = ["-processed_at"]

    def __str__(self):
        return f"{self.event_type} {self.event_id} ({self.outcome})"


class DeadLetteredBillingEvent(models.Model):
    """
    Billing notification that could not be applied and needs an operator.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_id = models.CharField(max_length=255, db_index=True)
    event_type = models.CharField(max_length=100)
    organization_id = models.UUIDField(null=True, blank=True)
    reason = models.CharField(max_length=100)
    error_message = models.TextField(blank=True, default="")
    payload = models.JSONField(default=dict)
    created_at = models.DateTimeField(default=timezone.now)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "billing_dead_letters"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["reason", "resolved_at"]),
        ]

    def __str__(self):
        return f"{self.event_id}: {self.reason}"
