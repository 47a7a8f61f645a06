"""
License ledger, renewal history and notification models.
"""
import uuid

from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class LicenseLedgerEntry(models.Model):
    """
    Per-organization seat and expiry ledger.

    Seat counters are only changed through conditional ``UPDATE``
    statements; the check constraint is the last line of defence for
    ``used_seats <= total_seats``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.OneToOneField(
        "organizations.Organization", on_delete=models.CASCADE, related_name="ledger"
    )
    total_seats = models.PositiveIntegerField()
    used_seats = models.PositiveIntegerField(default=1)
    license_class = models.CharField(max_length=50, default="standard")
    expires_at = models.DateTimeField(db_index=True)
    subscription_ref = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    grace_period_start = models.DateTimeField(null=True, blank=True)
    grace_period_end = models.DateTimeField(null=True, blank=True)
    last_renewed_at = models.DateTimeField(null=True, blank=True)
    seats_synced_at = models.DateTimeField(
        null=True, blank=True, help_text="Occurrence time of the last applied seat-count sync"
    )
    version = models.PositiveIntegerField(default=1)
    scheduled_total_seats = models.PositiveIntegerField(null=True, blank=True)
    scheduled_change_at = models.DateTimeField(null=True, blank=True)
    scheduled_change_note = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "license_ledger"
        ordering = ["expires_at"]
        indexes = [
            models.Index(fields=["scheduled_change_at"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(used_seats__lte=F("total_seats")),
                name="ledger_used_seats_lte_total",
            ),
        ]

    def __str__(self):
        return f"{self.organization_id}: {self.used_seats}/{self.total_seats}"


class RenewalHistory(models.Model):
    """
    Append-only record of ledger term and seat changes.
    """

    RENEWAL_TYPE_CHOICES = [
        ("standard", "Standard"),
        ("early_renewal", "Early renewal"),
        ("grace_period", "Grace period"),
        ("new_purchase", "New purchase"),
        ("prorated", "Prorated"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        "organizations.Organization", on_delete=models.CASCADE, related_name="renewal_history"
    )
    renewal_type = models.CharField(max_length=20, choices=RENEWAL_TYPE_CHOICES)
    previous_expiry = models.DateTimeField(null=True, blank=True)
    new_expiry = models.DateTimeField()
    seats_before = models.PositiveIntegerField(default=0)
    seats_after = models.PositiveIntegerField()
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    transaction_ref = models.CharField(max_length=255, null=True, blank=True, unique=True)
    actor = models.CharField(max_length=255)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "license_renewal_history"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["organization", "created_at"]),
        ]

    def __str__(self):
        return f"{self.organization_id} {self.renewal_type} -> {self.new_expiry}"


class LicenseNotification(models.Model):
    """
    Marker that an expiry warning class was surfaced on a given date.
    """

    CLASS_CHOICES = [
        ("30_day", "30 days"),
        ("14_day", "14 days"),
        ("7_day", "7 days"),
        ("1_day", "1 day"),
        ("expired", "Expired"),
    ]

    id = models.BigAutoField(primary_key=True)
    organization = models.ForeignKey(
        "organizations.Organization", on_delete=models.CASCADE, related_name="license_notifications"
    )
    ledger = models.ForeignKey(
        LicenseLedgerEntry, on_delete=models.CASCADE, related_name="notifications"
    )
    notification_class = models.CharField(max_length=10, choices=CLASS_CHOICES)
    notified_on = models.DateField()
    days_remaining = models.IntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "license_notifications"
        ordering = ["-notified_on"]
        unique_together = [["organization", "ledger", "notification_class", "notified_on"]]

    def __str__(self):
        return f"{self.organization_id} {self.notification_class} on {self.notified_on}"
