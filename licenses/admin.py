"""
Django admin configuration for licenses app.
"""
from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from licenses.infrastructure.models import (
    LicenseLedgerEntry,
    LicenseNotification,
    RenewalHistory,
)


@admin.register(LicenseLedgerEntry)
class LicenseLedgerEntryAdmin(admin.ModelAdmin):
    """
    Admin interface for the license ledger.

    Seat counters are read-only; they change only through conditional
    updates issued by the application layer.
    """

    list_display = [
        "organization",
        "license_class",
        "used_seats",
        "total_seats",
        "expiry_display",
        "scheduled_total_seats",
        "version",
    ]
    list_filter = ["license_class", "expires_at"]
    search_fields = ["organization__name", "subscription_ref"]
    readonly_fields = [
        "id",
        "organization",
        "total_seats",
        "used_seats",
        "expires_at",
        "version",
        "last_renewed_at",
        "seats_synced_at",
        "grace_period_start",
        "grace_period_end",
        "created_at",
        "updated_at",
    ]
    fieldsets = (
        (
            "Basic Information",
            {"fields": ("id", "organization", "license_class", "subscription_ref")},
        ),
        (
            "Seats",
            {"fields": ("total_seats", "used_seats", "seats_synced_at", "version")},
        ),
        (
            "Term",
            {
                "fields": (
                    "expires_at",
                    "last_renewed_at",
                    "grace_period_start",
                    "grace_period_end",
                ),
            },
        ),
        (
            "Scheduled Change",
            {"fields": ("scheduled_total_seats", "scheduled_change_at", "scheduled_change_note")},
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def has_add_permission(self, request):
        return False

    def expiry_display(self, obj):
        """Display expiry, red once passed."""
        if obj.expires_at <= timezone.now():
            return format_html('<span style="color: red;">{}</span>', obj.expires_at)
        return obj.expires_at

    expiry_display.short_description = "Expires"

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("organization")


@admin.register(RenewalHistory)
class RenewalHistoryAdmin(admin.ModelAdmin):
    """Append-only view of ledger term changes."""

    list_display = [
        "organization",
        "renewal_type",
        "seats_before",
        "seats_after",
        "new_expiry",
        "amount",
        "actor",
        "created_at",
    ]
    list_filter = ["renewal_type", "created_at"]
    search_fields = ["organization__name", "transaction_ref", "actor"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(LicenseNotification)
class LicenseNotificationAdmin(admin.ModelAdmin):
    """Admin interface for expiry notification markers."""

    list_display = ["organization", "notification_class", "notified_on", "days_remaining"]
    list_filter = ["notification_class", "notified_on"]
    search_fields = ["organization__name"]
    readonly_fields = ["created_at"]
