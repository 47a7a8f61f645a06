"""
Django admin configuration for billing app.
"""
from django.contrib import admin

from billing.infrastructure.models import DeadLetteredBillingEvent, ProcessedBillingEvent


@admin.register(ProcessedBillingEvent)
class ProcessedBillingEventAdmin(admin.ModelAdmin):
    """Admin interface for ProcessedBillingEvent model."""

    list_display = ["event_id", "event_type", "organization_id", "outcome", "processed_at"]
    list_filter = ["event_type", "outcome", "processed_at"]
    search_fields = ["event_id", "organization_id"]
    readonly_fields = ["id", "event_id", "event_type", "organization_id", "outcome", "processed_at"]

    def has_add_permission(self, request):
        """Markers are written by reconciliation only."""
        return False


@admin.register(DeadLetteredBillingEvent)
class DeadLetteredBillingEventAdmin(admin.ModelAdmin):
    """Admin interface for DeadLetteredBillingEvent model."""

    list_display = ["event_id", "event_type", "reason", "created_at", "resolved_at"]
    list_filter = ["reason", "resolved_at", "created_at"]
    search_fields = ["event_id", "organization_id", "error_message"]
    readonly_fields = [
        "id",
        "event_id",
        "event_type",
        "organization_id",
        "reason",
        "error_message",
        "payload",
        "created_at",
    ]
    actions = ["mark_resolved"]

    @admin.action(description="Mark selected events as resolved")
    def mark_resolved(self, request, queryset):
        from django.utils import timezone

        queryset.filter(resolved_at__isnull=True).update(resolved_at=timezone.now())
