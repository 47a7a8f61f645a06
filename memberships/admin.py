"""
Django admin configuration for memberships app.

Memberships are read-only here: seat accounting lives in the license
ledger and is only kept consistent through the application handlers.
"""
from django.contrib import admin
from django.utils.html import format_html

from memberships.infrastructure.models import Membership


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    """Admin interface for Membership model."""

    list_display = ["member", "organization", "role", "status_display", "invited_at", "accepted_at"]
    list_filter = ["status", "role", "invited_at"]
    search_fields = ["email", "identity__email", "organization__name"]
    readonly_fields = [
        "id",
        "organization",
        "identity",
        "email",
        "role",
        "status",
        "invited_at",
        "accepted_at",
        "removed_at",
        "updated_at",
    ]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def member(self, obj):
        return obj.email or obj.identity_id

    member.short_description = "Member"

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {"active": "green", "pending": "orange", "inactive": "gray"}
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(obj.status, "black"),
            obj.status.upper(),
        )

    status_display.short_description = "Status"

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("organization", "identity")
