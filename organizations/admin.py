"""
Django admin configuration for organizations app.
"""
from django.contrib import admin

from organizations.infrastructure.models import Organization


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    """Admin interface for Organization model."""

    list_display = [
        "name",
        "owner",
        "is_trial",
        "is_personal_trial",
        "trial_expires_at",
        "created_at",
    ]
    list_filter = ["is_trial", "is_personal_trial", "created_at"]
    search_fields = ["name", "owner__email", "owner__username"]
    readonly_fields = ["id", "created_at", "updated_at"]
    fieldsets = (
        ("Basic Information", {"fields": ("id", "name", "owner")}),
        ("Trial", {"fields": ("is_trial", "is_personal_trial", "trial_expires_at")}),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("owner")
