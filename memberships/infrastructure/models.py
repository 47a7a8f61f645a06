"""
Membership model.
"""
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q


class Membership(models.Model):
    """
    Binds an identity (or a pending email) to an organization.

    The partial unique constraints below serialize concurrent invites and
    accepts for the same pair.
    """

    ROLE_CHOICES = [
        ("admin", "Admin"),
        ("member", "Member"),
    ]
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("active", "Active"),
        ("inactive", "Inactive"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        "organizations.Organization", on_delete=models.CASCADE, related_name="memberships"
    )
    identity = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="memberships",
    )
    email = models.EmailField(null=True, blank=True, db_index=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="member")
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="pending")
    invited_at = models.DateTimeField()
    accepted_at = models.DateTimeField(null=True, blank=True)
    removed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "memberships"
        ordering = ["invited_at"]
        indexes = [
            models.Index(fields=["organization", "status"]),
            models.Index(fields=["identity", "status"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["identity", "organization"],
                condition=Q(status="active"),
                name="unique_active_membership",
            ),
            models.UniqueConstraint(
                fields=["email", "organization"],
                condition=Q(status="pending"),
                name="unique_pending_invitation",
            ),
        ]

    def __str__(self):
        return f"{self.email or self.identity_id} @ {self.organization_id} ({self.status})"
