"""
Organization model.
"""
import uuid

from django.conf import settings
from django.db import models


class Organization(models.Model):
    """
    A customer organization.

    Created as a personal trial at first login or at first purchase.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="owned_organizations",
    )
    is_trial = models.BooleanField(default=False)
    trial_expires_at = models.DateTimeField(null=True, blank=True)
    is_personal_trial = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "organizations"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "is_personal_trial"]),
            models.Index(fields=["is_trial", "trial_expires_at"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["owner"],
                condition=models.Q(is_personal_trial=True),
                name="unique_personal_trial_per_owner",
            ),
        ]

    def __str__(self):
        return self.name
