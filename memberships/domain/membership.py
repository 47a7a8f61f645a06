"""
Membership domain entity.

A membership binds an identity (or, while an invitation is pending, only an
email) to an organization. Records are never deleted; they move between
pending, active and inactive so that the audit trail survives.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from core.domain.value_objects import MembershipRole, MembershipStatus


@dataclass(frozen=True)
class Membership:
    """Membership domain entity."""

    id: uuid.UUID
    organization_id: uuid.UUID
    identity_id: Optional[int]
    email: Optional[str]
    role: MembershipRole
    status: MembershipStatus
    invited_at: datetime
    accepted_at: Optional[datetime] = None
    removed_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate membership entity."""
        if self.identity_id is None and not self.email:
            raise ValueError("Membership requires an identity or an email")
        if self.status == MembershipStatus.PENDING and self.identity_id is not None:
            raise ValueError("Pending memberships are not bound to an identity")
        if self.status != MembershipStatus.PENDING and self.identity_id is None:
            raise ValueError(f"{self.status.value} memberships require an identity")

    @classmethod
    def create_active(
        cls,
        organization_id: uuid.UUID,
        identity_id: int,
        email: Optional[str],
        role: MembershipRole,
        now: datetime,
    ) -> "Membership":
        """Create a membership for a known identity."""
        return cls(
            id=uuid.uuid4(),
            organization_id=organization_id,
            identity_id=identity_id,
            email=email,
            role=role,
            status=MembershipStatus.ACTIVE,
            invited_at=now,
            accepted_at=now,
        )

    @classmethod
    def create_pending(
        cls,
        organization_id: uuid.UUID,
        email: str,
        role: MembershipRole,
        now: datetime,
    ) -> "Membership":
        """Create an invitation for an email with no identity yet."""
        return cls(
            id=uuid.uuid4(),
            organization_id=organization_id,
            identity_id=None,
            email=email,
            role=role,
            status=MembershipStatus.PENDING,
            invited_at=now,
        )

    @property
    def is_active(self) -> bool:
        return self.status == MembershipStatus.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.role == MembershipRole.ADMIN

    def accept(self, identity_id: int, now: datetime) -> "Membership":
        """Bind an identity to a pending invitation."""
        if self.status != MembershipStatus.PENDING:
            raise ValueError("Only pending memberships can be accepted")
        return replace(
            self, identity_id=identity_id, status=MembershipStatus.ACTIVE, accepted_at=now
        )

    def deactivate(self, now: datetime) -> "Membership":
        """Move an active membership to inactive."""
        if self.status != MembershipStatus.ACTIVE:
            raise ValueError("Only active memberships can be removed")
        return replace(self, status=MembershipStatus.INACTIVE, removed_at=now)

    def reactivate(self, role: MembershipRole, now: datetime) -> "Membership":
        """Move an inactive membership back to active."""
        if self.status != MembershipStatus.INACTIVE:
            raise ValueError("Only inactive memberships can be reactivated")
        return replace(
            self,
            role=role,
            status=MembershipStatus.ACTIVE,
            invited_at=now,
            accepted_at=now,
            removed_at=None,
        )
