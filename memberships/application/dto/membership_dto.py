"""
Data Transfer Objects for membership operations.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from memberships.domain.membership import Membership


@dataclass
class MembershipDTO:
    """DTO for a membership record."""

    id: uuid.UUID
    organization_id: uuid.UUID
    identity_id: Optional[int]
    email: Optional[str]
    role: str
    status: str
    invited_at: datetime
    accepted_at: Optional[datetime]
    removed_at: Optional[datetime]

    @classmethod
    def from_entity(cls, membership: Membership) -> "MembershipDTO":
        return cls(
            id=membership.id,
            organization_id=membership.organization_id,
            identity_id=membership.identity_id,
            email=membership.email,
            role=membership.role.value,
            status=membership.status.value,
            invited_at=membership.invited_at,
            accepted_at=membership.accepted_at,
            removed_at=membership.removed_at,
        )
