"""
Data Transfer Objects for organization operations.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from organizations.domain.organization import Organization


@dataclass
class OrganizationDTO:
    """DTO for an organization."""

    id: uuid.UUID
    name: str
    owner_identity_id: Optional[int]
    is_trial: bool
    trial_expires_at: Optional[datetime]
    created: bool = False

    @classmethod
    def from_entity(cls, organization: Organization, created: bool = False) -> "OrganizationDTO":
        return cls(
            id=organization.id,
            name=organization.name,
            owner_identity_id=organization.owner_identity_id,
            is_trial=organization.is_trial,
            trial_expires_at=organization.trial_expires_at,
            created=created,
        )
