"""
Organization domain events.
"""

import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class TrialOrganizationProvisioned(DomainEvent):
    """Event raised when a personal trial organization is created."""

    def __init__(
        self,
        organization_id: uuid.UUID,
        owner_identity_id: int,
        trial_expires_at: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(organization_id), occurred_at=occurred_at)
        self.organization_id = organization_id
        self.owner_identity_id = owner_identity_id
        self.trial_expires_at = trial_expires_at

    def payload(self):
        return {
            "owner_identity_id": self.owner_identity_id,
            "trial_expires_at": self.trial_expires_at.isoformat(),
        }


class TrialOrganizationRemoved(DomainEvent):
    """Event raised when an abandoned personal trial organization is deleted."""

    def __init__(
        self,
        organization_id: uuid.UUID,
        owner_identity_id: Optional[int],
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(organization_id), occurred_at=occurred_at)
        self.organization_id = organization_id
        self.owner_identity_id = owner_identity_id

    def payload(self):
        return {"owner_identity_id": self.owner_identity_id}
