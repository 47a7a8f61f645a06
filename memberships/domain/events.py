"""
Membership domain events.
"""

import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class MemberInvited(DomainEvent):
    """Event raised when an email is invited and no identity exists yet."""

    def __init__(
        self,
        membership_id: uuid.UUID,
        organization_id: uuid.UUID,
        email: str,
        role: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(membership_id), occurred_at=occurred_at)
        self.membership_id = membership_id
        self.organization_id = organization_id
        self.email = email
        self.role = role

    def payload(self):
        return {
            "organization_id": str(self.organization_id),
            "email": self.email,
            "role": self.role,
        }


class MemberActivated(DomainEvent):
    """Event raised when a membership becomes active and consumes a seat."""

    def __init__(
        self,
        membership_id: uuid.UUID,
        organization_id: uuid.UUID,
        identity_id: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(membership_id), occurred_at=occurred_at)
        self.membership_id = membership_id
        self.organization_id = organization_id
        self.identity_id = identity_id

    def payload(self):
        return {"organization_id": str(self.organization_id), "identity_id": self.identity_id}


class MemberRemoved(DomainEvent):
    """Event raised when an active membership is deactivated."""

    def __init__(
        self,
        membership_id: uuid.UUID,
        organization_id: uuid.UUID,
        identity_id: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(membership_id), occurred_at=occurred_at)
        self.membership_id = membership_id
        self.organization_id = organization_id
        self.identity_id = identity_id

    def payload(self):
        return {"organization_id": str(self.organization_id), "identity_id": self.identity_id}
