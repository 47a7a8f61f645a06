"""
InviteMemberCommand.
"""

import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor, MembershipRole


@dataclass
class InviteMemberCommand:
    """Command to invite an email into an organization."""

    actor: Actor
    organization_id: uuid.UUID
    email: str
    role: MembershipRole = MembershipRole.MEMBER
