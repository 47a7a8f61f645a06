"""
AcceptInvitationCommand.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from core.domain.value_objects import Actor


@dataclass
class AcceptInvitationCommand:
    """Command for the acting identity to accept an invitation sent to its email."""

    actor: Actor
    email: str
    organization_id: Optional[uuid.UUID] = None
