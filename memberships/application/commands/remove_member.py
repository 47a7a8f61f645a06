"""
RemoveMemberCommand.
"""

import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class RemoveMemberCommand:
    """Command to remove an active member from an organization."""

    actor: Actor
    organization_id: uuid.UUID
    identity_id: int
