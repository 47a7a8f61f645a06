"""
ScheduleLicenseChangeCommand.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime

from core.domain.value_objects import Actor


@dataclass
class ScheduleLicenseChangeCommand:
    """Command to change the total seat count at a future date."""

    actor: Actor
    organization_id: uuid.UUID
    total_seats: int
    effective_at: datetime
    note: str = ""
