"""
AddSeatsCommand.

Command to add seats to the running license cycle at a prorated price.
"""

import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class AddSeatsCommand:
    """Command to add ``seats`` seats mid-cycle."""

    actor: Actor
    organization_id: uuid.UUID
    seats: int
