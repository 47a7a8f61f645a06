"""
RenewLicenseCommand.

Command to renew a license for another term.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from core.domain.value_objects import Actor


@dataclass
class RenewLicenseCommand:
    """Command to renew a license, optionally changing the seat count."""

    actor: Actor
    organization_id: uuid.UUID
    seats: Optional[int] = None
