"""
GetLicenseStatusQuery.

Query to read an organization's license status.
"""

import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class GetLicenseStatusQuery:
    """Query for license status."""

    actor: Actor
    organization_id: uuid.UUID
