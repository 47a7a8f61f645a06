"""
PurchaseLicensesCommand.

Command to buy seats for an organization, or re-buy them at renewal.
"""

import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class PurchaseLicensesCommand:
    """Command to purchase ``seats`` seats of ``license_class``."""

    actor: Actor
    organization_id: uuid.UUID
    seats: int
    license_class: str = "standard"
