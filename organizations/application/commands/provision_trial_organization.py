"""
ProvisionTrialOrganizationCommand.
"""

from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class ProvisionTrialOrganizationCommand:
    """Command issued on an identity's first successful session."""

    actor: Actor
    identity_id: int
