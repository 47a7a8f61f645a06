"""
Organization domain entity.

An organization owns at most one license ledger entry and the memberships
that consume its seats. Personal trial organizations are provisioned
automatically for newly registered identities.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Optional

TRIAL_PERIOD_DAYS = 14
PERSONAL_TRIAL_NAME = "Personal Trial - {email}"


@dataclass(frozen=True)
class Organization:
    """
    Organization domain entity.

    This is an immutable value object; state changes return new instances.
    """

    id: uuid.UUID
    name: str
    owner_identity_id: Optional[int]
    is_trial: bool
    trial_expires_at: Optional[datetime]
    is_personal_trial: bool
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        """Validate organization entity."""
        if not self.name or len(self.name.strip()) == 0:
            raise ValueError("Organization name cannot be empty")
        if len(self.name) > 255:
            raise ValueError("Organization name too long")
        if self.is_trial and self.trial_expires_at is None:
            raise ValueError("Trial organizations require a trial expiry")

    @classmethod
    def create(
        cls,
        name: str,
        owner_identity_id: Optional[int],
        now: Optional[datetime] = None,
        organization_id: Optional[uuid.UUID] = None,
    ) -> "Organization":
        """
        Create a paid (non-trial) organization.

        Args:
            name: Display name
            owner_identity_id: Identity that owns the organization
            now: Creation time (defaults to current UTC time)
            organization_id: Optional UUID (generated if not provided)

        Returns:
            Organization entity instance
        """
        now = now or datetime.now(timezone.utc)
        return cls(
            id=organization_id or uuid.uuid4(),
            name=name.strip(),
            owner_identity_id=owner_identity_id,
            is_trial=False,
            trial_expires_at=None,
            is_personal_trial=False,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def create_personal_trial(
        cls, owner_identity_id: int, email: str, now: datetime
    ) -> "Organization":
        """Create the personal trial organization for a new identity."""
        return cls(
            id=uuid.uuid4(),
            name=PERSONAL_TRIAL_NAME.format(email=email),
            owner_identity_id=owner_identity_id,
            is_trial=True,
            trial_expires_at=now + timedelta(days=TRIAL_PERIOD_DAYS),
            is_personal_trial=True,
            created_at=now,
            updated_at=now,
        )

    def is_trial_expired(self, now: datetime) -> bool:
        """Check whether the trial window has passed."""
        return self.is_trial and self.trial_expires_at is not None and self.trial_expires_at < now

    def promote(self, now: datetime) -> "Organization":
        """Return a copy converted from trial to paid, keeping its id."""
        return replace(self, is_trial=False, updated_at=now)
