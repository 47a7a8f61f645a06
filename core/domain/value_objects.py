"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class Email(ValueObject):
    """Email value object with validation. Stored lower-cased."""

    value: str

    def __post_init__(self):
        """Validate and normalize email format."""
        if not self.value or "@" not in self.value:
            raise ValueError(f"Invalid email address: {self.value}")
        object.__setattr__(self, "value", self.value.strip().lower())

    def __str__(self) -> str:
        """Return email as string."""
        return self.value


class ActorKind(Enum):
    """Who is executing an operation."""

    USER = "user"
    SERVICE = "service"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Actor(ValueObject):
    """
    Authorization context passed explicitly to every command.

    A user actor carries the identity id it acts as. A service actor
    carries the name of the background process that runs with elevated
    rights; it is never created implicitly.
    """

    kind: ActorKind
    identity_id: Optional[int] = None
    name: Optional[str] = None

    def __post_init__(self):
        if self.kind == ActorKind.USER and self.identity_id is None:
            raise ValueError("User actor requires an identity id")
        if self.kind == ActorKind.SERVICE and not self.name:
            raise ValueError("Service actor requires a name")

    @classmethod
    def user(cls, identity_id: int) -> "Actor":
        return cls(kind=ActorKind.USER, identity_id=identity_id)

    @classmethod
    def service(cls, name: str) -> "Actor":
        return cls(kind=ActorKind.SERVICE, name=name)

    @property
    def is_service(self) -> bool:
        return self.kind == ActorKind.SERVICE

    def __str__(self) -> str:
        if self.is_service:
            return f"service:{self.name}"
        return f"user:{self.identity_id}"


class MembershipRole(Enum):
    """Membership role value object."""

    ADMIN = "admin"
    MEMBER = "member"

    def __str__(self) -> str:
        """Return role as string."""
        return self.value


class MembershipStatus(Enum):
    """Membership status value object."""

    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class LicenseStatus(Enum):
    """License status as reported to organization members."""

    NO_LICENSE = "no_license"
    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"
    GRACE_PERIOD = "grace_period"
    EXPIRED = "expired"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class Severity(Enum):
    """Severity attached to a license status."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value


class RenewalType(Enum):
    """How a purchase or renewal changes the ledger."""

    STANDARD = "standard"
    EARLY_RENEWAL = "early_renewal"
    GRACE_PERIOD = "grace_period"
    NEW_PURCHASE = "new_purchase"
    PRORATED = "prorated"

    def __str__(self) -> str:
        """Return renewal type as string."""
        return self.value


class NotificationClass(Enum):
    """Expiry warning classes surfaced to organization admins."""

    THIRTY_DAY = "30_day"
    FOURTEEN_DAY = "14_day"
    SEVEN_DAY = "7_day"
    ONE_DAY = "1_day"
    EXPIRED = "expired"

    def __str__(self) -> str:
        return self.value
