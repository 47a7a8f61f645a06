"""
Identity provider port.

Account storage and session issuance are owned by the identity provider;
the membership core only needs to create and look up identities.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """A registered identity as seen by the membership core."""

    id: int
    email: str
    display_name: str = ""


class IdentityProvider(ABC):
    """Abstract identity provider."""

    @abstractmethod
    async def create_account(self, email: str, password: str, display_name: str = "") -> Identity:
        """
        Register a new identity.

        Raises:
            ValidationError: If the email is already registered
        """
        pass

    @abstractmethod
    async def lookup_by_email(self, email: str) -> Optional[Identity]:
        pass

    @abstractmethod
    async def get(self, identity_id: int) -> Optional[Identity]:
        pass
