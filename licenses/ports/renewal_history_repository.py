"""
Renewal history repository port (interface).
"""
import uuid
from abc import ABC, abstractmethod
from typing import List

from licenses.domain.history import RenewalRecord


class RenewalHistoryRepository(ABC):
    """Append-only store for renewal records."""

    @abstractmethod
    async def append(self, record: RenewalRecord) -> RenewalRecord:
        pass

    @abstractmethod
    async def exists_for_transaction(self, transaction_ref: str) -> bool:
        pass

    @abstractmethod
    async def list_for_organization(self, organization_id: uuid.UUID) -> List[RenewalRecord]:
        pass
