"""
ListRenewalHistoryHandler.

Handler for reading the append-only renewal history of a license.
"""
from typing import List

from licenses.application.queries.list_renewal_history import ListRenewalHistoryQuery
from licenses.domain.history import RenewalRecord
from licenses.ports.renewal_history_repository import RenewalHistoryRepository
from memberships.domain.services import MembershipAuthorization
from memberships.ports.membership_repository import MembershipRepository


class ListRenewalHistoryHandler:
    """Handler for ListRenewalHistoryQuery."""

    def __init__(
        self,
        renewal_history_repository: RenewalHistoryRepository,
        membership_repository: MembershipRepository,
    ):
        self.renewal_history_repository = renewal_history_repository
        self.membership_repository = membership_repository

    async def handle(self, query: ListRenewalHistoryQuery) -> List[RenewalRecord]:
        """
        Raises:
            NotAuthorizedError: If the actor is not an admin of the organization
        """
        await MembershipAuthorization.require_admin(
            query.actor, query.organization_id, self.membership_repository
        )
        return await self.renewal_history_repository.list_for_organization(query.organization_id)
