"""
GetLicenseStatusHandler.

Handler for reading an organization's license status.
"""
from datetime import datetime, timedelta
from typing import Optional

from django.utils import timezone

from core.domain.value_objects import LicenseStatus
from licenses.application.dto.license_dto import LicenseStatusDTO
from licenses.application.queries.get_license_status import GetLicenseStatusQuery
from licenses.domain.ledger import GRACE_PERIOD_DAYS
from licenses.domain.status import evaluate_status
from licenses.ports.ledger_repository import LedgerRepository
from memberships.domain.services import MembershipAuthorization
from memberships.ports.membership_repository import MembershipRepository


class GetLicenseStatusHandler:
    """Handler for GetLicenseStatusQuery."""

    def __init__(
        self,
        ledger_repository: LedgerRepository,
        membership_repository: MembershipRepository,
    ):
        """Initialize handler with repositories."""
        self.ledger_repository = ledger_repository
        self.membership_repository = membership_repository

    async def handle(
        self, query: GetLicenseStatusQuery, now: Optional[datetime] = None
    ) -> LicenseStatusDTO:
        """
        Handle get license status query.

        The first read that finds the license inside its grace period
        records the grace window on the ledger.

        Args:
            query: GetLicenseStatusQuery
            now: Evaluation time (defaults to the current time)

        Returns:
            LicenseStatusDTO

        Raises:
            NotAuthorizedError: If the actor is not a member
        """
        await MembershipAuthorization.require_member(
            query.actor, query.organization_id, self.membership_repository
        )
        now = now or timezone.now()
        ledger = await self.ledger_repository.find_by_organization(query.organization_id)
        report = evaluate_status(ledger, now)

        if report.status == LicenseStatus.GRACE_PERIOD and ledger.grace_period_start is None:
            await self.ledger_repository.open_grace_window(
                query.organization_id,
                ledger.expires_at,
                ledger.expires_at + timedelta(days=GRACE_PERIOD_DAYS),
            )

        return LicenseStatusDTO.from_report(query.organization_id, report)
