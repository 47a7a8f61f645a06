"""
License purchase handlers.

Handlers for purchase, add-seats, renew and scheduled seat change commands.
Purchases only request a charge from the billing provider; the ledger is
updated when the provider's signed confirmation is reconciled.
"""
import logging
import uuid
from typing import Optional

from django.utils import timezone

from billing.ports.billing_provider import BillingProvider, LineItem, ProrationMode
from core.domain.exceptions import LedgerNotFoundError, ValidationError
from core.domain.value_objects import Actor, RenewalType
from licenses.application.commands.add_seats import AddSeatsCommand
from licenses.application.commands.purchase_licenses import PurchaseLicensesCommand
from licenses.application.commands.renew_license import RenewLicenseCommand
from licenses.application.commands.schedule_license_change import ScheduleLicenseChangeCommand
from licenses.application.dto.license_dto import ChargeRequestDTO
from licenses.domain.ledger import LedgerEntry
from licenses.domain.renewal import RenewalCalculator, RenewalQuote
from licenses.ports.ledger_repository import LedgerRepository
from memberships.domain.services import MembershipAuthorization
from memberships.ports.membership_repository import MembershipRepository

logger = logging.getLogger(__name__)


class _ChargeRequestingHandler:
    """Shared plumbing for commands that ask the billing provider for money."""

    def __init__(
        self,
        ledger_repository: LedgerRepository,
        membership_repository: MembershipRepository,
        billing_provider: BillingProvider,
        calculator: Optional[RenewalCalculator] = None,
    ):
        """Initialize handler with repositories and the billing provider."""
        self.ledger_repository = ledger_repository
        self.membership_repository = membership_repository
        self.billing_provider = billing_provider
        self.calculator = calculator or RenewalCalculator()

    async def _request_charge(
        self,
        actor: Actor,
        organization_id: uuid.UUID,
        ledger: Optional[LedgerEntry],
        quote: RenewalQuote,
        line_items,
        proration_mode: ProrationMode,
        license_class: str,
    ) -> ChargeRequestDTO:
        custom_data = {
            "organization_id": str(organization_id),
            "user_id": actor.identity_id,
            "license_class": license_class,
            "renewal_type": quote.renewal_type.value,
            "prorated": quote.renewal_type == RenewalType.PRORATED,
        }
        if ledger is not None and quote.renewal_type == RenewalType.PRORATED:
            custom_data["added_seats"] = quote.new_total_seats - ledger.total_seats
        result = await self.billing_provider.create_or_modify_subscription(
            ledger.subscription_ref if ledger else None,
            line_items,
            proration_mode,
            custom_data=custom_data,
        )
        logger.info(
            "Requested %s charge of %s for organization %s",
            quote.renewal_type.value,
            quote.amount,
            organization_id,
            extra={
                "organization_id": str(organization_id),
                "renewal_type": quote.renewal_type.value,
                "subscription_ref": result.subscription_ref,
            },
        )
        return ChargeRequestDTO.from_quote(
            organization_id, quote, result.subscription_ref, result.next_billing_date
        )


class PurchaseLicensesHandler(_ChargeRequestingHandler):
    """Handler for PurchaseLicensesCommand."""

    async def handle(self, command: PurchaseLicensesCommand) -> ChargeRequestDTO:
        """
        Handle purchase licenses command.

        A first purchase is a new purchase; a purchase against an existing
        ledger is priced as a renewal of ``seats`` seats.

        Raises:
            NotAuthorizedError: If the actor is not an admin
            ValidationError: If seats are below one or below seats in use
            ProviderUnavailableError: If the billing provider cannot be reached
        """
        await MembershipAuthorization.require_admin(
            command.actor, command.organization_id, self.membership_repository
        )
        now = timezone.now()
        ledger = await self.ledger_repository.find_by_organization(command.organization_id)
        if ledger is None:
            quote = self.calculator.quote_new_purchase(command.seats, now)
        else:
            quote = self.calculator.quote_renewal(ledger, now, new_total_seats=command.seats)

        return await self._request_charge(
            command.actor,
            command.organization_id,
            ledger,
            quote,
            [LineItem(quantity=quote.new_total_seats, license_class=command.license_class)],
            ProrationMode.FULL_IMMEDIATELY,
            command.license_class,
        )


class RenewLicenseHandler(_ChargeRequestingHandler):
    """Handler for RenewLicenseCommand."""

    async def handle(self, command: RenewLicenseCommand) -> ChargeRequestDTO:
        """
        Handle renew license command.

        Raises:
            LedgerNotFoundError: If the organization never purchased
        """
        await MembershipAuthorization.require_admin(
            command.actor, command.organization_id, self.membership_repository
        )
        ledger = await self.ledger_repository.find_by_organization(command.organization_id)
        if ledger is None:
            raise LedgerNotFoundError("Nothing to renew; purchase a license first")

        quote = self.calculator.quote_renewal(ledger, timezone.now(), new_total_seats=command.seats)
        return await self._request_charge(
            command.actor,
            command.organization_id,
            ledger,
            quote,
            [LineItem(quantity=quote.new_total_seats, license_class=ledger.license_class)],
            ProrationMode.FULL_IMMEDIATELY,
            ledger.license_class,
        )


class AddSeatsHandler(_ChargeRequestingHandler):
    """Handler for AddSeatsCommand."""

    async def handle(self, command: AddSeatsCommand) -> ChargeRequestDTO:
        """
        Handle add seats command.

        Raises:
            LedgerNotFoundError: If the organization never purchased
            LicenseExpiredError: If the license is expired
        """
        await MembershipAuthorization.require_admin(
            command.actor, command.organization_id, self.membership_repository
        )
        ledger = await self.ledger_repository.find_by_organization(command.organization_id)
        if ledger is None:
            raise LedgerNotFoundError("Purchase a license before adding seats")

        quote = self.calculator.quote_seat_addition(ledger, command.seats, timezone.now())
        return await self._request_charge(
            command.actor,
            command.organization_id,
            ledger,
            quote,
            # subscription line items carry the full seat count; the provider bills the delta
            [LineItem(quantity=quote.new_total_seats, license_class=ledger.license_class)],
            ProrationMode.PRORATED_IMMEDIATELY,
            ledger.license_class,
        )


class ScheduleLicenseChangeHandler:
    """Handler for ScheduleLicenseChangeCommand."""

    def __init__(
        self,
        ledger_repository: LedgerRepository,
        membership_repository: MembershipRepository,
    ):
        """Initialize handler with repositories."""
        self.ledger_repository = ledger_repository
        self.membership_repository = membership_repository

    async def handle(self, command: ScheduleLicenseChangeCommand) -> LedgerEntry:
        """
        Handle schedule license change command.

        Raises:
            ValidationError: If the date is not in the future or seats are below one
        """
        await MembershipAuthorization.require_admin(
            command.actor, command.organization_id, self.membership_repository
        )
        if command.total_seats < 1:
            raise ValidationError("At least one seat is required")
        if command.effective_at <= timezone.now():
            raise ValidationError("Scheduled changes must take effect in the future")

        ledger = await self.ledger_repository.find_by_organization(command.organization_id)
        if ledger is None:
            raise LedgerNotFoundError()
        if command.total_seats < ledger.used_seats:
            raise ValidationError(
                f"{ledger.used_seats} seat(s) are in use; remove members first",
                code="SEATS_BELOW_USAGE",
            )
        return await self.ledger_repository.schedule_change(
            command.organization_id, command.total_seats, command.effective_at, command.note
        )
