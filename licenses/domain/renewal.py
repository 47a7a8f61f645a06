"""
Renewal and proration calculator.

Everything here is a pure function of the ledger state, the requested seat
change and the current time. Callers apply the resulting quote to the
ledger and append a renewal history record.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from core.domain.exceptions import LicenseExpiredError, ValidationError
from core.domain.value_objects import RenewalType
from licenses.domain.ledger import GRACE_PERIOD_DAYS, LICENSE_TERM_DAYS, LedgerEntry
from licenses.domain.status import WARNING_WINDOW_DAYS, days_remaining

DEFAULT_ANNUAL_SEAT_PRICE = Decimal("200.00")
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class RenewalQuote:
    """Outcome of a renewal or seat change, before it is applied."""

    renewal_type: RenewalType
    new_expiry: datetime
    amount: Decimal
    new_total_seats: int


def determine_renewal_type(expires_at: datetime, now: datetime, seat_delta: int = 0) -> RenewalType:
    """
    Pick the renewal type for a ledger that expires at ``expires_at``.

    Args:
        expires_at: Current ledger expiry
        now: Evaluation time
        seat_delta: Seats added to the running cycle (0 for a plain renewal)

    Returns:
        RenewalType
    """
    if expires_at < now - timedelta(days=GRACE_PERIOD_DAYS):
        return RenewalType.NEW_PURCHASE
    if expires_at < now:
        return RenewalType.GRACE_PERIOD
    if seat_delta > 0:
        return RenewalType.PRORATED
    if days_remaining(expires_at, now) <= WARNING_WINDOW_DAYS:
        return RenewalType.EARLY_RENEWAL
    return RenewalType.STANDARD


def calculate_prorated_amount(
    annual_price: Decimal, remaining_days: int, added_seats: int
) -> Decimal:
    """
    Price of ``added_seats`` for the rest of the current cycle.

    ``(annual_price / 365) * remaining_days * added_seats``, rounded half-up
    to cents.
    """
    if remaining_days <= 0 or added_seats <= 0:
        return Decimal("0.00")
    amount = Decimal(annual_price) / LICENSE_TERM_DAYS * remaining_days * added_seats
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_new_expiry(
    renewal_type: RenewalType, expires_at: Optional[datetime], now: datetime
) -> datetime:
    """Expiry after applying ``renewal_type``."""
    term = timedelta(days=LICENSE_TERM_DAYS)
    if renewal_type == RenewalType.PRORATED:
        return expires_at
    if renewal_type in (RenewalType.STANDARD, RenewalType.GRACE_PERIOD):
        return expires_at + term
    # early renewal and new purchases start a fresh term today
    return now + term


class RenewalCalculator:
    """Quotes renewals, seat additions and first purchases."""

    def __init__(self, annual_seat_price: Decimal = DEFAULT_ANNUAL_SEAT_PRICE):
        self.annual_seat_price = Decimal(annual_seat_price)

    def _full_price(self, seats: int) -> Decimal:
        return (self.annual_seat_price * seats).quantize(CENTS, rounding=ROUND_HALF_UP)

    def quote_new_purchase(self, seats: int, now: datetime) -> RenewalQuote:
        """Quote the first purchase for an organization without a ledger."""
        if seats < 1:
            raise ValidationError("At least one seat must be purchased")
        return RenewalQuote(
            renewal_type=RenewalType.NEW_PURCHASE,
            new_expiry=calculate_new_expiry(RenewalType.NEW_PURCHASE, None, now),
            amount=self._full_price(seats),
            new_total_seats=seats,
        )

    def quote_renewal(
        self, ledger: LedgerEntry, now: datetime, new_total_seats: Optional[int] = None
    ) -> RenewalQuote:
        """
        Quote a renewal of the whole license.

        Args:
            ledger: Current ledger entry
            now: Renewal time
            new_total_seats: Seats for the new term (defaults to the current total)

        Returns:
            RenewalQuote

        Raises:
            ValidationError: If the new total is below the seats in use
        """
        seats = ledger.total_seats if new_total_seats is None else new_total_seats
        if seats < 1:
            raise ValidationError("At least one seat must be purchased")
        if seats < ledger.used_seats:
            raise ValidationError(
                f"Cannot renew {seats} seat(s) while {ledger.used_seats} are in use",
                code="SEATS_BELOW_USAGE",
            )
        renewal_type = determine_renewal_type(ledger.expires_at, now)
        return RenewalQuote(
            renewal_type=renewal_type,
            new_expiry=calculate_new_expiry(renewal_type, ledger.expires_at, now),
            amount=self._full_price(seats),
            new_total_seats=seats,
        )

    def quote_seat_addition(
        self, ledger: LedgerEntry, added_seats: int, now: datetime
    ) -> RenewalQuote:
        """
        Quote adding seats to the running cycle.

        Raises:
            ValidationError: If ``added_seats`` is not positive
            LicenseExpiredError: If the license is already expired
        """
        if added_seats < 1:
            raise ValidationError("At least one seat must be added")
        if ledger.is_expired(now):
            raise LicenseExpiredError("Seats cannot be added to an expired license; renew first")
        remaining = days_remaining(ledger.expires_at, now)
        return RenewalQuote(
            renewal_type=RenewalType.PRORATED,
            new_expiry=ledger.expires_at,
            amount=calculate_prorated_amount(self.annual_seat_price, remaining, added_seats),
            new_total_seats=ledger.total_seats + added_seats,
        )
