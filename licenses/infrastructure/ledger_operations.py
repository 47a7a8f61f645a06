"""
Atomic ledger writes.

Each function issues one conditional ``UPDATE`` (or ``INSERT``) and checks
the affected-row count. They are synchronous so they can be composed inside
a caller's ``transaction.atomic()`` block; ``DjangoLedgerRepository`` wraps
them for async callers.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from core.domain.exceptions import (
    LedgerAlreadyExistsError,
    LedgerNotFoundError,
    SeatInvariantViolationError,
    SeatLimitExceededError,
    WriteConflictError,
)
from licenses.domain.ledger import LedgerEntry
from licenses.infrastructure.models import LicenseLedgerEntry as LedgerModel


def to_domain(model: LedgerModel) -> LedgerEntry:
    """Convert a ledger row to a domain entity."""
    return LedgerEntry(
        id=model.id,
        organization_id=model.organization_id,
        total_seats=model.total_seats,
        used_seats=model.used_seats,
        license_class=model.license_class,
        expires_at=model.expires_at,
        subscription_ref=model.subscription_ref,
        created_at=model.created_at,
        updated_at=model.updated_at,
        grace_period_start=model.grace_period_start,
        grace_period_end=model.grace_period_end,
        last_renewed_at=model.last_renewed_at,
        seats_synced_at=model.seats_synced_at,
        version=model.version,
        scheduled_total_seats=model.scheduled_total_seats,
        scheduled_change_at=model.scheduled_change_at,
        scheduled_change_note=model.scheduled_change_note,
    )


def _rows(organization_id: uuid.UUID):
    return LedgerModel.objects.filter(organization_id=organization_id)


def _reload(organization_id: uuid.UUID) -> LedgerEntry:
    model = _rows(organization_id).first()
    if model is None:
        raise LedgerNotFoundError(f"No license found for organization {organization_id}")
    return to_domain(model)


def find(organization_id: uuid.UUID) -> Optional[LedgerEntry]:
    model = _rows(organization_id).first()
    return to_domain(model) if model else None


def find_all() -> List[LedgerEntry]:
    return [to_domain(model) for model in LedgerModel.objects.all()]


def create(entry: LedgerEntry) -> LedgerEntry:
    try:
        with transaction.atomic():
            model = LedgerModel.objects.create(
                id=entry.id,
                organization_id=entry.organization_id,
                total_seats=entry.total_seats,
                used_seats=entry.used_seats,
                license_class=entry.license_class,
                expires_at=entry.expires_at,
                subscription_ref=entry.subscription_ref,
                last_renewed_at=entry.last_renewed_at,
                seats_synced_at=entry.seats_synced_at,
            )
    except IntegrityError as exc:
        raise LedgerAlreadyExistsError() from exc
    return to_domain(model)


def increment_used(organization_id: uuid.UUID) -> LedgerEntry:
    updated = _rows(organization_id).filter(used_seats__lt=F("total_seats")).update(
        used_seats=F("used_seats") + 1, updated_at=timezone.now()
    )
    if not updated:
        entry = _reload(organization_id)
        raise SeatLimitExceededError(
            f"All {entry.total_seats} seat(s) are in use; purchase more seats to add members"
        )
    return _reload(organization_id)


def decrement_used(organization_id: uuid.UUID) -> LedgerEntry:
    # the owner's seat is never released
    _rows(organization_id).filter(used_seats__gt=1).update(
        used_seats=F("used_seats") - 1, updated_at=timezone.now()
    )
    return _reload(organization_id)


def set_total(organization_id: uuid.UUID, total_seats: int) -> LedgerEntry:
    updated = _rows(organization_id).filter(used_seats__lte=total_seats).update(
        total_seats=total_seats, updated_at=timezone.now()
    )
    if not updated:
        entry = _reload(organization_id)
        raise SeatInvariantViolationError(
            f"Cannot set total seats to {total_seats} while {entry.used_seats} are in use"
        )
    return _reload(organization_id)


def set_expiry(
    organization_id: uuid.UUID,
    expires_at: datetime,
    subscription_ref: Optional[str],
    expected_version: Optional[int] = None,
) -> LedgerEntry:
    rows = _rows(organization_id)
    if expected_version is not None:
        rows = rows.filter(version=expected_version)
    changes = {
        "expires_at": expires_at,
        "version": F("version") + 1,
        "updated_at": timezone.now(),
    }
    if subscription_ref is not None:
        changes["subscription_ref"] = subscription_ref
    if not rows.update(**changes):
        _reload(organization_id)
        raise WriteConflictError()
    return _reload(organization_id)


def apply_renewal(
    organization_id: uuid.UUID,
    total_seats: int,
    expires_at: datetime,
    subscription_ref: Optional[str],
    renewed_at: datetime,
    expected_version: int,
) -> LedgerEntry:
    changes = {
        "total_seats": total_seats,
        "expires_at": expires_at,
        "last_renewed_at": renewed_at,
        "grace_period_start": None,
        "grace_period_end": None,
        "version": F("version") + 1,
        "updated_at": timezone.now(),
    }
    if subscription_ref is not None:
        changes["subscription_ref"] = subscription_ref
    updated = (
        _rows(organization_id)
        .filter(version=expected_version, used_seats__lte=total_seats)
        .update(**changes)
    )
    if not updated:
        entry = _reload(organization_id)
        if entry.version != expected_version:
            raise WriteConflictError()
        raise SeatInvariantViolationError(
            f"Cannot renew with {total_seats} seat(s) while {entry.used_seats} are in use"
        )
    return _reload(organization_id)


def sync_total(
    organization_id: uuid.UUID,
    total_seats: int,
    observed_at: datetime,
    subscription_ref: Optional[str] = None,
) -> Optional[LedgerEntry]:
    changes = {
        "total_seats": total_seats,
        "seats_synced_at": observed_at,
        "updated_at": timezone.now(),
    }
    if subscription_ref is not None:
        changes["subscription_ref"] = subscription_ref
    updated = (
        _rows(organization_id)
        .filter(Q(seats_synced_at__isnull=True) | Q(seats_synced_at__lte=observed_at))
        .filter(used_seats__lte=total_seats)
        .update(**changes)
    )
    if updated:
        return _reload(organization_id)
    entry = _reload(organization_id)
    if entry.seats_synced_at is not None and entry.seats_synced_at > observed_at:
        return None
    raise SeatInvariantViolationError(
        f"Billing reports {total_seats} seat(s) but {entry.used_seats} are in use"
    )


def open_grace_window(organization_id: uuid.UUID, start: datetime, end: datetime) -> bool:
    updated = _rows(organization_id).filter(grace_period_start__isnull=True).update(
        grace_period_start=start, grace_period_end=end, updated_at=timezone.now()
    )
    return updated == 1


def schedule_change(
    organization_id: uuid.UUID, total_seats: int, effective_at: datetime, note: str = ""
) -> LedgerEntry:
    if not _rows(organization_id).update(
        scheduled_total_seats=total_seats,
        scheduled_change_at=effective_at,
        scheduled_change_note=note,
        updated_at=timezone.now(),
    ):
        _reload(organization_id)
    return _reload(organization_id)


def find_due_scheduled_changes(now: datetime) -> List[LedgerEntry]:
    models = LedgerModel.objects.filter(
        scheduled_total_seats__isnull=False, scheduled_change_at__lte=now
    )
    return [to_domain(model) for model in models]


def clear_scheduled_change(organization_id: uuid.UUID) -> None:
    _rows(organization_id).update(
        scheduled_total_seats=None,
        scheduled_change_at=None,
        scheduled_change_note="",
        updated_at=timezone.now(),
    )
