"""
Billing payload parser.

Maps the provider's loosely-typed JSON notifications to the typed variants
in ``billing.domain.events``. Unknown event types are rejected as
unsupported; known types with missing or invalid fields are malformed.
"""
from decimal import Decimal
from typing import Any, Dict

from rest_framework import serializers

from billing.domain.events import (
    PURCHASE_CONFIRMED,
    SUBSCRIPTION_SEATS_UPDATED,
    BillingEvent,
    PurchaseConfirmed,
    SubscriptionSeatsUpdated,
)
from core.domain.exceptions import MalformedBillingEventError, UnsupportedBillingEventError

SUPPORTED_EVENT_TYPES = (PURCHASE_CONFIRMED, SUBSCRIPTION_SEATS_UPDATED)

# the provider sends both spellings depending on the checkout integration
CUSTOM_DATA_ALIASES = {
    "organizationId": "organization_id",
    "userId": "user_id",
    "organizationName": "organization_name",
    "licenseClass": "license_class",
    "addedSeats": "added_seats",
    "scheduledChange": "scheduled_change",
}


class EnvelopeSerializer(serializers.Serializer):
    event_id = serializers.CharField(max_length=255)
    event_type = serializers.CharField(max_length=100)
    occurred_at = serializers.DateTimeField()
    data = serializers.DictField()


class LineItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0)


class CustomDataSerializer(serializers.Serializer):
    organization_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    user_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    prorated = serializers.BooleanField(required=False, default=False)
    scheduled_change = serializers.BooleanField(required=False, default=False)
    added_seats = serializers.IntegerField(
        required=False, allow_null=True, min_value=1, default=None
    )
    license_class = serializers.CharField(required=False, default="standard", max_length=50)
    organization_name = serializers.CharField(required=False, allow_blank=True, default="")


class TransactionSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=255)
    subscription_id = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, default=None
    )
    items = LineItemSerializer(many=True, allow_empty=False)
    details = serializers.DictField(required=False, default=dict)

    def validate(self, attrs):
        if sum(item["quantity"] for item in attrs["items"]) < 1:
            raise serializers.ValidationError("A purchase must include at least one seat")
        return attrs


class SubscriptionSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=255)
    items = LineItemSerializer(many=True)


def _validated(serializer: serializers.Serializer, what: str) -> Dict[str, Any]:
    if not serializer.is_valid():
        raise MalformedBillingEventError(f"Invalid {what}: {serializer.errors}")
    return serializer.validated_data


def _custom_data(data: Dict[str, Any]) -> Dict[str, Any]:
    raw = data.get("custom_data") or {}
    if not isinstance(raw, dict):
        raise MalformedBillingEventError("custom_data must be an object")
    normalized = {CUSTOM_DATA_ALIASES.get(key, key): value for key, value in raw.items()}
    return _validated(CustomDataSerializer(data=normalized), "custom_data")


def _amount(details: Dict[str, Any]):
    total = (details.get("totals") or {}).get("total")
    if total in (None, ""):
        return None
    try:
        # totals are reported in minor units
        return (Decimal(str(total)) / 100).quantize(Decimal("0.01"))
    except ArithmeticError as exc:
        raise MalformedBillingEventError(f"Invalid transaction total: {total!r}") from exc


def _purchased_quantity(custom: Dict[str, Any], items) -> int:
    # prorated line items carry the new subscription total, not the delta
    if custom["prorated"]:
        if custom["added_seats"] is None:
            raise MalformedBillingEventError(
                "custom_data.added_seats is required for a prorated purchase"
            )
        return custom["added_seats"]
    return sum(item["quantity"] for item in items)


def parse_billing_event(payload: Dict[str, Any]) -> BillingEvent:
    """
    Parse a verified notification body into a typed billing event.

    Args:
        payload: Decoded JSON body

    Returns:
        PurchaseConfirmed or SubscriptionSeatsUpdated

    Raises:
        UnsupportedBillingEventError: If the event type is not reconciled
        MalformedBillingEventError: If required fields are missing or invalid
    """
    if not isinstance(payload, dict):
        raise MalformedBillingEventError("Billing payload must be an object")
    event_type = payload.get("event_type")
    if event_type not in SUPPORTED_EVENT_TYPES:
        raise UnsupportedBillingEventError(f"Unsupported billing event type: {event_type}")

    envelope = _validated(EnvelopeSerializer(data=payload), "billing event")
    data = envelope["data"]
    custom = _custom_data(data)
    common = {
        "event_id": envelope["event_id"],
        "event_type": event_type,
        "occurred_at": envelope["occurred_at"],
        "organization_id": custom["organization_id"],
        "payload": payload,
    }

    if event_type == PURCHASE_CONFIRMED:
        transaction = _validated(TransactionSerializer(data=data), "transaction")
        if custom["organization_id"] is None and custom["user_id"] is None:
            raise MalformedBillingEventError(
                "custom_data must identify the organization or the purchasing user"
            )
        return PurchaseConfirmed(
            **common,
            transaction_ref=transaction["id"],
            subscription_ref=transaction["subscription_id"] or None,
            identity_id=custom["user_id"],
            quantity=_purchased_quantity(custom, transaction["items"]),
            license_class=custom["license_class"],
            prorated=custom["prorated"],
            scheduled_change=custom["scheduled_change"],
            amount=_amount(transaction["details"]),
            organization_name=custom["organization_name"],
        )

    subscription = _validated(SubscriptionSerializer(data=data), "subscription")
    if custom["organization_id"] is None:
        raise MalformedBillingEventError("custom_data.organization_id is required")
    return SubscriptionSeatsUpdated(
        **common,
        subscription_ref=subscription["id"],
        line_item_quantities=tuple(item["quantity"] for item in subscription["items"]),
    )
