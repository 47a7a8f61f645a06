"""
Serializers for organization API endpoints.
"""
from rest_framework import serializers

from core.domain.value_objects import MembershipRole


class InviteMemberRequestSerializer(serializers.Serializer):
    """Serializer for invite member request."""

    email = serializers.EmailField(required=True)
    role = serializers.ChoiceField(
        choices=[role.value for role in MembershipRole],
        required=False,
        default=MembershipRole.MEMBER.value,
    )


class AcceptInvitationRequestSerializer(serializers.Serializer):
    """Serializer for accept invitation request."""

    email = serializers.EmailField(required=True)
    organization_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class PurchaseLicensesRequestSerializer(serializers.Serializer):
    """Serializer for purchase request."""

    seats = serializers.IntegerField(required=True, min_value=1)
    license_class = serializers.CharField(required=False, default="standard", max_length=50)


class AddSeatsRequestSerializer(serializers.Serializer):
    """Serializer for add seats request."""

    seats = serializers.IntegerField(required=True, min_value=1)


class RenewLicenseRequestSerializer(serializers.Serializer):
    """Serializer for renew request; omit ``seats`` to keep the current total."""

    seats = serializers.IntegerField(required=False, allow_null=True, min_value=1, default=None)


class ScheduleLicenseChangeRequestSerializer(serializers.Serializer):
    """Serializer for a scheduled seat change."""

    total_seats = serializers.IntegerField(required=True, min_value=1)
    effective_at = serializers.DateTimeField(required=True)
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class MembershipDTOSerializer(serializers.Serializer):
    """Serializer for MembershipDTO."""

    id = serializers.UUIDField()
    organization_id = serializers.UUIDField()
    identity_id = serializers.IntegerField(allow_null=True)
    email = serializers.EmailField(allow_null=True)
    role = serializers.CharField()
    status = serializers.CharField()
    invited_at = serializers.DateTimeField()
    accepted_at = serializers.DateTimeField(allow_null=True)
    removed_at = serializers.DateTimeField(allow_null=True)


class LicenseStatusDTOSerializer(serializers.Serializer):
    """Serializer for LicenseStatusDTO."""

    organization_id = serializers.UUIDField()
    status = serializers.CharField()
    severity = serializers.CharField()
    days_remaining = serializers.IntegerField(allow_null=True)
    grace_days_left = serializers.IntegerField()
    expires_at = serializers.DateTimeField(allow_null=True)
    total_seats = serializers.IntegerField()
    used_seats = serializers.IntegerField()
    available_seats = serializers.IntegerField()
    can_add_member = serializers.BooleanField()


class ChargeRequestDTOSerializer(serializers.Serializer):
    """Serializer for ChargeRequestDTO."""

    organization_id = serializers.UUIDField()
    renewal_type = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    new_total_seats = serializers.IntegerField()
    expected_expiry = serializers.DateTimeField()
    subscription_ref = serializers.CharField()
    next_billing_date = serializers.DateTimeField(allow_null=True)
    status = serializers.CharField()


class ScheduledChangeSerializer(serializers.Serializer):
    """Serializer for a ledger entry's scheduled change."""

    organization_id = serializers.UUIDField()
    total_seats = serializers.IntegerField()
    used_seats = serializers.IntegerField()
    scheduled_total_seats = serializers.IntegerField()
    scheduled_change_at = serializers.DateTimeField()
    scheduled_change_note = serializers.CharField(allow_blank=True)


class RenewalRecordSerializer(serializers.Serializer):
    """Serializer for a renewal history record."""

    id = serializers.UUIDField()
    renewal_type = serializers.CharField()
    previous_expiry = serializers.DateTimeField(allow_null=True)
    new_expiry = serializers.DateTimeField()
    seats_before = serializers.IntegerField()
    seats_after = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    transaction_ref = serializers.CharField(allow_null=True)
    actor = serializers.CharField()
    created_at = serializers.DateTimeField()
