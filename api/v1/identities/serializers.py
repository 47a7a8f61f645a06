"""
Serializers for identity callback endpoints.
"""
from rest_framework import serializers


class FirstSessionRequestSerializer(serializers.Serializer):
    """Serializer for the first-session callback."""

    identity_id = serializers.IntegerField(required=True, min_value=1)


class OrganizationDTOSerializer(serializers.Serializer):
    """Serializer for OrganizationDTO."""

    id = serializers.UUIDField()
    name = serializers.CharField()
    owner_identity_id = serializers.IntegerField(allow_null=True)
    is_trial = serializers.BooleanField()
    trial_expires_at = serializers.DateTimeField(allow_null=True)
    created = serializers.BooleanField()
