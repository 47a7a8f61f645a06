"""
Serializers for billing API endpoints.
"""
from rest_framework import serializers


class BillingWebhookResponseSerializer(serializers.Serializer):
    """Acknowledgement returned to the billing provider."""

    status = serializers.ChoiceField(choices=["accepted", "ignored"])
    event_id = serializers.CharField(allow_null=True)
