"""
Billing API views.

The billing provider is the only caller. It needs nothing but an
accept/reject answer: reconciliation runs in a Celery task after the
notification is verified and parsed.
"""
import json
import logging

from django.conf import settings
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.billing.serializers import BillingWebhookResponseSerializer
from billing.domain.signature import SIGNATURE_HEADER, verify_signature
from billing.infrastructure.payload_parser import parse_billing_event
from billing.tasks import reconcile_billing_event
from core.domain.exceptions import MalformedBillingEventError, UnsupportedBillingEventError
from core.metrics import billing_events_total

logger = logging.getLogger(__name__)


class BillingWebhookView(APIView):
    """Receives signed billing notifications."""

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        operation_id="billing_webhook",
        summary="Billing Notification",
        description=(
            "Signed notification from the billing provider. The signature covers "
            "the raw body and is checked before the payload is parsed."
        ),
        tags=["Billing"],
        parameters=[
            OpenApiParameter(
                name=SIGNATURE_HEADER,
                location=OpenApiParameter.HEADER,
                required=True,
                description="ts=<unix time>;h1=<hex HMAC-SHA256 of 'ts:body'>",
            )
        ],
        request={"application/json": {"type": "object"}},
        responses={
            200: BillingWebhookResponseSerializer,
            400: {"description": "Malformed notification"},
            401: {"description": "Missing or invalid signature"},
        },
    )
    def post(self, request: Request) -> Response:
        raw_body = request.body
        verify_signature(
            raw_body,
            request.headers.get(SIGNATURE_HEADER),
            settings.BILLING_WEBHOOK_SECRET,
            now=timezone.now(),
            tolerance_seconds=settings.BILLING_SIGNATURE_TOLERANCE_SECONDS,
        )

        try:
            payload = json.loads(raw_body)
        except ValueError as exc:
            raise MalformedBillingEventError("Body is not valid JSON") from exc

        try:
            event = parse_billing_event(payload)
        except UnsupportedBillingEventError as exc:
            billing_events_total.labels(
                event_type=str(payload.get("event_type")), outcome="ignored"
            ).inc()
            logger.info(exc.message, extra={"event_id": payload.get("event_id")})
            return Response({"status": "ignored", "event_id": payload.get("event_id")})

        reconcile_billing_event.delay(payload)
        logger.info(
            "Billing event %s accepted",
            event.event_id,
            extra={"event_id": event.event_id, "event_type": event.event_type},
        )
        return Response({"status": "accepted", "event_id": event.event_id})
