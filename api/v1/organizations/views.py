"""
Organization API views.

Admin-facing endpoints for membership and license management. Every
request runs as the signed-in identity; authorization is decided by the
handlers from the identity's membership in the organization.
"""
import uuid

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.organizations.serializers import (
    AcceptInvitationRequestSerializer,
    AddSeatsRequestSerializer,
    ChargeRequestDTOSerializer,
    InviteMemberRequestSerializer,
    LicenseStatusDTOSerializer,
    MembershipDTOSerializer,
    PurchaseLicensesRequestSerializer,
    RenewalRecordSerializer,
    RenewLicenseRequestSerializer,
    ScheduleLicenseChangeRequestSerializer,
    ScheduledChangeSerializer,
)
from billing.infrastructure.http_billing_provider import get_billing_provider
from core.domain.value_objects import Actor, MembershipRole
from licenses.application.commands.add_seats import AddSeatsCommand
from licenses.application.commands.purchase_licenses import PurchaseLicensesCommand
from licenses.application.commands.renew_license import RenewLicenseCommand
from licenses.application.commands.schedule_license_change import ScheduleLicenseChangeCommand
from licenses.application.handlers.get_license_status_handler import GetLicenseStatusHandler
from licenses.application.handlers.license_purchase_handlers import (
    AddSeatsHandler,
    PurchaseLicensesHandler,
    RenewLicenseHandler,
    ScheduleLicenseChangeHandler,
)
from licenses.application.handlers.list_renewal_history_handler import ListRenewalHistoryHandler
from licenses.application.queries.get_license_status import GetLicenseStatusQuery
from licenses.application.queries.list_renewal_history import ListRenewalHistoryQuery
from licenses.domain.renewal import RenewalCalculator
from licenses.infrastructure.repositories.django_ledger_repository import DjangoLedgerRepository
from licenses.infrastructure.repositories.django_renewal_history_repository import (
    DjangoRenewalHistoryRepository,
)
from memberships.application.commands.accept_invitation import AcceptInvitationCommand
from memberships.application.commands.invite_member import InviteMemberCommand
from memberships.application.commands.remove_member import RemoveMemberCommand
from memberships.application.handlers.membership_handlers import (
    AcceptInvitationHandler,
    InviteMemberHandler,
    ListMembersHandler,
    RemoveMemberHandler,
)
from memberships.domain.services import MembershipLifecycleManager
from memberships.infrastructure.identity.django_identity_provider import DjangoIdentityProvider
from memberships.infrastructure.repositories.django_membership_repository import (
    DjangoMembershipRepository,
)
from organizations.infrastructure.repositories.django_organization_repository import (
    DjangoOrganizationRepository,
)

# Initialize repositories (in production, use DI container)
_ledger_repo = DjangoLedgerRepository()
_membership_repo = DjangoMembershipRepository()
_organization_repo = DjangoOrganizationRepository()
_renewal_history_repo = DjangoRenewalHistoryRepository()
_identity_provider = DjangoIdentityProvider()


def _lifecycle_manager() -> MembershipLifecycleManager:
    return MembershipLifecycleManager(
        membership_repository=_membership_repo,
        ledger_repository=_ledger_repo,
        identity_provider=_identity_provider,
    )


def _charge_handler(handler_class):
    return handler_class(
        ledger_repository=_ledger_repo,
        membership_repository=_membership_repo,
        billing_provider=get_billing_provider(),
        calculator=RenewalCalculator(settings.LICENSE_ANNUAL_SEAT_PRICE),
    )


def _actor(request: Request) -> Actor:
    return Actor.user(request.user.pk)


def _invalid(serializer) -> Response:
    return Response(
        {"error": {"code": "VALIDATION_ERROR", "message": serializer.errors}},
        status=status.HTTP_400_BAD_REQUEST,
    )


ERROR_RESPONSES = {
    400: {"description": "Bad Request"},
    403: {"description": "Forbidden - not an admin of the organization"},
    404: {"description": "Not Found"},
}


class MemberListView(APIView):
    """List members of an organization, or invite a new one."""

    @extend_schema(
        operation_id="list_members",
        summary="List Members",
        tags=["Organizations"],
        responses={200: MembershipDTOSerializer(many=True), **ERROR_RESPONSES},
    )
    def get(self, request: Request, organization_id: uuid.UUID) -> Response:
        handler = ListMembersHandler(membership_repository=_membership_repo)
        members = async_to_sync(handler.handle)(_actor(request), organization_id)
        return Response(MembershipDTOSerializer(members, many=True).data)

    @extend_schema(
        operation_id="invite_member",
        summary="Invite Member",
        description=(
            "Invite an email into the organization. A registered identity is "
            "activated at once and consumes a seat; an unknown email gets a "
            "pending invitation that consumes a seat only when accepted."
        ),
        tags=["Organizations"],
        request=InviteMemberRequestSerializer,
        responses={
            201: MembershipDTOSerializer,
            409: {"description": "Already a member or already invited"},
            422: {"description": "No seat available or license expired"},
            **ERROR_RESPONSES,
        },
    )
    def post(self, request: Request, organization_id: uuid.UUID) -> Response:
        serializer = InviteMemberRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        command = InviteMemberCommand(
            actor=_actor(request),
            organization_id=organization_id,
            email=serializer.validated_data["email"],
            role=MembershipRole(serializer.validated_data["role"]),
        )
        membership = async_to_sync(InviteMemberHandler(_lifecycle_manager()).handle)(command)
        return Response(MembershipDTOSerializer(membership).data, status=status.HTTP_201_CREATED)


class MemberDetailView(APIView):
    """Remove an active member."""

    @extend_schema(
        operation_id="remove_member",
        summary="Remove Member",
        description="Deactivate a member and release their seat. The owner cannot be removed.",
        tags=["Organizations"],
        responses={
            200: MembershipDTOSerializer,
            409: {"description": "Not an active member, or the organization owner"},
            **ERROR_RESPONSES,
        },
    )
    def delete(self, request: Request, organization_id: uuid.UUID, identity_id: int) -> Response:
        handler = RemoveMemberHandler(
            lifecycle_manager=_lifecycle_manager(), organization_repository=_organization_repo
        )
        command = RemoveMemberCommand(
            actor=_actor(request), organization_id=organization_id, identity_id=identity_id
        )
        membership = async_to_sync(handler.handle)(command)
        return Response(MembershipDTOSerializer(membership).data)


class AcceptInvitationView(APIView):
    """Accept a pending invitation sent to the signed-in identity's email."""

    @extend_schema(
        operation_id="accept_invitation",
        summary="Accept Invitation",
        tags=["Organizations"],
        request=AcceptInvitationRequestSerializer,
        responses={
            200: MembershipDTOSerializer,
            409: {"description": "No pending invitation"},
            422: {"description": "No seat available"},
            **ERROR_RESPONSES,
        },
    )
    def post(self, request: Request) -> Response:
        serializer = AcceptInvitationRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        command = AcceptInvitationCommand(
            actor=_actor(request),
            email=serializer.validated_data["email"],
            organization_id=serializer.validated_data["organization_id"],
        )
        membership = async_to_sync(AcceptInvitationHandler(_lifecycle_manager()).handle)(command)
        return Response(MembershipDTOSerializer(membership).data)


class LicenseStatusView(APIView):
    """Read the license status of an organization."""

    @extend_schema(
        operation_id="get_license_status",
        summary="License Status",
        description="Status, severity and days remaining, evaluated at request time.",
        tags=["Organizations"],
        responses={200: LicenseStatusDTOSerializer, **ERROR_RESPONSES},
    )
    def get(self, request: Request, organization_id: uuid.UUID) -> Response:
        handler = GetLicenseStatusHandler(
            ledger_repository=_ledger_repo, membership_repository=_membership_repo
        )
        query = GetLicenseStatusQuery(actor=_actor(request), organization_id=organization_id)
        report = async_to_sync(handler.handle)(query)
        return Response(LicenseStatusDTOSerializer(report).data)


class _ChargeView(APIView):
    """Base for endpoints that request a charge from the billing provider."""

    request_serializer_class = None
    handler_class = None

    def build_command(self, actor: Actor, organization_id: uuid.UUID, data: dict):
        raise NotImplementedError

    def post(self, request: Request, organization_id: uuid.UUID) -> Response:
        serializer = self.request_serializer_class(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        command = self.build_command(_actor(request), organization_id, serializer.validated_data)
        charge = async_to_sync(_charge_handler(self.handler_class).handle)(command)
        return Response(ChargeRequestDTOSerializer(charge).data, status=status.HTTP_202_ACCEPTED)


CHARGE_RESPONSES = {
    202: ChargeRequestDTOSerializer,
    422: {"description": "License expired"},
    503: {"description": "Billing provider unavailable; the charge state is unknown"},
    **ERROR_RESPONSES,
}


class PurchaseLicensesView(_ChargeView):
    """Purchase the first license for an organization."""

    request_serializer_class = PurchaseLicensesRequestSerializer
    handler_class = PurchaseLicensesHandler

    def build_command(self, actor, organization_id, data):
        return PurchaseLicensesCommand(
            actor=actor,
            organization_id=organization_id,
            seats=data["seats"],
            license_class=data["license_class"],
        )

    @extend_schema(
        operation_id="purchase_licenses",
        summary="Purchase Licenses",
        description=(
            "Request a charge for the first license. The ledger is created when "
            "the billing provider confirms the purchase."
        ),
        tags=["Organizations"],
        request=PurchaseLicensesRequestSerializer,
        responses=CHARGE_RESPONSES,
    )
    def post(self, request: Request, organization_id: uuid.UUID) -> Response:
        return super().post(request, organization_id)


class AddSeatsView(_ChargeView):
    """Add seats to the running billing cycle."""

    request_serializer_class = AddSeatsRequestSerializer
    handler_class = AddSeatsHandler

    def build_command(self, actor, organization_id, data):
        return AddSeatsCommand(actor=actor, organization_id=organization_id, seats=data["seats"])

    @extend_schema(
        operation_id="add_seats",
        summary="Add Seats",
        description="Request a prorated charge for additional seats until the current expiry.",
        tags=["Organizations"],
        request=AddSeatsRequestSerializer,
        responses=CHARGE_RESPONSES,
    )
    def post(self, request: Request, organization_id: uuid.UUID) -> Response:
        return super().post(request, organization_id)


class RenewLicenseView(_ChargeView):
    """Renew the license."""

    request_serializer_class = RenewLicenseRequestSerializer
    handler_class = RenewLicenseHandler

    def build_command(self, actor, organization_id, data):
        return RenewLicenseCommand(
            actor=actor, organization_id=organization_id, seats=data["seats"]
        )

    @extend_schema(
        operation_id="renew_license",
        summary="Renew License",
        tags=["Organizations"],
        request=RenewLicenseRequestSerializer,
        responses=CHARGE_RESPONSES,
    )
    def post(self, request: Request, organization_id: uuid.UUID) -> Response:
        return super().post(request, organization_id)


class ScheduleLicenseChangeView(APIView):
    """Schedule a total-seat change for a future date."""

    @extend_schema(
        operation_id="schedule_license_change",
        summary="Schedule License Change",
        tags=["Organizations"],
        request=ScheduleLicenseChangeRequestSerializer,
        responses={200: ScheduledChangeSerializer, **ERROR_RESPONSES},
    )
    def post(self, request: Request, organization_id: uuid.UUID) -> Response:
        serializer = ScheduleLicenseChangeRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        handler = ScheduleLicenseChangeHandler(
            ledger_repository=_ledger_repo, membership_repository=_membership_repo
        )
        command = ScheduleLicenseChangeCommand(
            actor=_actor(request), organization_id=organization_id, **serializer.validated_data
        )
        ledger = async_to_sync(handler.handle)(command)
        return Response(ScheduledChangeSerializer(ledger).data)


class RenewalHistoryView(APIView):
    """Read the renewal history of an organization's license."""

    @extend_schema(
        operation_id="list_renewal_history",
        summary="Renewal History",
        tags=["Organizations"],
        responses={200: RenewalRecordSerializer(many=True), **ERROR_RESPONSES},
    )
    def get(self, request: Request, organization_id: uuid.UUID) -> Response:
        handler = ListRenewalHistoryHandler(
            renewal_history_repository=_renewal_history_repo,
            membership_repository=_membership_repo,
        )
        query = ListRenewalHistoryQuery(actor=_actor(request), organization_id=organization_id)
        records = async_to_sync(handler.handle)(query)
        return Response(RenewalRecordSerializer(records, many=True).data)
