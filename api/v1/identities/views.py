"""
Identity callback views.

Called by the identity provider after an identity's first successful
session, with the shared service token.
"""
from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.permissions import HasServiceToken
from api.v1.identities.serializers import FirstSessionRequestSerializer, OrganizationDTOSerializer
from core.domain.value_objects import Actor
from memberships.infrastructure.identity.django_identity_provider import DjangoIdentityProvider
from organizations.application.commands.provision_trial_organization import (
    ProvisionTrialOrganizationCommand,
)
from organizations.application.handlers.trial_organization_handlers import (
    ProvisionTrialOrganizationHandler,
)
from organizations.infrastructure.repositories.django_organization_repository import (
    DjangoOrganizationRepository,
)

IDENTITY_SERVICE_ACTOR = Actor.service("identity-provider")

_organization_repo = DjangoOrganizationRepository()
_identity_provider = DjangoIdentityProvider()


class FirstSessionView(APIView):
    """Provision the personal trial organization for a new identity."""

    authentication_classes = []
    permission_classes = [HasServiceToken]

    @extend_schema(
        operation_id="identity_first_session",
        summary="First Session",
        description=(
            "Create the identity's personal trial organization with the identity "
            "as its active admin. Repeated calls return the existing organization."
        ),
        tags=["Identities"],
        request=FirstSessionRequestSerializer,
        responses={
            200: OrganizationDTOSerializer,
            201: OrganizationDTOSerializer,
            400: {"description": "Bad Request"},
            403: {"description": "Missing or invalid service token"},
        },
    )
    def post(self, request: Request) -> Response:
        serializer = FirstSessionRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": {"code": "VALIDATION_ERROR", "message": serializer.errors}},
                status=status.HTTP_400_BAD_REQUEST,
            )

        handler = ProvisionTrialOrganizationHandler(
            organization_repository=_organization_repo, identity_provider=_identity_provider
        )
        command = ProvisionTrialOrganizationCommand(
            actor=IDENTITY_SERVICE_ACTOR, identity_id=serializer.validated_data["identity_id"]
        )
        organization = async_to_sync(handler.handle)(command)
        return Response(
            OrganizationDTOSerializer(organization).data,
            status=status.HTTP_201_CREATED if organization.created else status.HTTP_200_OK,
        )
