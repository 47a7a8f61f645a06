"""
URL configuration for organization API endpoints.
"""
from django.urls import path

from api.v1.organizations import views

urlpatterns = [
    path(
        "invitations/accept",
        views.AcceptInvitationView.as_view(),
        name="accept-invitation",
    ),
    path(
        "<uuid:organization_id>/members",
        views.MemberListView.as_view(),
        name="organization-members",
    ),
    path(
        "<uuid:organization_id>/members/<int:identity_id>",
        views.MemberDetailView.as_view(),
        name="organization-member",
    ),
    path(
        "<uuid:organization_id>/license",
        views.LicenseStatusView.as_view(),
        name="license-status",
    ),
    path(
        "<uuid:organization_id>/license/purchase",
        views.PurchaseLicensesView.as_view(),
        name="purchase-licenses",
    ),
    path(
        "<uuid:organization_id>/license/seats",
        views.AddSeatsView.as_view(),
        name="add-seats",
    ),
    path(
        "<uuid:organization_id>/license/renew",
        views.RenewLicenseView.as_view(),
        name="renew-license",
    ),
    path(
        "<uuid:organization_id>/license/scheduled-change",
        views.ScheduleLicenseChangeView.as_view(),
        name="schedule-license-change",
    ),
    path(
        "<uuid:organization_id>/license/history",
        views.RenewalHistoryView.as_view(),
        name="renewal-history",
    ),
]
