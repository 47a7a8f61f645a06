"""
URL configuration for billing API endpoints.
"""
from django.urls import path

from api.v1.billing import views

urlpatterns = [
    path("webhook", views.BillingWebhookView.as_view(), name="billing-webhook"),
]
