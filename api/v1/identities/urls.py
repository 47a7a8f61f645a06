"""
URL configuration for identity callback endpoints.
"""
from django.urls import path

from api.v1.identities import views

urlpatterns = [
    path("first-session", views.FirstSessionView.as_view(), name="identity-first-session"),
]
