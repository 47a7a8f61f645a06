"""
API permission classes.
"""
import hmac

from django.conf import settings
from rest_framework.permissions import BasePermission


class HasServiceToken(BasePermission):
    """
    Grants access to internal callers presenting the shared service token.

    Expects ``Authorization: Bearer <token>``; compared in constant time.
    """

    message = "A valid service token is required"
    setting_name = "IDENTITY_CALLBACK_TOKEN"

    def has_permission(self, request, view) -> bool:
        expected = getattr(settings, self.setting_name, "")
        scheme, _, token = request.META.get("HTTP_AUTHORIZATION", "").partition(" ")
        if not expected or scheme.lower() != "bearer" or not token:
            return False
        return hmac.compare_digest(token.strip().encode(), expected.encode())
