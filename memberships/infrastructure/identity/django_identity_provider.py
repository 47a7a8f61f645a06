"""
Identity provider backed by ``django.contrib.auth``.
"""
from typing import Optional

from asgiref.sync import sync_to_async
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from core.domain.exceptions import ValidationError
from memberships.ports.identity_provider import Identity, IdentityProvider


class DjangoIdentityProvider(IdentityProvider):
    """Uses the configured user model; the username is the email."""

    @staticmethod
    def _to_identity(user) -> Identity:
        return Identity(id=user.pk, email=user.email, display_name=user.first_name)

    @sync_to_async
    def create_account(self, email: str, password: str, display_name: str = "") -> Identity:
        user_model = get_user_model()
        email = email.strip().lower()
        if user_model.objects.filter(email__iexact=email).exists():
            raise ValidationError("Email already registered", code="EMAIL_ALREADY_REGISTERED")
        try:
            with transaction.atomic():
                user = user_model.objects.create_user(
                    username=email, email=email, password=password, first_name=display_name
                )
        except IntegrityError as exc:
            raise ValidationError(
                "Email already registered", code="EMAIL_ALREADY_REGISTERED"
            ) from exc
        return self._to_identity(user)

    @sync_to_async
    def lookup_by_email(self, email: str) -> Optional[Identity]:
        user = get_user_model().objects.filter(email__iexact=email.strip()).first()
        return self._to_identity(user) if user else None

    @sync_to_async
    def get(self, identity_id: int) -> Optional[Identity]:
        user = get_user_model().objects.filter(pk=identity_id).first()
        return self._to_identity(user) if user else None
