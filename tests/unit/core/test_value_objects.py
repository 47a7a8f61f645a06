"""
Unit tests for value objects.
"""

import pytest

from core.domain.value_objects import Actor, ActorKind, Email, MembershipRole


class TestEmail:
    """Tests for Email value object."""

    def test_normalizes_case_and_whitespace(self):
        assert Email("  Alice@Example.COM ").value == "alice@example.com"

    def test_rejects_missing_at_sign(self):
        with pytest.raises(ValueError):
            Email("not-an-email")

    def test_equal_by_value(self):
        assert Email("a@example.com") == Email("A@example.com")


class TestActor:
    """Tests for Actor value object."""

    def test_user_actor(self):
        actor = Actor.user(42)

        assert actor.kind == ActorKind.USER
        assert actor.is_service is False
        assert str(actor) == "user:42"

    def test_service_actor(self):
        actor = Actor.service("billing-reconciliation")

        assert actor.is_service is True
        assert str(actor) == "service:billing-reconciliation"

    def test_user_actor_requires_identity(self):
        with pytest.raises(ValueError):
            Actor(kind=ActorKind.USER)

    def test_service_actor_requires_name(self):
        with pytest.raises(ValueError):
            Actor(kind=ActorKind.SERVICE)


def test_membership_role_string():
    assert str(MembershipRole.ADMIN) == "admin"
