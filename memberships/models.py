"""Model registration for the memberships app."""
from memberships.infrastructure.models import Membership  # noqa: F401
