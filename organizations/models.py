"""Model registration for the organizations app."""
from organizations.infrastructure.models import Organization  # noqa: F401
