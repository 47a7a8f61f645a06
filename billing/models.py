"""Model registration for the billing app."""
from billing.infrastructure.models import (  # noqa: F401
    DeadLetteredBillingEvent,
    ProcessedBillingEvent,
)
