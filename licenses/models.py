"""Model registration for the licenses app."""
from licenses.infrastructure.models import (  # noqa: F401
    LicenseLedgerEntry,
    LicenseNotification,
    RenewalHistory,
)
