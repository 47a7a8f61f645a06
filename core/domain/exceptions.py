"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions. They are grouped by how a caller
is expected to react: validation, capacity, conflict, transient
and integrity failures.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainException):
    """Raised when input is rejected before any state is touched."""

    def __init__(self, message: str = "Invalid request", code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class NotFoundError(DomainException):
    """Base exception for missing aggregates."""

    pass


class OrganizationNotFoundError(NotFoundError):
    """Raised when an organization is not found."""

    def __init__(self, message: str = "Organization not found"):
        super().__init__(message, code="ORGANIZATION_NOT_FOUND")


class LedgerNotFoundError(NotFoundError):
    """Raised when an organization has no license ledger entry."""

    def __init__(self, message: str = "No license found for organization"):
        super().__init__(message, code="LEDGER_NOT_FOUND")


class NotAuthorizedError(DomainException):
    """Raised when the acting identity lacks the required role."""

    def __init__(self, message: str = "Not authorized for this organization"):
        super().__init__(message, code="NOT_AUTHORIZED")


class CapacityError(DomainException):
    """Base exception for capacity errors (reported, never retried)."""

    pass


class SeatLimitExceededError(CapacityError):
    """Raised when license seat limit is exceeded."""

    def __init__(self, message: str = "License seat limit exceeded"):
        super().__init__(message, code="SEAT_LIMIT_EXCEEDED")


class LicenseExpiredError(CapacityError):
    """Raised when a license has expired past its grace period."""

    def __init__(self, message: str = "License has expired"):
        super().__init__(message, code="LICENSE_EXPIRED")


class ConflictError(DomainException):
    """Base exception for state conflicts (reported, never retried)."""

    pass


class AlreadyMemberError(ConflictError):
    """Raised when the identity already holds an active membership."""

    def __init__(self, message: str = "Identity is already an active member"):
        super().__init__(message, code="ALREADY_MEMBER")


class AlreadyInvitedError(ConflictError):
    """Raised when a pending invitation already exists for the email."""

    def __init__(self, message: str = "Email already has a pending invitation"):
        super().__init__(message, code="ALREADY_INVITED")


class NoPendingInvitationError(ConflictError):
    """Raised when accepting without a matching pending invitation."""

    def __init__(self, message: str = "No pending invitation found"):
        super().__init__(message, code="NO_PENDING_INVITATION")


class NotAnActiveMemberError(ConflictError):
    """Raised when removing an identity that is not currently active."""

    def __init__(self, message: str = "Identity is not an active member"):
        super().__init__(message, code="NOT_AN_ACTIVE_MEMBER")


class OwnerRemovalForbiddenError(ConflictError):
    """Raised when the organization owner tries to remove themselves."""

    def __init__(self, message: str = "The organization owner cannot be removed"):
        super().__init__(message, code="OWNER_REMOVAL_FORBIDDEN")


class LedgerAlreadyExistsError(ConflictError):
    """Raised when creating a second ledger entry for an organization."""

    def __init__(self, message: str = "Organization already has a license ledger"):
        super().__init__(message, code="LEDGER_ALREADY_EXISTS")


class TransientError(DomainException):
    """Base exception for failures that may succeed when retried."""

    pass


class WriteConflictError(TransientError):
    """Raised when an optimistic ledger write lost a race."""

    def __init__(self, message: str = "Concurrent ledger update, retry"):
        super().__init__(message, code="WRITE_CONFLICT")


class LedgerNotReadyError(TransientError):
    """Raised when a seat sync arrives before the purchase that creates the ledger."""

    def __init__(self, message: str = "Ledger not created yet"):
        super().__init__(message, code="LEDGER_NOT_READY")


class ProviderUnavailableError(TransientError):
    """Raised when the billing provider times out or answers non-2xx."""

    def __init__(self, message: str = "Billing provider unavailable"):
        super().__init__(message, code="PROVIDER_UNAVAILABLE")


class IntegrityViolationError(DomainException):
    """Base exception for integrity errors that need manual reconciliation."""

    pass


class SeatInvariantViolationError(IntegrityViolationError):
    """Raised when a write would leave used seats above total seats."""

    def __init__(self, message: str = "Total seats cannot drop below used seats"):
        super().__init__(message, code="SEAT_INVARIANT_VIOLATION")


class InvalidSignatureError(IntegrityViolationError):
    """Raised when a billing notification fails signature verification."""

    def __init__(self, message: str = "Invalid billing notification signature"):
        super().__init__(message, code="INVALID_SIGNATURE")


class MalformedBillingEventError(ValidationError):
    """Raised when a billing notification payload is missing required fields."""

    def __init__(self, message: str = "Malformed billing notification"):
        super().__init__(message, code="MALFORMED_BILLING_EVENT")


class UnsupportedBillingEventError(ValidationError):
    """Raised for billing notification kinds this service does not consume."""

    def __init__(self, message: str = "Unsupported billing notification"):
        super().__init__(message, code="UNSUPPORTED_BILLING_EVENT")
