"""
API exception handlers.

Maps the domain error taxonomy onto HTTP responses with a stable
``{"error": {"code", "message"}}`` body.
"""
import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    CapacityError,
    ConflictError,
    DomainException,
    IntegrityViolationError,
    InvalidSignatureError,
    NotAuthorizedError,
    NotFoundError,
    TransientError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first
DOMAIN_STATUS_CODES = (
    (InvalidSignatureError, status.HTTP_401_UNAUTHORIZED),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN),
    (CapacityError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ConflictError, status.HTTP_409_CONFLICT),
    (TransientError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (IntegrityViolationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_code_for(exc: DomainException) -> int:
    """HTTP status for a domain exception."""
    for exc_type, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    correlation_id = _get_correlation_id(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, correlation_id)
    elif isinstance(exc, APIException):
        response = exception_handler(exc, context)
        code = exc.default_code.upper().replace("-", "_")
        detail = response.data
        if isinstance(detail, dict) and "detail" in detail:
            detail = detail["detail"]
        response.data = {"error": {"code": code, "message": detail}}
    elif isinstance(exc, Http404):
        response = Response(
            {"error": {"code": "NOT_FOUND", "message": "Resource not found"}},
            status=status.HTTP_404_NOT_FOUND,
        )
    else:
        response = _handle_unexpected_exception(exc, context, correlation_id)

    if correlation_id:
        response["X-Correlation-ID"] = correlation_id
    return response


def _get_correlation_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract correlation ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "correlation_id", None)


def _handle_domain_exception(exc: DomainException, correlation_id: Optional[str]) -> Response:
    """Handle domain-specific exceptions."""
    status_code = status_code_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Domain exception: %s - %s",
        exc.code,
        exc.message,
        extra={"correlation_id": correlation_id, "status_code": status_code},
    )
    return Response({"error": {"code": exc.code, "message": exc.message}}, status=status_code)


def _handle_unexpected_exception(
    exc: Exception, context: Dict[str, Any], correlation_id: Optional[str]
) -> Response:
    """Handle unexpected or untracked exceptions."""
    logger.error(
        "Unexpected error: %s", exc, extra={"correlation_id": correlation_id}, exc_info=True
    )
    response = exception_handler(exc, context)
    body = {"error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"}}
    if not response:
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    response.data = body
    return response
