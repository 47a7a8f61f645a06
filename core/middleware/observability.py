"""
Observability middleware.

Assigns a correlation id to every request and emits one structured log
line when the request starts and one when it completes.
"""
import logging
import time
import uuid
from typing import Callable

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "HTTP_X_CORRELATION_ID"


class ObservabilityMiddleware:
    """
    Middleware for request observability.

    An inbound ``X-Correlation-ID`` header is reused so a request can be
    followed across services; otherwise a new id is generated.
    """

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        correlation_id = request.META.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.correlation_id = correlation_id  # type: ignore

        start_time = time.time()
        logger.info(
            "Request started",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.path,
                "remote_addr": request.META.get("REMOTE_ADDR"),
                "user_agent": request.META.get("HTTP_USER_AGENT", ""),
            },
        )

        try:
            response = self.get_response(request)
        except Exception as e:
            self._handle_exception(request, e, start_time, correlation_id)
            raise

        duration = time.time() - start_time
        request_status = self._get_request_status(response)
        self._log_response(request, response, correlation_id, request_status, duration)
        response["X-Correlation-ID"] = correlation_id
        response["X-Request-Status"] = request_status
        response["X-Request-Duration"] = f"{duration:.3f}"
        return response

    def _get_request_status(self, response: HttpResponse) -> str:
        """Determine request status based on status code."""
        if response.status_code >= 500:
            return "server_error"
        if response.status_code >= 400:
            return "client_error"
        return "success"

    def _log_response(self, request, response, correlation_id, request_status, duration):
        """Log structured response information."""
        log_extra = {
            "correlation_id": correlation_id,
            "request_status": request_status,
            "method": request.method,
            "path": request.path,
            "status_code": response.status_code,
            "duration_ms": round(duration * 1000, 2),
        }
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            log_extra["identity_id"] = user.pk

        if response.status_code >= 500:
            logger.error("Request completed with server error", extra=log_extra)
        elif response.status_code >= 400:
            logger.warning("Request completed with client error", extra=log_extra)
        else:
            logger.info("Request completed successfully", extra=log_extra)

    def _handle_exception(self, request, e, start_time, correlation_id):
        """Handle and log request exception."""
        duration = time.time() - start_time
        logger.error(
            "Request failed",
            extra={
                "correlation_id": correlation_id,
                "request_status": "exception",
                "method": request.method,
                "path": request.path,
                "error": str(e),
                "error_type": type(e).__name__,
                "duration_ms": round(duration * 1000, 2),
            },
            exc_info=True,
        )
