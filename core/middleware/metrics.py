"""
Metrics middleware for Prometheus.

Records HTTP request counts and durations per normalized endpoint.
"""
import re
import time
from typing import Callable

from django.http import HttpRequest, HttpResponse

from core.metrics import http_request_duration_seconds, http_requests_total

UUID_SEGMENT = re.compile(r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")
NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


def normalize_endpoint(path: str) -> str:
    """Collapse ids in ``path`` so metric label cardinality stays bounded."""
    return NUMERIC_SEGMENT.sub("/{id}", UUID_SEGMENT.sub("/{id}", path))


class MetricsMiddleware:
    """Middleware to record HTTP metrics for Prometheus."""

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Process request and record metrics."""
        start_time = time.perf_counter()
        endpoint = normalize_endpoint(request.path)
        status_code = 500
        try:
            response = self.get_response(request)
            status_code = response.status_code
            return response
        finally:
            http_requests_total.labels(
                method=request.method, endpoint=endpoint, status_code=status_code
            ).inc()
            http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(
                time.perf_counter() - start_time
            )
