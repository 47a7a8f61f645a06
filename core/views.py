"""
Core views for health checks, readiness and metrics.
"""
import logging

from django.db import DatabaseError, connection
from django.http import HttpResponse, JsonResponse
from django.views import View
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

logger = logging.getLogger(__name__)


def _database_available() -> bool:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        return True
    except DatabaseError as exc:
        logger.warning("Database check failed: %s", exc)
        return False


class HealthView(View):
    """Liveness endpoint."""

    def get(self, _request):
        return JsonResponse({"status": "healthy", "service": "seat-licensing-service"})


class HealthDBView(View):
    """Database health check endpoint."""

    def get(self, _request):
        """Check database connectivity."""
        if _database_available():
            return JsonResponse({"status": "healthy", "database": "connected"})
        return JsonResponse({"status": "unhealthy", "database": "disconnected"}, status=503)


class ReadyView(View):
    """Readiness check endpoint."""

    def get(self, _request):
        """Check if service is ready to accept traffic."""
        checks = {"database": _database_available()}
        ready = all(checks.values())
        return JsonResponse(
            {"status": "ready" if ready else "not_ready", "checks": checks},
            status=200 if ready else 503,
        )


class MetricsView(View):
    """Prometheus scrape endpoint."""

    def get(self, _request):
        return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
