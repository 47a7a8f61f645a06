"""
Integration tests for health, readiness and metrics endpoints.
"""

import pytest


@pytest.mark.django_db
def test_health_endpoints(client):
    assert client.get("/health/").json()["status"] == "healthy"
    assert client.get("/health/db/").json()["database"] == "connected"
    assert client.get("/ready/").status_code == 200


@pytest.mark.django_db
def test_metrics_endpoint_exposes_counters(client):
    response = client.get("/metrics/")

    assert response.status_code == 200
    assert b"billing_events_total" in response.content
    assert b"seat_mutations_total" in response.content


@pytest.mark.django_db
def test_correlation_id_is_propagated(client):
    response = client.get("/health/", HTTP_X_CORRELATION_ID="corr-123")

    assert response["X-Correlation-ID"] == "corr-123"
    assert response["X-Request-Status"] == "success"
