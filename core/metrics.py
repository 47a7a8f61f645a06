"""
Prometheus metrics for the seat licensing service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Seat and membership metrics
seat_mutations_total = Counter(
    "seat_mutations_total",
    "Ledger seat mutations",
    ["operation", "outcome"],
)

membership_transitions_total = Counter(
    "membership_transitions_total",
    "Membership state transitions",
    ["transition"],
)

# Billing metrics
billing_events_total = Counter(
    "billing_events_total",
    "Billing notifications processed",
    ["event_type", "outcome"],
)

billing_provider_requests_total = Counter(
    "billing_provider_requests_total",
    "Requests sent to the billing provider",
    ["operation", "outcome"],
)

billing_provider_request_duration_seconds = Histogram(
    "billing_provider_request_duration_seconds",
    "Billing provider request duration in seconds",
    ["operation"],
    buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# Scheduled jobs
license_notifications_total = Counter(
    "license_notifications_total",
    "Expiry warnings surfaced",
    ["notification_class"],
)

trial_organizations_removed_total = Counter(
    "trial_organizations_removed_total",
    "Abandoned trial organizations removed",
)
