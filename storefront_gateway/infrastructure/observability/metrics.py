"""Prometheus metrics for monitoring payments, authorization and upstream services"""

from prometheus_client import Counter, Histogram

# Authorization
authorization_denied_counter = Counter(
    "storefront_authorization_denied_total",
    "Requests rejected by the authorization guard",
    ["reason"],  # no_session | invalid_session | role | role_lookup_failed
)

# Payment metrics
payment_intent_counter = Counter(
    "storefront_payment_intent_total",
    "Payment intents created",
    ["outcome"],  # succeeded | requires_action | failed | ...
)

refund_counter = Counter(
    "storefront_refund_total",
    "Refunds processed",
    ["kind"],  # refunded | partially_refunded
)

# External services
upstream_latency_histogram = Histogram(
    "storefront_upstream_latency_seconds",
    "External API response time",
    ["service"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

upstream_failures_counter = Counter(
    "storefront_upstream_failures_total",
    "Failed calls to external services",
    ["service"],  # stripe | openai | ses | database
)

emails_sent_counter = Counter(
    "storefront_emails_sent_total",
    "Transactional emails handed to the email provider",
    ["template"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment_intent(status: str) -> None:
    payment_intent_counter.labels(outcome=status or "unknown").inc()


def record_upstream_failure(service: str) -> None:
    upstream_failures_counter.labels(service=service).inc()
