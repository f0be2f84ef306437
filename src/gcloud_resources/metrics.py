"""Prometheus metrics for API traffic issued by the resource layer."""

from prometheus_client import Counter, Histogram

api_requests = Counter(
    "gcloud_api_requests_total",
    "Total API request attempts",
    ["service", "method"],
)

api_errors = Counter(
    "gcloud_api_errors_total",
    "API responses with a non-success status",
    ["service", "method", "status"],
)

api_retries = Counter(
    "gcloud_api_retries_total",
    "API requests retried after a transient failure",
    ["service", "method"],
)

api_duration = Histogram(
    "gcloud_api_request_duration_seconds",
    "Time to complete a single API request attempt",
    ["service", "method"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    unit="seconds",
)


def record_request(service: str, method: str, status: int, duration_seconds: float) -> None:
    """Record one completed request attempt.

    Args:
        service: API service name ("bigquery" or "storage").
        method: HTTP method.
        status: HTTP status code of the response.
        duration_seconds: Time taken by the attempt.
    """
    api_requests.labels(service=service, method=method).inc()
    api_duration.labels(service=service, method=method).observe(duration_seconds)
    if status >= 400:
        api_errors.labels(service=service, method=method, status=str(status)).inc()


def record_retry(service: str, method: str) -> None:
    """Record that a request is about to be retried."""
    api_retries.labels(service=service, method=method).inc()
