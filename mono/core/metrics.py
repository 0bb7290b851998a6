"""Prometheus metrics for the service.

Labels stay low-cardinality: site ids, cache names and status codes only,
never hostnames or paths taken from the request.
"""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Histogram, generate_latest

CACHE_LOOKUPS_TOTAL = Counter(
    "cache_lookups_total",
    "In-process cache lookups by cache name and outcome.",
    labelnames=("cache", "state"),
)

HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests by site/method/status.",
    labelnames=("site", "method", "status"),
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds by site.",
    labelnames=("site",),
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)


def observe_cache(*, cache: str, hit: bool) -> None:
    CACHE_LOOKUPS_TOTAL.labels(cache=cache, state="hit" if hit else "miss").inc()


def observe_http(*, site: str, method: str, status_code: int, duration_seconds: float) -> None:
    HTTP_REQUESTS_TOTAL.labels(site=site, method=method, status=str(int(status_code))).inc()
    HTTP_REQUEST_DURATION_SECONDS.labels(site=site).observe(duration_seconds)


def render_latest() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""

    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


__all__ = ["observe_cache", "observe_http", "render_latest"]
