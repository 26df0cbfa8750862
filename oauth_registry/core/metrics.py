"""Prometheus metric inventory for oauth-registry.

The HTTP metrics are populated by MetricsMiddleware for every request.
The repository metrics are updated by the repository itself, so they
are accurate no matter which caller (HTTP route or in-process gateway
code) triggered the change.

Metric objects live in the process-global default registry and are
exposed by GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Admin lookups are in-memory; anything above 100ms is contention.
    buckets=[0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Repository metrics
# ---------------------------------------------------------------------------

OAUTH_SERVERS_LOADED = Gauge(
    "oauth_servers_loaded",
    "Definitions held by the most recently changed repository (one per process)",
)

OAUTH_SERVER_LOOKUPS = Counter(
    "oauth_server_lookups_total",
    "OAuth server lookups by kind and result",
    ["lookup", "result"],  # lookup: "name" | "token_url"; result: "hit" | "miss"
)

DEFINITION_LOAD_FAILURES = Counter(
    "oauth_definition_load_failures_total",
    "Definition files that could not be loaded",
    ["reason"],  # "io" or "parse"
)
