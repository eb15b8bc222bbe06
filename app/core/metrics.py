"""Application metrics using the Prometheus client library.

This module defines all metrics in one place: a single inventory of
everything the service measures. Other modules import specific metrics
and increment/observe them at the point of action.

Prometheus PULLS these values by scraping GET /metrics.

Metric types used here:
  COUNTER  : only goes up (requests served, dashboards computed)
  GAUGE    : goes up and down (requests in flight)
  HISTOGRAM: observations grouped into buckets, from which Prometheus
              derives percentiles (p95 dashboard latency)

The analytics calculators themselves never touch these. They stay pure,
and the API layer records what happened around each computation.
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
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Analytics metrics (populated by app/api/analytics.py)
# ---------------------------------------------------------------------------

DASHBOARD_REQUESTS = Counter(
    "analytics_dashboard_requests_total",
    "Dashboard computations by endpoint and result",
    ["endpoint", "result"],  # result: ok|error
)

DASHBOARD_DURATION = Histogram(
    "analytics_dashboard_duration_seconds",
    "Time spent computing a learner dashboard",
    ["endpoint"],
    # Pure in-memory computation over a few dozen courses; anything past
    # 50ms means an unusually large snapshot.
    buckets=[0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25],
)

LEARNER_SNAPSHOTS_STORED = Counter(
    "learner_snapshots_stored_total",
    "Learner snapshots written to the repository",
)
