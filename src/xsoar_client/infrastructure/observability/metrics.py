"""
Prometheus metrics for outgoing XSOAR API calls.

The transport records one sample per completed HTTP exchange.  Incident ids
are collapsed out of the ``path`` label so cardinality stays bounded.
"""

from __future__ import annotations

import re

from prometheus_client import REGISTRY, Counter, Histogram

# ======================================================================
# Metrics (module-level singletons)
# ======================================================================

client_requests_total = Counter(
    "xsoar_client_requests_total",
    "Total number of XSOAR API requests",
    labelnames=["method", "path", "status"],
    registry=REGISTRY,
)

client_request_duration_seconds = Histogram(
    "xsoar_client_request_duration_seconds",
    "XSOAR API request latency in seconds",
    labelnames=["method", "path"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
    registry=REGISTRY,
)

# GET /incident/<id> is the only route that carries an id in the path.
_INCIDENT_ID_RE = re.compile(r"^/incident/(?!update$|close$|batchDelete$)[^/]+$")


def path_template(path: str) -> str:
    """Replace resource ids in *path* with a ``{id}`` placeholder."""
    if _INCIDENT_ID_RE.match(path):
        return "/incident/{id}"
    return path


def record_request(method: str, path: str, status: str, duration: float) -> None:
    """Record a single request in the counter and latency histogram."""
    template = path_template(path)
    client_requests_total.labels(method=method, path=template, status=status).inc()
    client_request_duration_seconds.labels(method=method, path=template).observe(duration)
