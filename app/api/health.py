"""Liveness and readiness probes.

/health  is the process up? Reports the learner store in use and how
         many dashboards this process has served, for a quick glance.
/ready   can it take traffic? The service holds no external
         connections, so a responding process is ready.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import REGISTRY

router = APIRouter(tags=["health"])


def _sum_counter(metric_name: str, label_filter: dict | None = None) -> float:
    """Sum a counter's samples across every label combination matching the filter."""
    total = 0.0
    for metric in REGISTRY.collect():
        for sample in metric.samples:
            if sample.name != metric_name:
                continue
            if label_filter and not all(
                sample.labels.get(k) == v for k, v in label_filter.items()
            ):
                continue
            total += sample.value
    return total


@router.get("/health")
async def health() -> dict:
    served = _sum_counter("analytics_dashboard_requests_total", {"result": "ok"})
    failed = _sum_counter("analytics_dashboard_requests_total", {"result": "error"})
    return {
        "status": "ok",
        "checks": {"learner_store": "in_memory"},
        "dashboards": {"served": int(served), "failed": int(failed)},
    }


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)
