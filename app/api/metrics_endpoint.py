"""Prometheus scrape endpoint.

Returns every registered metric in the text exposition format, e.g.

  analytics_dashboard_requests_total{endpoint="overview",result="ok"} 12.0

Left unauthenticated; restrict it at the network layer in production.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
