from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.analytics import (
    AnalyticsComputationError,
    analytics_error_handler,
    learner_not_found_handler,
)
from app.api.analytics import router as analytics_router
from app.api.health import router as health_router
from app.api.metrics_endpoint import router as metrics_router
from app.core.config import SETTINGS
from app.core.logging import setup_logging
from app.middleware.metrics import MetricsMiddleware
from app.middleware.request_context import RequestContextMiddleware
from app.repos.learner_repo import LearnerNotFoundError

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="learning-analytics-service",
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext → Metrics → CORS → route
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(AnalyticsComputationError, analytics_error_handler)
app.add_exception_handler(LearnerNotFoundError, learner_not_found_handler)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(analytics_router)

logger.info(
    "learning-analytics-service started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
