"""Health check and metrics endpoints."""

import time
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from attune import __version__
from attune.api.dependencies import StoreDep
from attune.api.models.health import ComponentHealth, HealthResponse
from attune.observability.logging import get_logger
from attune.reconciliation.exceptions import StoreConnectionError
from attune.reconciliation.store import ReconciliationStore

logger = get_logger(__name__)

router = APIRouter()
metrics_router = APIRouter()

_HEALTHCHECK_KEY = "healthcheck#ping"


async def _check_store_health(store: ReconciliationStore) -> ComponentHealth:
    """Check the store with a cheap read."""
    start = time.perf_counter()
    try:
        await store.get_refinement_attempts(_HEALTHCHECK_KEY)
    except StoreConnectionError as e:
        return ComponentHealth(
            name="reconciliation_store",
            status="unhealthy",
            latency_ms=(time.perf_counter() - start) * 1000,
            message=e.message,
        )
    return ComponentHealth(
        name="reconciliation_store",
        status="healthy",
        latency_ms=(time.perf_counter() - start) * 1000,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(store: StoreDep) -> HealthResponse:
    """Check service health status."""
    components = [await _check_store_health(store)]

    overall_status: Literal["healthy", "degraded", "unhealthy"]
    if any(c.status == "unhealthy" for c in components):
        overall_status = "unhealthy"
    elif any(c.status == "degraded" for c in components):
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    logger.debug("health_check_completed", status=overall_status)

    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        timestamp=datetime.now(UTC),
    )


@metrics_router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
