# filmshare/routers/health.py
# Health check endpoints for monitoring and load balancers
# Provides liveness and readiness probes

import logging
import time
from typing import Any, Dict

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from filmshare.services.errors import RegistryLoadError
from filmshare.services.registry_loader import get_registry_loader

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


class HealthStatus(BaseModel):
    """Health check response model."""
    status: str  # "healthy", "unhealthy"
    timestamp: float
    version: str = "1.0.0"
    checks: Dict[str, Dict[str, Any]] = {}


class ComponentHealth(BaseModel):
    """Individual component health."""
    status: str
    latency_ms: float = 0.0
    message: str = ""


async def check_registry_health() -> ComponentHealth:
    """Load (or reuse) the short-code registry."""
    start = time.time()
    loader = get_registry_loader()
    try:
        registry = await loader.load()
    except RegistryLoadError as e:
        logger.error(f"Registry health check failed: {e}")
        return ComponentHealth(
            status="unhealthy",
            latency_ms=(time.time() - start) * 1000,
            message=f"Registry error: {type(e).__name__}"
        )
    return ComponentHealth(
        status="healthy",
        latency_ms=(time.time() - start) * 1000,
        message=f"{len(registry)} short codes loaded"
    )


@router.get("/health", response_model=HealthStatus)
async def health_check(response: Response):
    """Full health check endpoint; returns the status of every component."""
    registry_health = await check_registry_health()
    checks = {
        "registry": {
            "status": registry_health.status,
            "latency_ms": round(registry_health.latency_ms, 2),
            "message": registry_health.message,
        }
    }
    overall_status = registry_health.status
    response.status_code = (
        status.HTTP_200_OK if overall_status == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    return HealthStatus(status=overall_status, timestamp=time.time(), checks=checks)


@router.get("/health/live")
async def liveness_probe():
    """Returns 200 if the application is running. Does NOT check the registry."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_probe(response: Response):
    """Returns 200 only once shared links can be encoded and decoded."""
    registry_health = await check_registry_health()
    if registry_health.status != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready", "reason": registry_health.message}
    return {"status": "ready"}
