"""Health check endpoint."""

import time
from fastapi import APIRouter, Request

from compliance_engine.models.responses import HealthResponse, HealthDependency

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """System health check with engine status."""
    dependencies = {}

    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        dependencies["engine"] = HealthDependency(status="unhealthy", message="engine not initialized")
    else:
        dependencies["engine"] = HealthDependency(
            status="healthy",
            message=f"{len(engine.history)} result(s) in history, {engine.cache.size()} cached",
        )

        if engine.config.scheduling.enabled and not engine.is_scheduled:
            dependencies["scheduler"] = HealthDependency(status="degraded", message="schedule not running")
        else:
            dependencies["scheduler"] = HealthDependency(status="healthy")

    # Overall status
    all_healthy = all(d.status == "healthy" for d in dependencies.values())
    any_unhealthy = any(d.status == "unhealthy" for d in dependencies.values())

    if all_healthy:
        status = "healthy"
    elif any_unhealthy:
        status = "unhealthy"
    else:
        status = "degraded"

    return HealthResponse(
        status=status,
        uptime_seconds=round(time.time() - _start_time, 2),
        dependencies=dependencies,
    )
