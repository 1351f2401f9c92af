"""Health check endpoints for monitoring service status."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Response

from speciescatalog.database.core import DatabaseService
from speciescatalog.system.structlog_configurator import get_package_version
from speciescatalog.web.core.container import Container
from speciescatalog.web.models.health import HealthCheckResponse, ReadinessProbeResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health")


def _timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@router.get("/", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Check basic health status of the service.

    Returns:
        Health status with timestamp and version.
    """
    return HealthCheckResponse(
        status="healthy",
        timestamp=_timestamp(),
        version=get_package_version(),
        service="speciescatalog",
    )


@router.get("/ready", status_code=200, response_model=ReadinessProbeResponse)
@inject
async def readiness_probe(
    database: Annotated[DatabaseService, Depends(Provide[Container.database])],
    response: Response,
) -> ReadinessProbeResponse:
    """Check if service is ready to handle requests.

    Returns:
        Readiness status with component checks; HTTP 503 when not ready.
    """
    checks: dict[str, bool | str] = {"version": get_package_version()}

    try:
        checks["database"] = await database.ping()
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        checks["database"] = False

    is_ready = bool(checks["database"])
    if not is_ready:
        response.status_code = 503

    return ReadinessProbeResponse(
        status="ready" if is_ready else "not_ready",
        checks=checks,
        timestamp=_timestamp(),
    )
