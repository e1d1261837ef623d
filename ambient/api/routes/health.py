"""
Health Check Routes

FastAPI endpoints for service health and readiness checks.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ambient import __version__
from ambient.models.api import HealthResponse, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    """
    Basic liveness check.

    Returns 200 OK if the service is running.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness() -> JSONResponse:
    """
    Readiness check for configuration and components.

    Checks:
    - A target database URL is configured
    - An API key exists for the default LLM provider
    - The pipeline is initialized

    Returns:
        200 OK if all checks pass
        503 Service Unavailable if any check fails
    """
    from ambient.api.main import app_state
    from ambient.config import get_settings

    config = get_settings()
    provider = config.llm.default_provider
    checks = {
        "database": bool(config.database.url or config.database.environments),
        "llm": bool(getattr(config.llm, f"{provider}_api_key")),
        "pipeline": app_state["pipeline"] is not None,
    }
    for name, ok in checks.items():
        if not ok:
            logger.warning(f"{name.capitalize()} check: FAILED")
    all_ready = all(checks.values())

    response_data = ReadinessResponse(
        status="ready" if all_ready else "not_ready",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
        checks=checks,
    )
    status_code = status.HTTP_200_OK if all_ready else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=response_data.model_dump())
