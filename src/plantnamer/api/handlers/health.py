"""Liveness and readiness endpoints."""

import logging

from fastapi import APIRouter, Request, Response

from plantnamer import __version__
from plantnamer.api.deps import SettingsDep
from plantnamer.config import Settings
from plantnamer.models.health import LivenessResponse, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def readiness_checks(request: Request, settings: Settings) -> dict[str, bool]:
    """What the naming endpoint needs before it can answer anything but a 500.

    Nothing here calls the model provider.
    """
    return {
        "api_key": settings.has_api_key,
        "rate_limiter": getattr(request.app.state, "rate_limiter", None) is not None,
    }


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check() -> LivenessResponse:
    """The process is up and serving requests."""
    return LivenessResponse()


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    request: Request, settings: SettingsDep, response: Response
) -> ReadinessResponse:
    """Answers 503 until every readiness check passes."""
    checks = readiness_checks(request, settings)
    ready = all(checks.values())

    if not ready:
        failing = [name for name, ok in checks.items() if not ok]
        logger.warning("Not ready", extra={"failing_checks": failing})
        response.status_code = 503

    return ReadinessResponse(
        status="ready" if ready else "not_ready",
        version=__version__,
        checks=checks,
    )
