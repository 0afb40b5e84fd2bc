"""Unauthenticated health checks: liveness, readiness, environment presence."""

import logging
import os
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from grifo.core.config import Settings
from grifo.core.deps import get_settings
from grifo.schemas.health import EnvCheckOut, LivenessOut, ReadinessOut

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["Health"])

_STARTED = time.monotonic()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def required_settings(settings: Settings) -> dict[str, bool]:
    """Presence of each required variable; values are never exposed."""
    present = {
        "DATABASE_URL": bool(settings.database_url),
        "JWT_SECRET": bool(settings.jwt_secret),
        "FRONTEND_URL": bool(settings.frontend_url),
    }
    if settings.storage_backend == "s3":
        present.update({
            "S3_BUCKET": bool(settings.s3_bucket),
            "AWS_ACCESS_KEY_ID": bool(settings.aws_access_key_id),
            "AWS_SECRET_ACCESS_KEY": bool(settings.aws_secret_access_key),
        })
    return present


@router.get("", response_model=LivenessOut)
async def liveness(settings: Settings = Depends(get_settings)):
    return LivenessOut(
        timestamp=_now(),
        uptime=round(time.monotonic() - _STARTED, 3),
        pid=os.getpid(),
        version=settings.app_version,
        environment=settings.app_env,
    )


@router.get("/ready", response_model=ReadinessOut)
async def readiness(request: Request):
    try:
        await request.app.state.db.ping()
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Readiness check failed: %s", exc)
        body = ReadinessOut(status="not_ready", timestamp=_now(), checks={"database": "unhealthy"})
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump())
    return ReadinessOut(status="ready", timestamp=_now(), checks={"database": "healthy"})


@router.get("/env-check", response_model=EnvCheckOut)
async def env_check(settings: Settings = Depends(get_settings)):
    variables = required_settings(settings)
    missing = [name for name, ok in variables.items() if not ok]
    return EnvCheckOut(
        status="degraded" if missing else "healthy",
        timestamp=_now(),
        variables=variables,
        missing=missing,
    )
