"""
Liveness and readiness checks.

/health answers as long as the process is up. /health/ready also makes
sure we could sign an upload credential and reach the videos collection,
and answers 503 otherwise.
"""

import logging
from typing import Any, Callable

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ... import __version__
from ...config.settings import Settings
from ..dependencies import SettingsDep, get_imagekit_signer, get_video_repository

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    name: str
    status: str  # "ok" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


def _check_configuration(settings: Settings) -> str | None:
    missing = settings.validate_required_fields()
    if missing:
        raise RuntimeError(f"Missing required fields: {', '.join(missing)}")
    return None


def _check_signing(settings: Settings) -> str | None:
    signer = get_imagekit_signer(settings)
    signer.get_upload_auth_params(ttl_seconds=settings.upload_token_ttl_seconds)
    return "mock mode" if settings.imagekit_mock_mode else None


def _check_database(settings: Settings) -> str | None:
    if not get_video_repository(settings).ping():
        raise RuntimeError("ping failed")
    return "mock mode" if settings.mongo_mock_mode else None


READINESS_CHECKS: list[tuple[str, Callable[[Settings], str | None]]] = [
    ("configuration", _check_configuration),
    ("uploads", _check_signing),
    ("database", _check_database),
]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness",
    description="Always 200 while the process runs. Touches nothing external.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        details={
            "mock_mode": {
                "mongo": settings.mongo_mock_mode,
                "imagekit": settings.imagekit_mock_mode,
            }
        }
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness",
    description="200 when uploads can be signed and the database answers, 503 otherwise.",
    responses={503: {"description": "At least one check failed", "model": ReadinessResponse}},
)
async def readiness_check(settings: SettingsDep):
    """
    Run every check and report each one.

    A check fails by raising; whatever it returns is attached as a note.
    Only the database check does network I/O.
    """
    checks: list[ReadinessCheck] = []

    for name, check in READINESS_CHECKS:
        try:
            note = check(settings)
        except Exception as e:
            logger.error("Readiness check raised", extra={"check": name, "error": str(e)})
            checks.append(ReadinessCheck(name=name, status="error", error=str(e)))
            continue

        checks.append(ReadinessCheck(name=name, status="ok", error=note))

    ready = all(check.status == "ok" for check in checks)
    response = ReadinessResponse(
        status="ready" if ready else "not_ready",
        version=__version__,
        checks=checks,
    )

    if not ready:
        logger.warning(
            "Not ready",
            extra={"failed": [c.name for c in checks if c.status != "ok"]},
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )

    return response
