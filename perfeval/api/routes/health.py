from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends
from perfeval.api.deps import get_public_api_client
from perfeval.core.config import get_settings
from perfeval.libs.evaluation_api import EvaluationApiClient

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


@router.get("/health", summary="Service health probe")
async def health_check(
    client: EvaluationApiClient = Depends(get_public_api_client),  # noqa: B008
) -> dict:
    """Return service metadata and whether the evaluation API answers."""
    settings = get_settings()

    reachable = await client.ping()
    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": "ok" if reachable else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "upstream": {
            "evaluation_api": {
                "status": "ok" if reachable else "error",
                "base_url": client.base_url,
            },
        },
    }
    logger.info("health_probe", **payload)
    return payload
