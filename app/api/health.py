"""Kubernetes probes. Redis is reported but never makes the API unready."""

import logging
from typing import Dict

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from app.core.cache import cache_service
from app.db.mongodb import db

logger = logging.getLogger(__name__)

router = APIRouter()


async def _database_status() -> str:
    if db.client is None:
        return "not_connected"
    try:
        await db.client.admin.command("ping")
    except PyMongoError as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return "unreachable"
    return "connected"


@router.get("/live", summary="Liveness Probe")
async def liveness():
    return {"status": "alive"}


@router.get("/ready", summary="Readiness Probe")
async def readiness():
    cache = await cache_service.health_check()
    components: Dict[str, str] = {
        "database": await _database_status(),
        "cache": "connected" if cache["available"] else "degraded",
    }

    if components["database"] == "connected":
        return {"status": "ready", "components": components}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "components": components},
    )


@router.get("/cache", summary="Cache Status")
async def cache_status():
    return await cache_service.health_check()
