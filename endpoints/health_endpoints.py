from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from endpoints.data_endpoints import get_site_data_repository
from persistence.repositories import AsyncSiteDataRepository

router = APIRouter(tags=["health"])

SERVICE_VERSION = "2.0"


@router.get("/health")
async def health(
    request: Request,
    repo: AsyncSiteDataRepository = Depends(get_site_data_repository),
):
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - started_at, 3),
        "store": "connected" if await repo.ping() else "disconnected",
    }


@router.get("/ping")
async def ping():
    return {"pong": True, "time": int(time.time() * 1000)}


@router.get("/")
async def root():
    return {
        "message": "API is running",
        "version": SERVICE_VERSION,
        "endpoints": {
            "load": "/api/data/load",
            "save": "/api/data/save",
            "health": "/health",
            "ping": "/ping",
        },
    }
