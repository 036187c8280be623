from __future__ import annotations

import contextlib
import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.started_at = time.monotonic()
    logger.info(
        "Site data service starting: cache ttl=%ss, env=%s",
        app.state.settings.cache_ttl_ms / 1000,
        app.state.settings.app_env,
    )
    yield
    logger.info("Site data service shutting down")


def build_repository(settings):
    from persistence.cache import DocumentCache
    from persistence.paths import ensure_dir, site_data_path
    from persistence.repositories import CachedSiteDataRepository
    from persistence.site_data import DiskSiteDataStore

    path = site_data_path(ensure_dir(settings.data_dir), settings.site_data_file)
    logger.info("Site data file: %s", path)
    return CachedSiteDataRepository(
        DiskSiteDataStore(path),
        DocumentCache(ttl_ms=settings.cache_ttl_ms),
    )


def create_app(*, settings=None, repository=None) -> FastAPI:
    load_dotenv("local.env")

    from endpoints.data_endpoints import router as data_router
    from endpoints.health_endpoints import router as health_router
    from settings import get_settings

    settings = settings or get_settings()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.site_data = repository or build_repository(settings)
    app.state.started_at = time.monotonic()

    app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        max_age=86400,
    )

    app.include_router(data_router)
    app.include_router(health_router)

    return app


app = create_app()
