from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from persistence.errors import InvalidInput, SiteDataError
from persistence.repositories import AsyncSiteDataRepository
from settings import Settings

router = APIRouter(prefix="/api/data", tags=["data"])
logger = logging.getLogger(__name__)


class _PayloadTooLarge(Exception):
    pass


def get_site_data_repository(request: Request) -> AsyncSiteDataRepository:
    return request.app.state.site_data


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _server_error(message: str, error: Exception, settings: Settings) -> JSONResponse:
    body: dict[str, Any] = {"message": message}
    # Internal detail only leaves the process in development.
    if settings.is_development:
        body["error"] = str(error)
    return JSONResponse(body, status_code=500)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


async def _read_json_body(request: Request, max_bytes: int) -> Any | None:
    """
    Decode the request body as strict JSON (no NaN/Infinity).

    Returns None for an empty or undecodable body; raises _PayloadTooLarge past max_bytes.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise _PayloadTooLarge()

    body = await request.body()
    if len(body) > max_bytes:
        raise _PayloadTooLarge()
    try:
        return json.loads(body, parse_constant=_reject_constant)
    except ValueError:
        return None


@router.get("/load")
async def load_data(
    repo: AsyncSiteDataRepository = Depends(get_site_data_repository),
    settings: Settings = Depends(get_app_settings),
):
    try:
        doc = await repo.load()
        response = JSONResponse(doc)
    except SiteDataError as e:
        logger.exception("LOAD: failed to load site data")
        return _server_error("Failed to load data", e, settings)
    except Exception as e:
        logger.exception("LOAD: unexpected failure")
        return _server_error("Failed to load data", e, settings)

    if settings.debug_log_requests:
        logger.info("LOAD: returned document with %d top-level key(s)", len(doc))
    return response


@router.post("/save")
async def save_data(
    request: Request,
    repo: AsyncSiteDataRepository = Depends(get_site_data_repository),
    settings: Settings = Depends(get_app_settings),
):
    try:
        payload = await _read_json_body(request, settings.max_body_bytes)
    except _PayloadTooLarge:
        return JSONResponse(
            {"message": f"Request body exceeds {settings.max_body_bytes} bytes"},
            status_code=413,
        )

    try:
        timestamp = await repo.save(payload)
        response = JSONResponse(
            {
                "message": "Data saved successfully",
                "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
            }
        )
    except InvalidInput as e:
        logger.debug("SAVE: rejected input: %s", e)
        return JSONResponse({"message": "No data to save"}, status_code=400)
    except SiteDataError as e:
        logger.exception("SAVE: failed to save site data")
        return _server_error("Failed to save data", e, settings)
    except Exception as e:
        logger.exception("SAVE: unexpected failure")
        return _server_error("Failed to save data", e, settings)

    if settings.debug_log_requests:
        logger.info("SAVE: stored document with %d top-level key(s) at %s", len(payload), timestamp.isoformat())
    return response
