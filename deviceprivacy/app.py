"""
Server entry point: FastAPI app setup and route configuration.
Exposes application discovery, per-path permission scoring and full
scans under ``/api/privacy``.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import pathlib
import sys
from collections.abc import AsyncGenerator
from typing import Any

import dotenv
import fastapi
import uvicorn
from fastapi.middleware import cors
from starlette import responses

from deviceprivacy import discovery, evidence
from deviceprivacy.analysis.score_cache import ScoreCache
from deviceprivacy.config import ScanSettings, get_settings
from deviceprivacy.models import apps
from deviceprivacy.pipeline import scan
from deviceprivacy.utils import logger, risk
from deviceprivacy.utils.errors import get_error_message

dotenv.load_dotenv()

log = logger.create_logger("Server")


def default_platform() -> str:
    return "mac" if sys.platform == "darwin" else "windows"


@functools.lru_cache(maxsize=1)
def get_score_cache() -> ScoreCache:
    """The process-wide score cache shared by every request."""
    return ScoreCache(max_entries=get_settings().cache_max_entries)


@contextlib.asynccontextmanager
async def lifespan(_app: fastapi.FastAPI) -> AsyncGenerator[None]:
    """Log server start on startup."""
    settings = get_settings()
    log.section("Device Privacy Server Started")
    log.info("Configuration", {
        "platform": default_platform(),
        "batchSize": settings.batch_size,
        "cacheMaxEntries": settings.cache_max_entries,
    })
    yield


app = fastapi.FastAPI(title="Device Privacy Server", lifespan=lifespan)

# ============================================================================
# Middleware
# ============================================================================

app.add_middleware(
    cors.CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Helpers
# ============================================================================


async def _discover(platform: str) -> list[apps.ApplicationRecord] | responses.JSONResponse:
    """Run discovery off the event loop; a failure becomes an HTTP 500 body."""
    try:
        return await asyncio.to_thread(discovery.discover_installed_apps, platform)
    except Exception as exc:
        log.error("Error retrieving installed apps", {"platform": platform, "error": get_error_message(exc)})
        return responses.JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch installed applications."},
        )


async def _permissions(
    platform: str, app_path: str, cache: ScoreCache, settings: ScanSettings
) -> dict[str, Any]:
    record = apps.ApplicationRecord(name=pathlib.PurePath(app_path).name or app_path, path=app_path)
    result = await scan.score_path(record, evidence.for_platform(platform), cache, settings)
    return result.model_dump(by_alias=True)


# ============================================================================
# API Routes
# ============================================================================

router = fastapi.APIRouter(prefix="/api/privacy")


@router.get("/installed-apps", response_model=None)
async def installed_apps() -> dict[str, Any] | responses.JSONResponse:
    """List installed Windows applications."""
    found = await _discover("windows")
    if isinstance(found, responses.JSONResponse):
        return found
    return {"installedApps": [a.model_dump(by_alias=True) for a in found]}


@router.get("/installed-apps-mac", response_model=None)
async def installed_apps_mac() -> dict[str, Any] | responses.JSONResponse:
    """List installed macOS applications."""
    found = await _discover("mac")
    if isinstance(found, responses.JSONResponse):
        return found
    return {"installedApps": [a.model_dump(by_alias=True) for a in found]}


@router.get("/permissions/{app_path:path}")
async def permissions(
    app_path: str,
    cache: ScoreCache = fastapi.Depends(get_score_cache),
    settings: ScanSettings = fastapi.Depends(get_settings),
) -> dict[str, Any]:
    """Score one Windows application path."""
    log.info("Incoming permissions request", {"path": app_path})
    return await _permissions("windows", app_path, cache, settings)


@router.get("/permissions-mac/{app_path:path}")
async def permissions_mac(
    app_path: str,
    cache: ScoreCache = fastapi.Depends(get_score_cache),
    settings: ScanSettings = fastapi.Depends(get_settings),
) -> dict[str, Any]:
    """Score one macOS bundle path (the leading ``/`` may be omitted)."""
    if not app_path.startswith("/"):
        app_path = "/" + app_path
    log.info("Incoming permissions request", {"path": app_path})
    return await _permissions("mac", app_path, cache, settings)


@router.get("/scan", response_model=None)
async def scan_endpoint(
    platform: evidence.Platform | None = None,
    search: str = fastapi.Query("", description="Case-insensitive name/path filter"),
    risk_level: str = fastapi.Query("all", alias="risk", pattern="^(all|high|medium|low)$"),
    cache: ScoreCache = fastapi.Depends(get_score_cache),
    settings: ScanSettings = fastapi.Depends(get_settings),
) -> dict[str, Any] | responses.JSONResponse:
    """Discover and score every application, then filter the results.

    ``summary`` counts every scanned application, not just the
    filtered ones.  With ``WRITE_TO_FILE=true`` the scan's log lines
    are mirrored to a file under ``.logs/``.
    """
    platform = platform or default_platform()
    logger.start_log_file(f"{platform}-scan")
    try:
        log.info("Incoming scan request", {"platform": platform, "search": search, "risk": risk_level})
        found = await _discover(platform)
        if isinstance(found, responses.JSONResponse):
            return found

        scored = await scan.scan_applications(found, evidence.for_platform(platform), cache=cache, settings=settings)
        return {
            "applications": [a.model_dump(by_alias=True) for a in risk.filter_applications(scored, search, risk_level)],
            "summary": risk.summarize_tiers(scored).model_dump(),
        }
    finally:
        logger.end_log_file()


app.include_router(router)


def main() -> None:
    """Run the API server with uvicorn."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
