"""Dashboard image endpoints.

``POST /api/save-db`` receives the dashboard's serialised database and
overwrites ``{data_root}/{db_file}``; ``GET /db/dashboard.sqlite`` serves the
stored copy back.  Together they back the dashboard's HTTP image sink.
"""

from __future__ import annotations

from functools import partial

from anyio import to_thread
from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import FileResponse, PlainTextResponse
from loguru import logger

from widgetdeck.dashboard.store.http import IMAGE_PATH
from widgetdeck.dashboard.store.local import atomic_write
from widgetdeck.sql_service.deps import AppSettings

router = APIRouter(tags=["image"])


@router.post("/api/save-db", response_class=PlainTextResponse)
async def save_db(request: Request, settings: AppSettings) -> PlainTextResponse:
    """Overwrite the stored dashboard image with the request body."""
    data = await request.body()
    try:
        await to_thread.run_sync(partial(atomic_write, settings.db_path, data))
    except OSError as exc:
        logger.error("Failed to save database image: {}", exc)
        return PlainTextResponse(f"Error: {exc}", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.info("Saved dashboard image ({} bytes)", len(data))
    return PlainTextResponse("OK")


@router.get(IMAGE_PATH)
async def get_db(settings: AppSettings) -> FileResponse:
    """Serve the stored dashboard image."""
    path = settings.db_path
    if not path.is_file():
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="No database image stored.")
    return FileResponse(path, media_type="application/octet-stream")
