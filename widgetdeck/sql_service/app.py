"""SQL service: a small HTTP front for a persistent SQLite database.

Serves the remote contract used by the dashboard's remote driver and the
image endpoints used by its HTTP image sink.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.routing import APIRouter
from loguru import logger

from widgetdeck.dashboard.db.embedded import EmbeddedDriver
from widgetdeck.dashboard.log import setup_logging
from widgetdeck.dashboard.settings import get_settings
from widgetdeck.dashboard.store.local import LocalImageSink

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level, component="sql-service")

    logger.info("SQL service starting (host={}, port={})", settings.host, settings.port)
    logger.info("Service database: {}", settings.service_db_path)
    if not settings.auth_token:
        logger.warning("No WIDGETDECK_AUTH_TOKEN set -- SQL endpoints are open")

    _app.state.settings = settings
    _app.state.driver = None

    driver = EmbeddedDriver(LocalImageSink(settings.service_db_path), seed_sample_data=False)
    if await driver.init():
        _app.state.driver = driver
    else:
        logger.error("Service database failed to initialise -- SQL endpoints disabled")

    yield

    # -- Shutdown --------------------------------------------------------------
    if _app.state.driver is not None:
        await driver.persist()
        driver.dispose()
        logger.info("Service database: persisted and disposed")


app = FastAPI(title="Widgetdeck SQL Service", lifespan=lifespan)


@app.middleware("http")
async def cors(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Answer API preflights directly and tag every response for any origin."""
    if request.method == "OPTIONS" and request.url.path.startswith("/api/"):
        return Response(status_code=200, headers=CORS_HEADERS)
    response = await call_next(request)
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


# ---------------------------------------------------------------------------
# API router -- all SQL endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


from widgetdeck.sql_service.routers.image import router as image_router  # noqa: E402
from widgetdeck.sql_service.routers.sql import router as sql_router  # noqa: E402

api.include_router(sql_router)

app.include_router(api)
app.include_router(image_router)
