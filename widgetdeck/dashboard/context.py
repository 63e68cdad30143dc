"""Dashboard context.

Holds everything a dashboard session needs: settings, the storage router
(which owns the engine handle), and the two repositories.  Built once by
``open_context`` and passed explicitly to whatever drives the dashboard.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from widgetdeck.dashboard.managers.folders import FolderRepository
from widgetdeck.dashboard.managers.widgets import WidgetRepository
from widgetdeck.dashboard.settings import DashboardSettings, get_settings
from widgetdeck.dashboard.storage import StorageRouter

if TYPE_CHECKING:
    import httpx


@dataclass
class DashboardContext:
    settings: DashboardSettings
    router: StorageRouter
    widgets: WidgetRepository
    folders: FolderRepository

    # -- Startup outcome -------------------------------------------------------
    storage_ready: bool = False
    folders_ready: bool = False
    widget_column_ready: bool = False

    @property
    def degraded(self) -> bool:
        return not (self.storage_ready and self.folders_ready and self.widget_column_ready)

    async def aclose(self) -> None:
        await self.router.aclose()


async def open_context(
    settings: DashboardSettings | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> DashboardContext:
    """Build the router and repositories, then run the startup sequence.

    Storage, folder tables and the widget folder column are initialised in
    that order.  Failures are logged and recorded on the context; this never
    raises for an init failure.
    """
    settings = settings or get_settings()
    router = StorageRouter.from_settings(settings, http_client=http_client)
    ctx = DashboardContext(
        settings=settings,
        router=router,
        widgets=WidgetRepository(router),
        folders=FolderRepository(router),
    )
    logger.info("Storage backend: {}", router.get_storage_type())

    ctx.storage_ready = await router.init_storage()
    if not ctx.storage_ready:
        logger.warning("Storage initialisation failed -- continuing degraded")

    ctx.folders_ready = await ctx.folders.init_folders()
    if not ctx.folders_ready:
        logger.warning("Folder initialisation failed (state={})", ctx.folders.state)

    ctx.widget_column_ready = await ctx.folders.ensure_widget_folder_column()
    if not ctx.widget_column_ready:
        logger.warning("Widget folder column check failed")

    return ctx
