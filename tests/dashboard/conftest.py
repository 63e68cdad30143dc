"""Shared fixtures for dashboard data-layer tests.

The embedded driver runs purely in memory (no sink) and without sample rows
unless a test asks otherwise.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from widgetdeck.dashboard.db.embedded import EmbeddedDriver
from widgetdeck.dashboard.managers.folders import FolderRepository
from widgetdeck.dashboard.managers.widgets import WidgetRepository
from widgetdeck.dashboard.storage import StorageRouter


@pytest.fixture
async def driver() -> AsyncIterator[EmbeddedDriver]:
    drv = EmbeddedDriver(seed_sample_data=False)
    assert await drv.init()
    yield drv
    drv.dispose()


@pytest.fixture
def router(driver: EmbeddedDriver) -> StorageRouter:
    return StorageRouter(driver)


@pytest.fixture
def widget_repo(router: StorageRouter) -> WidgetRepository:
    return WidgetRepository(router)


@pytest.fixture
async def folder_repo(router: StorageRouter) -> FolderRepository:
    repo = FolderRepository(router)
    assert await repo.init_folders()
    assert await repo.ensure_widget_folder_column()
    return repo
