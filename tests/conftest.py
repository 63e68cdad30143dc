"""Shared test fixtures.

Every test runs with a fresh ``WIDGETDECK_DATA_ROOT`` under ``tmp_path`` and
no remote credentials, so nothing leaks between tests or into the working
directory.  The settings cache is cleared around each test.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from widgetdeck.dashboard.settings import DashboardSettings, _get_settings_cached


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, data_root: Path) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("WIDGETDECK_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("WIDGETDECK_DATA_ROOT", str(data_root))
    monkeypatch.setenv("WIDGETDECK_LOG_LEVEL", "WARNING")
    _get_settings_cached.cache_clear()
    yield
    _get_settings_cached.cache_clear()


@pytest.fixture
def settings() -> DashboardSettings:
    """Settings read from the isolated environment."""
    return DashboardSettings()
