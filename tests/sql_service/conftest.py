"""Shared fixtures for SQL service tests.

The app lifespan does NOT run under ``ASGITransport``, so the ``client``
fixture enters it explicitly before opening the HTTP client.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from widgetdeck.sql_service.app import app, lifespan


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    async with lifespan(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
