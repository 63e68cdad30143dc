"""FastAPI dependency injection for the SQL service.

Usage in route handlers::

    @router.post("/query", dependencies=[Depends(require_token)])
    async def query(body: SQLRequest, driver: Driver) -> ...:
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from widgetdeck.dashboard.db.embedded import EmbeddedDriver
from widgetdeck.dashboard.settings import DashboardSettings


def get_driver(request: Request) -> EmbeddedDriver:
    """Return the service's embedded driver, created during lifespan."""
    driver: EmbeddedDriver | None = request.app.state.driver
    if driver is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not initialized.",
        )
    return driver


def get_app_settings(request: Request) -> DashboardSettings:
    return request.app.state.settings


def require_token(
    settings: Annotated[DashboardSettings, Depends(get_app_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Check ``Authorization: Bearer <token>`` when a service token is configured."""
    if not settings.auth_token:
        return
    if authorization != f"Bearer {settings.auth_token}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


# -- Annotated type aliases for concise route signatures ---------------------

Driver = Annotated[EmbeddedDriver, Depends(get_driver)]
"""Annotated dependency: the service database driver."""

AppSettings = Annotated[DashboardSettings, Depends(get_app_settings)]
"""Annotated dependency: settings loaded at startup."""
