"""Remote SQL endpoints.

Implements the contract the dashboard's remote driver speaks::

    POST /api/query    {"query": "...", "params": [...]}  ->  {"results": [...]}
    POST /api/execute  {"query": "...", "params": [...]}  ->  {"success": true}

Engine failures come back as ``500 {"error": "Database operation failed"}``.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from widgetdeck.dashboard.db.base import StorageError
from widgetdeck.sql_service.deps import Driver, require_token

router = APIRouter(tags=["sql"], dependencies=[Depends(require_token)])


class SQLRequest(BaseModel):
    query: str
    params: list[Any] = Field(default_factory=list)
    database_id: str | None = None
    """Accepted for compatibility with hosted services; a single database is served."""


def _failure() -> JSONResponse:
    return JSONResponse({"error": "Database operation failed"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("/query", response_model=None)
async def query(body: SQLRequest, driver: Driver) -> dict[str, Any] | JSONResponse:
    """Run a statement and return its rows."""
    try:
        rows = await driver.query(body.query, body.params)
    except StorageError as exc:
        logger.error("Query failed: {}", exc)
        return _failure()
    return {"results": rows}


@router.post("/execute", response_model=None)
async def execute(body: SQLRequest, driver: Driver) -> dict[str, Any] | JSONResponse:
    """Run a mutating statement, then persist the database image."""
    try:
        await driver.execute(body.query, body.params)
    except StorageError as exc:
        logger.error("Execute failed: {}", exc)
        return _failure()
    await driver.persist()
    return {"success": True}
