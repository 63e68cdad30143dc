"""Remote store driver: a managed SQL service behind an HTTP contract.

Both primitives POST raw SQL and a positional parameter list::

    POST {base_url}/query     {"query": "...", "params": [...]}
    POST {base_url}/execute   {"query": "...", "params": [...]}

and expect ``{"results": [...], "meta": {...}}`` back.  Every call is a single
attempt: no retries, no backoff.  Failures never raise; they come back as
``StorageResult(success=False, error=...)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
from loguru import logger

from widgetdeck.dashboard.db.base import StorageResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from widgetdeck.dashboard.settings import DashboardSettings


class RemoteAPIError(RuntimeError):
    """Non-2xx response from the remote service."""


class RemoteDriver:
    """HTTP client for the remote SQL service.

    A caller-supplied ``client`` is used as-is (tests pass one wired to a mock
    or ASGI transport) and is not closed by ``aclose()``.
    """

    def __init__(
        self,
        base_url: str | None,
        token: str | None,
        *,
        database_id: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._token = token or ""
        self._database_id = database_id
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: DashboardSettings, client: httpx.AsyncClient | None = None) -> RemoteDriver:
        token = settings.remote_token.get_secret_value() if settings.remote_token else None
        return cls(
            settings.remote_url,
            token,
            database_id=settings.remote_database_id,
            timeout=settings.remote_timeout,
            client=client,
        )

    @property
    def configured(self) -> bool:
        return bool(self._base_url and self._token)

    async def init(self) -> bool:
        """Nothing to load remotely; reports whether credentials are present."""
        return self.configured

    async def query(self, sql: str, params: Sequence[Any] | None = None) -> StorageResult:
        return await self._post("query", sql, params)

    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> StorageResult:
        return await self._post("execute", sql, params)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(self, route: str, sql: str, params: Sequence[Any] | None) -> StorageResult:
        if not self.configured:
            logger.error("Remote SQL credentials not configured")
            return StorageResult.failed("API credentials not configured")

        payload: dict[str, Any] = {"query": sql, "params": list(params or ())}
        if self._database_id:
            payload["database_id"] = self._database_id

        try:
            resp = await self._client.post(
                f"{self._base_url}/{route}",
                json=payload,
                headers={"Authorization": f"Bearer {self._token}"},
            )
            if not resp.is_success:
                msg = f"API error: {resp.status_code} {resp.text}"
                raise RemoteAPIError(msg)
            data = resp.json()
        except (httpx.HTTPError, RemoteAPIError, ValueError) as exc:
            logger.error("Remote {} error: {}", route, exc)
            return StorageResult.failed(str(exc) or type(exc).__name__)

        if not isinstance(data, dict):
            return StorageResult.failed("Malformed response from remote service")
        return StorageResult(success=True, results=data.get("results"), meta=data.get("meta"))
