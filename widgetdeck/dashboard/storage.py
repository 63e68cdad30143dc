"""Storage router: one query/execute API over the embedded or remote driver.

The backend is chosen once, when the router is built from settings:

- start from ``use_local_storage``;
- if the remote URL or token is missing, embedded is forced.

``toggle_storage_type()`` flips the choice at runtime for testing and does
not re-check credentials, so toggling to an unconfigured remote makes every
later call fail with ``success=False``.

Every call is wrapped so that any exception raised below the router comes
back as ``StorageResult(success=False, error=<message>)``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from loguru import logger

from widgetdeck.dashboard.db.base import StorageResult
from widgetdeck.dashboard.db.embedded import EmbeddedDriver
from widgetdeck.dashboard.db.remote import RemoteDriver
from widgetdeck.dashboard.models.enums import StorageBackend
from widgetdeck.dashboard.models.folder import Folder, FolderNode
from widgetdeck.dashboard.models.widget import Widget
from widgetdeck.dashboard.store import create_image_sink
from widgetdeck.dashboard.utils import parse_timestamp

if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx

    from widgetdeck.dashboard.settings import DashboardSettings

StorageDriver = EmbeddedDriver | RemoteDriver


class StorageRouter:
    """Dispatches SQL to the active driver and normalises every outcome."""

    def __init__(
        self,
        embedded: EmbeddedDriver,
        remote: RemoteDriver | None = None,
        *,
        use_embedded: bool = True,
    ) -> None:
        self._embedded = embedded
        self._remote = remote
        self._use_embedded = use_embedded

    @classmethod
    def from_settings(
        cls,
        settings: DashboardSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> StorageRouter:
        embedded = EmbeddedDriver(create_image_sink(settings), seed_sample_data=settings.seed_sample_data)
        remote = RemoteDriver.from_settings(settings, client=http_client) if settings.remote_configured else None

        use_embedded = settings.use_local_storage
        if remote is None:
            if not use_embedded:
                logger.warning("Remote SQL credentials not configured -- forcing local SQLite storage")
            use_embedded = True
        return cls(embedded, remote, use_embedded=use_embedded)

    # -- Backend ---------------------------------------------------------------

    @property
    def embedded(self) -> EmbeddedDriver:
        return self._embedded

    @property
    def remote(self) -> RemoteDriver | None:
        return self._remote

    @property
    def active(self) -> StorageDriver | None:
        return self._embedded if self._use_embedded else self._remote

    @property
    def storage_type(self) -> StorageBackend:
        return StorageBackend.EMBEDDED if self._use_embedded else StorageBackend.REMOTE

    def get_storage_type(self) -> str:
        """Backend label for display."""
        return str(self.storage_type)

    def toggle_storage_type(self) -> StorageBackend:
        """Flip between backends without re-validating credentials."""
        self._use_embedded = not self._use_embedded
        logger.info("Storage switched to {}", self.storage_type)
        return self.storage_type

    async def init_storage(self) -> bool:
        if self._use_embedded:
            return await self._embedded.init()
        return self._remote is not None and await self._remote.init()

    async def flush(self) -> bytes | None:
        """Persist the embedded image.  No-op under the remote backend."""
        if not self._use_embedded:
            return None
        return await self._embedded.persist()

    async def aclose(self) -> None:
        """Release HTTP clients held by the remote driver and the image sink."""
        if self._remote is not None:
            await self._remote.aclose()
        close_sink = getattr(self._embedded.sink, "aclose", None)
        if close_sink is not None:
            await close_sink()

    # -- Statements ------------------------------------------------------------

    async def query_storage(self, sql: str, params: Sequence[Any] | None = None) -> StorageResult:
        try:
            if self._use_embedded:
                rows = await self._embedded.query(sql, params)
                return StorageResult(success=True, results=rows)
            return await self._require_remote().query(sql, params)
        except Exception as exc:  # noqa: BLE001
            return StorageResult.failed(str(exc) or "Unknown error occurred")

    async def execute_storage(self, sql: str, params: Sequence[Any] | None = None) -> StorageResult:
        try:
            if self._use_embedded:
                success = await self._embedded.execute(sql, params)
                return StorageResult(success=success)
            return await self._require_remote().execute(sql, params)
        except Exception as exc:  # noqa: BLE001
            return StorageResult.failed(str(exc) or "Unknown error occurred")

    def _require_remote(self) -> RemoteDriver:
        if self._remote is None:
            msg = "API credentials not configured"
            raise RuntimeError(msg)
        return self._remote


# -- Row canonicalisation ------------------------------------------------------


def format_widget(row: Mapping[str, Any]) -> Widget:
    """Translate a raw ``widgets`` row into a Widget.

    ``tags`` may arrive already decoded (remote JSON) or as JSON text
    (embedded); anything else becomes an empty list.  Missing timestamps
    default to *now*.
    """
    data = dict(row)

    tags = data.get("tags")
    if isinstance(tags, str):
        tags = json.loads(tags) if tags else []
    data["tags"] = tags if isinstance(tags, list) else []

    custom_fields = data.get("customFields")
    if isinstance(custom_fields, str):
        custom_fields = json.loads(custom_fields) if custom_fields else None
    data["customFields"] = custom_fields or None

    data["isProtected"] = bool(data.get("isProtected"))
    _stamp(data)
    data["content"] = data.get("content") or ""
    return Widget.model_validate(data)


def format_folder(row: Mapping[str, Any]) -> Folder:
    return Folder.model_validate(_stamp(dict(row)))


def format_folder_node(row: Mapping[str, Any]) -> FolderNode:
    """Like ``format_folder`` but keeps the ``level`` column of hierarchy rows."""
    return FolderNode.model_validate(_stamp(dict(row)))


def _stamp(data: dict[str, Any]) -> dict[str, Any]:
    data["createdAt"] = parse_timestamp(data.get("createdAt"))
    data["updatedAt"] = parse_timestamp(data.get("updatedAt"))
    return data
