"""Schema manager: keeps ``folders`` and ``widgets`` in the expected shape.

Runs through the storage router, so the same checks apply to either backend
(both speak SQLite).  DDL is compiled from the table definitions in
``tables.py``.

Two migration policies coexist, one per table:

- ``folders``: if any required column is missing the table is dropped and
  recreated.  Existing folder rows are lost.
- ``widgets``: a missing ``folder_id`` column is added in place.

Every schema change is followed by a flush of the full database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger
from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateIndex, CreateTable, DropTable, ExecutableDDLElement

from widgetdeck.dashboard.db.tables import REQUIRED_FOLDER_COLUMNS, folders, widgets
from widgetdeck.dashboard.models.enums import FolderType, SchemaStatus
from widgetdeck.dashboard.utils import now_iso

if TYPE_CHECKING:
    from collections.abc import Sequence

    from widgetdeck.dashboard.storage import StorageRouter

# Fixed ids keep seeding idempotent across repeated initialisation.
DEFAULT_FOLDERS: tuple[tuple[str, str, FolderType], ...] = (
    ("folder-links", "Links", FolderType.LINK),
    ("folder-notes", "Notes", FolderType.NOTE),
    ("folder-credentials", "Credentials", FolderType.CREDENTIAL),
    ("folder-tagged", "Tagged", FolderType.TAGGED),
    ("folder-all", "All Items", FolderType.ALL),
)

_KNOWN_TABLES = frozenset({"widgets", "folders", "vault_keys"})
_DIALECT = sqlite.dialect()


class SchemaError(RuntimeError):
    """Raised when a schema check or migration statement fails."""


def compile_ddl(element: ExecutableDDLElement) -> str:
    return str(element.compile(dialect=_DIALECT)).strip()


class SchemaManager:
    def __init__(self, router: StorageRouter) -> None:
        self._router = router

    # -- Folders ---------------------------------------------------------------

    async def ensure_schema(self) -> SchemaStatus:
        """Create ``folders`` if absent; drop and recreate it if columns drifted.

        Returns ``RECREATED`` whenever the table was (re)built, ``OK`` when it
        already had every required column.
        """
        if await self.table_exists("folders"):
            missing = REQUIRED_FOLDER_COLUMNS - await self.table_columns("folders")
            if not missing:
                return SchemaStatus.OK
            logger.warning("folders table missing columns {} -- recreating", sorted(missing))
            await self._execute(compile_ddl(DropTable(folders, if_exists=True)))
        else:
            logger.info("folders table absent -- creating")

        await self._execute(compile_ddl(CreateTable(folders, if_not_exists=True)))
        for index in folders.indexes:
            await self._execute(compile_ddl(CreateIndex(index, if_not_exists=True)))
        await self._router.flush()
        return SchemaStatus.RECREATED

    async def ensure_default_folders(self) -> bool:
        """Seed one folder per widget type plus ``all`` into an empty table.

        Returns whether anything was inserted.
        """
        rows = await self._query("SELECT COUNT(*) AS count FROM folders")
        if rows and rows[0].get("count", 0) > 0:
            return False

        now = now_iso()
        for folder_id, name, folder_type in DEFAULT_FOLDERS:
            await self._execute(
                "INSERT OR REPLACE INTO folders (id, name, type, parent_id, createdAt, updatedAt) "
                "VALUES (?, ?, ?, NULL, ?, ?)",
                [folder_id, name, str(folder_type), now, now],
            )
        await self._router.flush()
        logger.info("Seeded {} default folders", len(DEFAULT_FOLDERS))
        return True

    # -- Widgets ---------------------------------------------------------------

    async def ensure_widget_folder_column(self) -> bool:
        """Add ``widgets.folder_id`` when missing.  Returns whether it was added."""
        if "folder_id" in await self.table_columns("widgets"):
            return False

        await self._execute("ALTER TABLE widgets ADD COLUMN folder_id TEXT")
        for index in widgets.indexes:
            await self._execute(compile_ddl(CreateIndex(index, if_not_exists=True)))
        await self._router.flush()
        logger.info("Added folder_id column to widgets")
        return True

    # -- Introspection ---------------------------------------------------------

    async def table_exists(self, table: str) -> bool:
        rows = await self._query("SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?", [table])
        return bool(rows)

    async def table_columns(self, table: str) -> set[str]:
        if table not in _KNOWN_TABLES:
            msg = f"Unknown table: {table}"
            raise SchemaError(msg)
        rows = await self._query(f"PRAGMA table_info({table})")
        return {row["name"] for row in rows}

    # -- Helpers ---------------------------------------------------------------

    async def _query(self, sql: str, params: Sequence[Any] | None = None) -> list[dict[str, Any]]:
        response = await self._router.query_storage(sql, params)
        if not response.success or response.results is None:
            raise SchemaError(response.error or "Failed to inspect schema")
        return response.results

    async def _execute(self, sql: str, params: Sequence[Any] | None = None) -> None:
        response = await self._router.execute_storage(sql, params)
        if not response.success:
            raise SchemaError(response.error or "Failed to migrate schema")
