"""Folder repository.

CRUD and recursive hierarchy retrieval over ``folders``, plus the narrow
updates that move widgets and folders around the tree.

Known gaps, kept as-is:

- nothing prevents a folder from becoming its own ancestor;
- deleting a folder leaves widgets (``folder_id``) and child folders
  (``parent_id``) pointing at the removed id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from widgetdeck.dashboard.db.schema import SchemaError, SchemaManager
from widgetdeck.dashboard.managers.errors import RepositoryError
from widgetdeck.dashboard.models.enums import FolderInitState, SchemaStatus
from widgetdeck.dashboard.models.folder import Folder, FolderCreate, FolderNode
from widgetdeck.dashboard.storage import format_folder, format_folder_node, format_widget
from widgetdeck.dashboard.utils import new_id, now_iso, parse_timestamp

if TYPE_CHECKING:
    from collections.abc import Sequence

    from widgetdeck.dashboard.models.enums import FolderType
    from widgetdeck.dashboard.models.widget import Widget
    from widgetdeck.dashboard.storage import StorageRouter

# Roots first, then each child joined onto its parent with depth + 1.  Folders
# whose ancestry never reaches a root (cycles, deleted parents) are not reached.
HIERARCHY_SQL = """
WITH RECURSIVE folder_tree(id, name, type, parent_id, createdAt, updatedAt, level) AS (
    SELECT id, name, type, parent_id, createdAt, updatedAt, 0
    FROM folders
    WHERE parent_id IS NULL
    UNION ALL
    SELECT f.id, f.name, f.type, f.parent_id, f.createdAt, f.updatedAt, ft.level + 1
    FROM folders f
    JOIN folder_tree ft ON f.parent_id = ft.id
)
SELECT * FROM folder_tree ORDER BY level ASC, updatedAt DESC
"""


class FolderRepository:
    """Folder data access and initialisation.

    ``init_folders`` walks ``FolderInitState``; the last state reached is kept
    on ``state`` so callers can tell how far a degraded start got.
    """

    def __init__(self, router: StorageRouter, schema: SchemaManager | None = None) -> None:
        self._router = router
        self._schema = schema or SchemaManager(router)
        self.state = FolderInitState.UNINITIALIZED

    # -- Initialisation --------------------------------------------------------

    async def init_folders(self) -> bool:
        """Check the table shape, then seed default folders.

        Returns ``False`` on any failure (logged, not retried).  Folder
        operations may be unreliable afterwards but callers carry on.
        """
        self.state = FolderInitState.UNINITIALIZED
        try:
            status = await self._schema.ensure_schema()
            self._advance(FolderInitState.SCHEMA_CHECKED)
            self._advance(
                FolderInitState.SCHEMA_RECREATED if status is SchemaStatus.RECREATED else FolderInitState.SCHEMA_OK
            )

            seeded = await self._schema.ensure_default_folders()
            self._advance(FolderInitState.DEFAULTS_CHECKED)
            self._advance(FolderInitState.DEFAULTS_SEEDED if seeded else FolderInitState.DEFAULTS_PRESENT)
        except SchemaError as exc:
            logger.error("Failed to initialize folders (state={}): {}", self.state, exc)
            return False

        self._advance(FolderInitState.READY)
        return True

    async def ensure_widget_folder_column(self) -> bool:
        """Additive migration for ``widgets.folder_id``.  ``False`` on failure."""
        try:
            await self._schema.ensure_widget_folder_column()
        except SchemaError as exc:
            logger.error("Failed to add folder column: {}", exc)
            return False
        return True

    def _advance(self, state: FolderInitState) -> None:
        logger.debug("Folders: {} -> {}", self.state, state)
        self.state = state

    # -- Read ------------------------------------------------------------------

    async def get_all_folders(self) -> list[Folder]:
        rows = await self._select("SELECT * FROM folders ORDER BY name ASC", [], "Failed to fetch folders")
        return [format_folder(row) for row in rows]

    async def get_folders_by_type(self, folder_type: FolderType | str) -> list[Folder]:
        rows = await self._select(
            "SELECT * FROM folders WHERE type = ? ORDER BY name ASC",
            [str(folder_type)],
            "Failed to fetch folders by type",
        )
        return [format_folder(row) for row in rows]

    async def get_folder_by_id(self, folder_id: str) -> Folder | None:
        response = await self._router.query_storage("SELECT * FROM folders WHERE id = ?", [folder_id])
        if not response.success or not response.results:
            return None
        return format_folder(response.results[0])

    async def get_folder_hierarchy(self) -> list[FolderNode]:
        """All folders reachable from a root, parents strictly before children.

        Ordered by depth, then most recently updated within a depth.
        """
        rows = await self._select(HIERARCHY_SQL, [], "Failed to fetch folder hierarchy")
        return [format_folder_node(row) for row in rows]

    async def get_widgets_by_folder(self, folder_id: str) -> list[Widget]:
        rows = await self._select(
            "SELECT * FROM widgets WHERE folder_id = ? ORDER BY updatedAt DESC",
            [folder_id],
            "Failed to fetch widgets by folder",
        )
        return [format_widget(row) for row in rows]

    # -- Write -----------------------------------------------------------------

    async def create_folder(self, folder: FolderCreate) -> Folder:
        now = now_iso()
        folder_id = new_id("folder")

        response = await self._router.execute_storage(
            "INSERT INTO folders (id, name, type, parent_id, createdAt, updatedAt) VALUES (?, ?, ?, ?, ?, ?)",
            [folder_id, folder.name, str(folder.type), folder.parent_id, now, now],
        )
        if not response.success:
            raise RepositoryError.from_result(response, "Failed to create folder")

        await self._router.flush()
        return Folder.model_validate(
            {
                **folder.model_dump(),
                "id": folder_id,
                "created_at": parse_timestamp(now),
                "updated_at": parse_timestamp(now),
            }
        )

    async def update_folder(self, folder: Folder) -> Folder:
        now = now_iso()

        response = await self._router.execute_storage(
            "UPDATE folders SET name = ?, type = ?, parent_id = ?, updatedAt = ? WHERE id = ?",
            [folder.name, str(folder.type), folder.parent_id, now, folder.id],
        )
        if not response.success:
            raise RepositoryError.from_result(response, "Failed to update folder")

        await self._router.flush()
        return folder.model_copy(update={"updated_at": parse_timestamp(now)})

    async def delete_folder(self, folder_id: str) -> bool:
        """Hard delete.  Widgets and child folders keep their now-dangling reference."""
        response = await self._router.execute_storage("DELETE FROM folders WHERE id = ?", [folder_id])
        if response.success:
            await self._router.flush()
        return response.success

    async def move_widget_to_folder(self, widget_id: str, folder_id: str | None) -> bool:
        """Set a widget's folder; ``None`` moves it to the root level."""
        return await self._touch(
            "UPDATE widgets SET folder_id = ?, updatedAt = ? WHERE id = ?",
            folder_id,
            widget_id,
        )

    async def move_folder(self, folder_id: str, parent_id: str | None) -> bool:
        """Re-parent a folder; ``None`` makes it a root.  Cycles are not checked."""
        return await self._touch(
            "UPDATE folders SET parent_id = ?, updatedAt = ? WHERE id = ?",
            parent_id,
            folder_id,
        )

    # -- Helpers ---------------------------------------------------------------

    async def _touch(self, sql: str, value: str | None, row_id: str) -> bool:
        response = await self._router.execute_storage(sql, [value, now_iso(), row_id])
        if response.success:
            await self._router.flush()
        else:
            logger.warning("Move failed for {}: {}", row_id, response.error)
        return response.success

    async def _select(self, sql: str, params: Sequence[Any], message: str) -> list[dict[str, Any]]:
        response = await self._router.query_storage(sql, params)
        if not response.success or response.results is None:
            raise RepositoryError.from_result(response, message)
        return response.results
