"""Widget repository.

CRUD plus search and filter operations over ``widgets``.  Owns the JSON
encoding of ``tags`` / ``customFields`` and the timestamp stamping.  All
list operations order by ``updatedAt`` (newest first).
"""

from __future__ import annotations

import json
from collections import Counter
from typing import TYPE_CHECKING, Any

from loguru import logger

from widgetdeck.dashboard.managers.errors import RepositoryError, WidgetLockedError, WidgetNotFoundError
from widgetdeck.dashboard.models.widget import Widget, WidgetCreate
from widgetdeck.dashboard.storage import format_widget
from widgetdeck.dashboard.utils import new_id, now_iso, parse_timestamp

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from widgetdeck.dashboard.models.enums import WidgetType
    from widgetdeck.dashboard.storage import StorageRouter

    UnlockCheck = Callable[[str, str], Awaitable[bool]]


def _normalise(widget: WidgetCreate) -> dict[str, Any]:
    """Field values as they are stored: empty optional fields become NULL."""
    return {
        **widget.model_dump(),
        "url": widget.url or None,
        "credential_type": widget.credential_type or None,
        "custom_fields": widget.custom_fields or None,
    }


def _encode_fields(widget: WidgetCreate) -> list[Any]:
    """Column values shared by INSERT and UPDATE, in statement order."""
    return [
        widget.title,
        widget.content,
        str(widget.type),
        json.dumps(widget.tags),
        widget.url or None,
        1 if widget.is_protected else 0,
        widget.credential_type or None,
        json.dumps(widget.custom_fields) if widget.custom_fields else None,
    ]


class WidgetRepository:
    def __init__(self, router: StorageRouter) -> None:
        self._router = router

    # -- Read ------------------------------------------------------------------

    async def get_all_widgets(self) -> list[Widget]:
        return await self._select(
            "SELECT * FROM widgets ORDER BY updatedAt DESC",
            [],
            "Failed to fetch widgets",
        )

    async def get_widget_by_id(self, widget_id: str) -> Widget | None:
        """Return the widget, or ``None`` when it is missing or the query failed."""
        response = await self._router.query_storage("SELECT * FROM widgets WHERE id = ?", [widget_id])
        if not response.success or not response.results:
            return None
        return format_widget(response.results[0])

    async def search_widgets(self, query: str) -> list[Widget]:
        """Substring match on title or content.  Tags are not searched."""
        term = f"%{query}%"
        return await self._select(
            "SELECT * FROM widgets WHERE title LIKE ? OR content LIKE ? ORDER BY updatedAt DESC",
            [term, term],
            "Failed to search widgets",
        )

    async def get_widgets_by_type(self, widget_type: WidgetType | str) -> list[Widget]:
        return await self._select(
            "SELECT * FROM widgets WHERE type = ? ORDER BY updatedAt DESC",
            [str(widget_type)],
            "Failed to fetch widgets by type",
        )

    async def get_widgets_by_tag(self, tag: str) -> list[Widget]:
        """Match ``tag`` as a substring of the stored JSON tag list.

        This is text matching, not set membership: ``"work"`` also matches a
        widget tagged ``"homework"``.
        """
        return await self._select(
            "SELECT * FROM widgets WHERE tags LIKE ? ORDER BY updatedAt DESC",
            [f"%{tag}%"],
            "Failed to fetch widgets by tag",
        )

    async def get_tag_counts(self) -> list[tuple[str, int]]:
        """Tag frequencies across all widgets, most frequent first.

        Counts every occurrence in each widget's list, so a tag repeated
        within one widget counts more than once.
        """
        counts: Counter[str] = Counter()
        for widget in await self.get_all_widgets():
            counts.update(widget.tags)
        return counts.most_common()

    # -- Write -----------------------------------------------------------------

    async def create_widget(self, widget: WidgetCreate) -> Widget:
        """Insert a widget and return it as stored, without re-reading the row."""
        now = now_iso()
        widget_id = new_id("widget")

        response = await self._router.execute_storage(
            "INSERT INTO widgets (id, title, content, type, tags, url, isProtected, credentialType, "
            "customFields, folder_id, createdAt, updatedAt) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [widget_id, *_encode_fields(widget), widget.folder_id, now, now],
        )
        if not response.success:
            raise RepositoryError.from_result(response, "Failed to create widget")

        await self._router.flush()
        logger.debug("Created widget {} ({})", widget_id, widget.type)
        return Widget.model_validate(
            {
                **_normalise(widget),
                "id": widget_id,
                "created_at": parse_timestamp(now),
                "updated_at": parse_timestamp(now),
            }
        )

    async def update_widget(self, widget: Widget) -> Widget:
        """Rewrite the mutable fields and return the stored row.

        ``updated_at`` is always stamped to now.  ``folder_id`` is not written
        here; folders change only through ``FolderRepository.move_widget_to_folder``.
        """
        response = await self._router.execute_storage(
            "UPDATE widgets SET title = ?, content = ?, type = ?, tags = ?, url = ?, isProtected = ?, "
            "credentialType = ?, customFields = ?, updatedAt = ? WHERE id = ?",
            [*_encode_fields(widget), now_iso(), widget.id],
        )
        if not response.success:
            raise RepositoryError.from_result(response, "Failed to update widget")

        await self._router.flush()
        stored = await self.get_widget_by_id(widget.id)
        if stored is None:
            raise WidgetNotFoundError(widget.id)
        return stored

    async def delete_widget(self, widget_id: str) -> bool:
        response = await self._router.execute_storage("DELETE FROM widgets WHERE id = ?", [widget_id])
        if response.success:
            await self._router.flush()
        else:
            logger.warning("Failed to delete widget {}: {}", widget_id, response.error)
        return response.success

    # -- Protected items -------------------------------------------------------

    async def unlock_widget(self, widget_id: str, secret: str, verify: UnlockCheck) -> Widget:
        """Return a widget once ``verify(secret, widget_id)`` accepts the secret.

        Unprotected widgets are returned without calling ``verify``.  Secret
        storage and comparison belong to the caller-supplied check.
        """
        widget = await self.get_widget_by_id(widget_id)
        if widget is None:
            raise WidgetNotFoundError(widget_id)
        if widget.is_protected and not await verify(secret, widget_id):
            raise WidgetLockedError(widget_id)
        return widget

    # -- Helpers ---------------------------------------------------------------

    async def _select(self, sql: str, params: Sequence[Any], message: str) -> list[Widget]:
        response = await self._router.query_storage(sql, params)
        if not response.success or response.results is None:
            raise RepositoryError.from_result(response, message)
        return [format_widget(row) for row in response.results]
