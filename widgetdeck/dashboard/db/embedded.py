"""Embedded store driver: an in-memory SQLite engine with a durable image.

Lifecycle:

1. ``init()`` reads the last image from the sink (if any), loads it into a
   fresh in-memory engine, creates missing tables and indexes, and seeds
   sample rows into an empty ``widgets`` table.
2. ``query()`` / ``execute()`` run positional-parameter SQL against the engine.
3. ``persist()`` serialises the whole database and overwrites the sink.  The
   repositories call it after every mutation; it is the only durability
   mechanism (no WAL, no incremental writes).

In-memory statements run directly on the event loop; only sink I/O suspends.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from loguru import logger
from sqlalchemy import Engine, func, select
from sqlalchemy.exc import SQLAlchemyError

from widgetdeck.dashboard.db.base import StorageError
from widgetdeck.dashboard.db.engine import create_memory_engine, dump_image, load_image
from widgetdeck.dashboard.db.tables import metadata, vault_keys, widgets
from widgetdeck.dashboard.utils import to_iso

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Connection

    from widgetdeck.dashboard.store.base import ImageSink


class EmbeddedDriver:
    """Owns the in-memory engine handle and its image lifecycle.

    ``sink=None`` keeps the database purely in memory; ``persist()`` then only
    serialises.
    """

    def __init__(self, sink: ImageSink | None = None, *, seed_sample_data: bool = True) -> None:
        self._sink = sink
        self._seed_sample_data = seed_sample_data
        self._engine: Engine | None = None

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    @property
    def sink(self) -> ImageSink | None:
        return self._sink

    # -- Lifecycle -------------------------------------------------------------

    async def init(self) -> bool:
        """Load or create the database.  Idempotent; returns ``False`` instead of raising."""
        if self._engine is not None:
            return True

        image = await self._load_image()

        engine = create_memory_engine()
        try:
            if image:
                load_image(engine, image)
            with engine.begin() as conn:
                metadata.create_all(conn)
                count = conn.scalar(select(func.count()).select_from(widgets)) or 0
                if count == 0 and self._seed_sample_data:
                    _insert_sample_data(conn)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to initialize SQLite database: {}", exc)
            engine.dispose()
            return False

        self._engine = engine
        logger.info("SQLite: initialised ({})", "loaded image" if image else "new database")
        return True

    async def _load_image(self) -> bytes | None:
        if self._sink is None:
            return None
        try:
            return await self._sink.read_image()
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to load database from image: {}", exc)
            return None

    # -- Statements ------------------------------------------------------------

    async def query(self, sql: str, params: Sequence[Any] | None = None) -> list[dict[str, Any]]:
        """Run a statement and return its rows as plain records."""
        engine = await self._require_engine()
        try:
            with engine.begin() as conn:
                result = conn.exec_driver_sql(sql, tuple(params or ()))
                if not result.returns_rows:
                    return []
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            logger.error("SQLite query error: {}", exc)
            msg = "Failed to query database"
            raise StorageError(msg) from exc

    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> bool:
        """Run an INSERT / UPDATE / DELETE / DDL statement.  Engine errors raise."""
        engine = await self._require_engine()
        try:
            with engine.begin() as conn:
                conn.exec_driver_sql(sql, tuple(params or ()))
        except SQLAlchemyError as exc:
            logger.error("SQLite execute error: {}", exc)
            msg = "Failed to execute database operation"
            raise StorageError(msg) from exc
        return True

    async def _require_engine(self) -> Engine:
        if self._engine is None and not await self.init():
            msg = "Database not initialized"
            raise StorageError(msg)
        assert self._engine is not None
        return self._engine

    # -- Durability ------------------------------------------------------------

    def serialize(self) -> bytes:
        if self._engine is None:
            msg = "Database not initialized"
            raise StorageError(msg)
        return dump_image(self._engine)

    async def persist(self) -> bytes | None:
        """Serialise the full database and overwrite the sink.

        Failures are logged and swallowed: the in-memory state stays correct,
        only durability for this call is lost.
        """
        if self._engine is None:
            return None
        try:
            data = self.serialize()
            if self._sink is not None:
                await self._sink.write_image(data)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to save database image: {}", exc)
            return None
        logger.debug("SQLite: persisted image ({} bytes)", len(data))
        return data

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


_SAMPLE_COLUMNS = (
    "id",
    "title",
    "content",
    "type",
    "tags",
    "url",
    "isProtected",
    "credentialType",
    "customFields",
    "createdAt",
    "updatedAt",
)


def _insert_sample_data(conn: Connection) -> None:
    now = datetime.now(UTC)
    now_s = to_iso(now)
    week_ago = to_iso(now - timedelta(days=7))
    month_ago = to_iso(now - timedelta(days=30))

    rows = [
        (
            "widget-1",
            "Important Links",
            "Collection of frequently used websites and resources",
            "link",
            '["work", "resources"]',
            "https://example.com",
            0,
            None,
            None,
            week_ago,
            now_s,
        ),
        (
            "widget-2",
            "Project Notes",
            "Notes for the current dashboard project including requirements and deadlines",
            "note",
            '["project", "work"]',
            None,
            0,
            None,
            None,
            month_ago,
            week_ago,
        ),
        (
            "widget-3",
            "Server Credentials",
            "Login information for the development server",
            "credential",
            '["server", "security"]',
            None,
            1,
            "server",
            '{"username": "admin", "server": "dev.example.com", "port": "22"}',
            month_ago,
            week_ago,
        ),
        (
            "widget-4",
            "Personal Tasks",
            "List of personal tasks and reminders",
            "tagged",
            '["personal", "tasks"]',
            None,
            0,
            None,
            None,
            week_ago,
            now_s,
        ),
    ]
    conn.execute(widgets.insert(), [dict(zip(_SAMPLE_COLUMNS, row, strict=True)) for row in rows])

    conn.execute(
        vault_keys.insert().prefix_with("OR IGNORE"),
        {
            "id": "default-key",
            "key_hash": "hashed_master_password_would_go_here",
            "hint": "Your favorite color",
            "createdAt": month_ago,
            "lastUsed": now_s,
        },
    )
