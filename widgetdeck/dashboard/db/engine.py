"""In-memory SQLite engine and image (de)serialisation.

The whole database lives in one in-memory connection.  ``StaticPool`` hands
that same connection to every checkout, so the engine behaves as a single
process-wide handle.
"""

from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool


def create_memory_engine(**kwargs: object) -> Engine:
    """Create an engine backed by a single in-memory SQLite connection."""
    defaults: dict[str, object] = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    defaults.update(kwargs)
    return create_engine("sqlite://", **defaults)  # type: ignore[arg-type]


def load_image(engine: Engine, data: bytes) -> None:
    """Replace the engine's database with a previously serialised image."""
    with engine.connect() as conn:
        conn.connection.driver_connection.deserialize(data)  # type: ignore[union-attr]


def dump_image(engine: Engine) -> bytes:
    """Serialise the engine's full database into an opaque byte image."""
    with engine.connect() as conn:
        return conn.connection.driver_connection.serialize()  # type: ignore[union-attr]
