"""Result contract shared by both storage drivers and the router."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class StorageError(RuntimeError):
    """Raised by a driver when the engine rejects a statement."""


@dataclass
class StorageResult:
    """Outcome of a routed query or execute call.

    ``results`` holds plain row records for queries.  ``error`` is set only
    when ``success`` is false.
    """

    success: bool
    results: list[dict[str, Any]] | None = None
    error: str | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failed(cls, error: str) -> StorageResult:
        return cls(success=False, error=error)
