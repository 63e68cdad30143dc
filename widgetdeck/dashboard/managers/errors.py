"""Domain exceptions raised by the repositories."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from widgetdeck.dashboard.db.base import StorageResult


class RepositoryError(RuntimeError):
    """Raised when the storage layer reports a failed query or execute."""

    @classmethod
    def from_result(cls, result: StorageResult, message: str) -> RepositoryError:
        """Prefer the storage error text, fall back to the domain message."""
        return cls(result.error or message)


class WidgetLockedError(PermissionError):
    """Raised when a protected widget is requested without a valid secret."""


class WidgetNotFoundError(LookupError):
    """Raised when a widget id does not match any row."""
