"""Repositories for the dashboard data layer.

Each repository builds parametrised SQL, sends it through the
``StorageRouter`` and returns typed models.  A failed storage result raises
``RepositoryError`` with a domain message; every successful mutation flushes
the embedded image before returning.
"""

from widgetdeck.dashboard.managers.errors import RepositoryError, WidgetLockedError, WidgetNotFoundError
from widgetdeck.dashboard.managers.folders import FolderRepository
from widgetdeck.dashboard.managers.widgets import WidgetRepository

__all__ = [
    "FolderRepository",
    "RepositoryError",
    "WidgetLockedError",
    "WidgetNotFoundError",
    "WidgetRepository",
]
