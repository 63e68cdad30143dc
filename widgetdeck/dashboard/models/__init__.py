"""Data models for the dashboard data layer."""

from widgetdeck.dashboard.models.enums import (
    FolderInitState,
    FolderType,
    SchemaStatus,
    StorageBackend,
    WidgetType,
)
from widgetdeck.dashboard.models.folder import Folder, FolderCreate, FolderNode
from widgetdeck.dashboard.models.widget import Widget, WidgetCreate

__all__ = [
    # Folder
    "Folder",
    "FolderCreate",
    # Enums
    "FolderInitState",
    "FolderNode",
    "FolderType",
    "SchemaStatus",
    "StorageBackend",
    # Widget
    "Widget",
    "WidgetCreate",
    "WidgetType",
]
