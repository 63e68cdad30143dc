"""Shared enumerations used across the dashboard data layer."""

from __future__ import annotations

from enum import StrEnum

# -- Items -------------------------------------------------------------------


class WidgetType(StrEnum):
    LINK = "link"
    NOTE = "note"
    CREDENTIAL = "credential"
    TAGGED = "tagged"


class FolderType(StrEnum):
    """Folder scope.  ``ALL`` groups every widget type."""

    LINK = "link"
    NOTE = "note"
    CREDENTIAL = "credential"
    TAGGED = "tagged"
    ALL = "all"


# -- Storage -----------------------------------------------------------------


class StorageBackend(StrEnum):
    """Display label of the active backend."""

    EMBEDDED = "Local SQLite"
    REMOTE = "Remote SQL"


class SchemaStatus(StrEnum):
    OK = "ok"
    RECREATED = "recreated"


class FolderInitState(StrEnum):
    """Progress of ``FolderRepository.init_folders``."""

    UNINITIALIZED = "uninitialized"
    SCHEMA_CHECKED = "schema_checked"
    SCHEMA_OK = "schema_ok"
    SCHEMA_RECREATED = "schema_recreated"
    DEFAULTS_CHECKED = "defaults_checked"
    DEFAULTS_PRESENT = "defaults_present"
    DEFAULTS_SEEDED = "defaults_seeded"
    READY = "ready"
