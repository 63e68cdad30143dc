"""SQLAlchemy Core table definitions for the dashboard database.

These are the single source of truth for the schema.  The embedded driver
creates them directly; the schema manager compiles the same definitions to
SQLite DDL so it can repair a table through either backend.

Column names follow the stored format (``isProtected``, ``createdAt`` ...),
which the remote service shares.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Index, Integer, MetaData, Table, Text, text

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "pk": "pk_%(table_name)s",
    }
)

widgets = Table(
    "widgets",
    metadata,
    Column("id", Text, primary_key=True),
    Column("title", Text, nullable=False),
    Column("content", Text),
    Column("type", Text, nullable=False),
    Column("tags", Text),
    Column("url", Text),
    Column("isProtected", Integer, server_default=text("0")),
    Column("credentialType", Text),
    Column("customFields", Text),
    Column("folder_id", Text),
    Column("createdAt", Text, nullable=False),
    Column("updatedAt", Text, nullable=False),
    CheckConstraint("type IN ('link', 'note', 'credential', 'tagged')", name="type"),
    Index("idx_widgets_type", "type"),
    Index("idx_widgets_folder", "folder_id"),
)

folders = Table(
    "folders",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("type", Text, nullable=False),
    Column("parent_id", Text),
    Column("createdAt", Text, nullable=False),
    Column("updatedAt", Text, nullable=False),
    CheckConstraint("type IN ('link', 'note', 'credential', 'tagged', 'all')", name="type"),
    Index("idx_folders_parent", "parent_id"),
)

# Credential-unlock metadata; only its existence matters to the data layer.
vault_keys = Table(
    "vault_keys",
    metadata,
    Column("id", Text, primary_key=True),
    Column("key_hash", Text, nullable=False),
    Column("hint", Text),
    Column("createdAt", Text, nullable=False),
    Column("lastUsed", Text),
)

REQUIRED_FOLDER_COLUMNS = frozenset(folders.columns.keys())
