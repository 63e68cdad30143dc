"""Folder data models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from widgetdeck.dashboard.models.enums import FolderType


class FolderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    type: FolderType = FolderType.ALL
    parent_id: str | None = None


class Folder(FolderCreate):
    """A named, typed container.  ``parent_id`` of ``None`` marks a root."""

    id: str
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class FolderNode(Folder):
    """A folder as returned by the hierarchy query, with its depth (roots are 0)."""

    level: int = 0
