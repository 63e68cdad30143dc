"""Widget data models.

Attributes are snake_case; the storage column names (``isProtected``,
``customFields``, ``createdAt`` ...) are accepted and emitted as aliases so a
raw row maps straight onto the model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from widgetdeck.dashboard.models.enums import WidgetType


class WidgetCreate(BaseModel):
    """Input for creating a widget.  ``id`` and timestamps are assigned on insert."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    content: str = ""
    type: WidgetType
    tags: list[str] = Field(default_factory=list)
    url: str | None = None
    is_protected: bool = Field(default=False, alias="isProtected")
    credential_type: str | None = Field(default=None, alias="credentialType")
    custom_fields: dict[str, Any] | None = Field(default=None, alias="customFields")
    folder_id: str | None = None


class Widget(WidgetCreate):
    """A stored dashboard item."""

    id: str
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
