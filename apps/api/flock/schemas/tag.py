"""Pydantic schemas for tags."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

DEFAULT_TAG_COLOR = "#1890ff"
HEX_COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(default=DEFAULT_TAG_COLOR, pattern=HEX_COLOR_PATTERN)


class TagUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)


class TagRead(BaseModel):
    id: UUID
    organization_id: UUID
    name: str
    color: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TagWithCount(TagRead):
    people_count: int
