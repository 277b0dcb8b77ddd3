"""Pydantic schemas for the people CSV export flow."""

from uuid import UUID

from pydantic import BaseModel, Field

from flock.db.enums import PersonStatus


class ExportColumn(BaseModel):
    key: str
    label: str
    custom: bool = False
    default: bool = False


class ExportRequest(BaseModel):
    """Selected columns plus the list filters currently applied."""

    # None selects the default columns
    columns: list[str] | None = None
    search: str | None = None
    status: PersonStatus | None = None
    tag_ids: list[UUID] = Field(default_factory=list)
    fields: dict[str, str] = Field(
        default_factory=dict, description="Profile field key -> raw filter value"
    )
