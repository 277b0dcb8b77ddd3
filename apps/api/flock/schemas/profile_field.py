"""Pydantic schemas for profile field definitions."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from flock.db.enums import FIELD_TYPES_WITH_OPTIONS, FieldType, FieldVisibility


class FieldOption(BaseModel):
    value: str = Field(min_length=1, max_length=255)
    label: str = Field(min_length=1, max_length=255)


class ProfileFieldBase(BaseModel):
    label: str = Field(min_length=1, max_length=255, description="Display label")
    type: FieldType = Field(description="Data type for the field")
    options: list[FieldOption] | None = Field(
        default=None,
        description="Ordered options (required for select/multiselect)",
    )
    required: bool = False
    visibility: FieldVisibility = FieldVisibility.PUBLIC

    @model_validator(mode="after")
    def validate_options(self):
        """Ensure options are provided for choice types."""
        if self.type in FIELD_TYPES_WITH_OPTIONS and not self.options:
            raise ValueError("Options are required for select and multiselect fields")
        return self


class ProfileFieldCreate(ProfileFieldBase):
    """Request body for creating a field; key is derived from label when omitted."""

    key: str | None = Field(
        default=None,
        max_length=100,
        description="Unique field key (lowercase, underscores)",
    )


class ProfileFieldRecord(ProfileFieldBase):
    """Payload written through the entity client."""

    key: str = Field(min_length=1, max_length=100)
    order_index: int = Field(ge=0)
    archived: bool = False


class ProfileFieldUpdate(BaseModel):
    label: str | None = Field(default=None, min_length=1, max_length=255)
    options: list[FieldOption] | None = None
    required: bool | None = None
    visibility: FieldVisibility | None = None
    order_index: int | None = Field(default=None, ge=0)
    archived: bool | None = None


class ProfileFieldRead(BaseModel):
    id: UUID
    organization_id: UUID
    key: str
    label: str
    type: FieldType
    options: list[FieldOption] | None
    required: bool
    visibility: FieldVisibility
    order_index: int
    archived: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileFieldEdit(BaseModel):
    """Editable attributes; key and type are fixed once created."""

    label: str | None = Field(default=None, min_length=1, max_length=255)
    options: list[FieldOption] | None = None
    required: bool | None = None
    visibility: FieldVisibility | None = None


class ReorderRequest(BaseModel):
    field_ids: list[UUID] = Field(min_length=1)


class ReorderResponse(BaseModel):
    success: bool
    message: str
    fields: list[ProfileFieldRead]


class FormControlRead(BaseModel):
    """A rendered input control for one field definition."""

    key: str
    label: str
    field_type: FieldType
    widget: str
    required: bool
    read_only: bool
    value: Any = None
    options: list[FieldOption] = Field(default_factory=list)
    placeholder: str | None = None
    display_value: str | None = None
