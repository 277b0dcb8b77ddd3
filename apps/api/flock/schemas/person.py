"""Pydantic schemas for people."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from flock.db.enums import PersonStatus


class PersonBase(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    preferred_name: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    status: PersonStatus = PersonStatus.ACTIVE
    tag_ids: list[UUID] = Field(default_factory=list)
    household_id: UUID | None = None
    fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator("preferred_name", "email", "phone", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        if v is not None and "@" not in v:
            raise ValueError("Invalid email")
        return v

    @field_validator("tag_ids")
    @classmethod
    def dedupe_tags(cls, v: list[UUID]) -> list[UUID]:
        """Tag ids are a set; keep first occurrence order."""
        return list(dict.fromkeys(v))


class PersonCreate(PersonBase):
    """Schema for creating a person."""

    pass


class PersonUpdate(BaseModel):
    """Partial update; only fields that are set are written."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    preferred_name: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    status: PersonStatus | None = None
    tag_ids: list[UUID] | None = None
    household_id: UUID | None = None
    fields: dict[str, Any] | None = None

    @field_validator("preferred_name", "email", "phone", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        if v is not None and "@" not in v:
            raise ValueError("Invalid email")
        return v

    @field_validator("tag_ids")
    @classmethod
    def dedupe_tags(cls, v: list[UUID] | None) -> list[UUID] | None:
        if v is None:
            return v
        return list(dict.fromkeys(v))


class PersonRead(PersonBase):
    id: UUID
    organization_id: UUID
    email: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def display_name(self) -> str:
        return self.preferred_name or f"{self.first_name} {self.last_name}"


class PersonStatusUpdate(BaseModel):
    status: PersonStatus


class BulkStatusUpdate(BaseModel):
    person_ids: list[UUID] = Field(min_length=1)
    status: PersonStatus


class BulkStatusResult(BaseModel):
    updated: int
    failed: int


class PersonTagsUpdate(BaseModel):
    tag_ids: list[UUID]


class PersonListItem(BaseModel):
    id: UUID
    display_name: str
    first_name: str
    last_name: str
    preferred_name: str | None
    email: str | None
    phone: str | None
    status: PersonStatus
    tag_ids: list[UUID]
    household_id: UUID | None
    fields: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class PersonListResponse(BaseModel):
    items: list[PersonListItem]
    total: int
