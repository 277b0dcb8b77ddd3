"""Pydantic schemas for person notes."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from flock.db.enums import NoteVisibility


class NoteCreate(BaseModel):
    """Payload accepted by the notes entity client."""

    person_id: UUID
    author_user_id: UUID
    body: str = Field(min_length=1, max_length=20000)
    visibility: NoteVisibility = NoteVisibility.ORG


class NoteUpdate(BaseModel):
    body: str | None = Field(default=None, min_length=1, max_length=20000)
    visibility: NoteVisibility | None = None


class NoteRequest(BaseModel):
    """Body of POST /people/{id}/notes; person and author come from the route and session."""

    body: str = Field(min_length=1, max_length=20000)
    visibility: NoteVisibility = NoteVisibility.ORG


class NoteRead(BaseModel):
    id: UUID
    organization_id: UUID
    person_id: UUID
    author_user_id: UUID
    body: str
    visibility: NoteVisibility
    created_at: datetime

    model_config = {"from_attributes": True}
