"""Dashboard response schemas."""

from pydantic import BaseModel

from flock.schemas.note import NoteRead
from flock.schemas.tag import TagWithCount


class PeopleStats(BaseModel):
    total_people: int
    active_people: int
    inactive_people: int
    visitors: int
    people_this_month: int


class DashboardResponse(BaseModel):
    stats: PeopleStats
    recent_notes: list[NoteRead]
    top_tags: list[TagWithCount]
