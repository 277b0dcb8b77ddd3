"""Composite read model for the person profile page."""

from pydantic import BaseModel

from flock.schemas.household import HouseholdRead, MemberDetail
from flock.schemas.note import NoteRead
from flock.schemas.person import PersonRead
from flock.schemas.profile_field import FormControlRead
from flock.schemas.tag import TagRead


class PersonProfile(BaseModel):
    person: PersonRead
    display_name: str
    tags: list[TagRead]
    household: HouseholdRead | None = None
    household_members: list[MemberDetail] = []
    notes: list[NoteRead] = []
    fields: list[FormControlRead] = []
