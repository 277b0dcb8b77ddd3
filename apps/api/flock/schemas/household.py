"""Pydantic schemas for households and household membership."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from flock.db.enums import Relationship
from flock.schemas.person import PersonRead


class HouseholdCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class HouseholdUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)


class HouseholdRead(BaseModel):
    id: UUID
    organization_id: UUID
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class HouseholdMemberCreate(BaseModel):
    household_id: UUID
    person_id: UUID
    relationship: Relationship = Relationship.OTHER


class HouseholdMemberUpdate(BaseModel):
    relationship: Relationship | None = None


class HouseholdMemberRead(BaseModel):
    id: UUID
    organization_id: UUID
    household_id: UUID
    person_id: UUID
    relationship: Relationship
    created_at: datetime

    model_config = {"from_attributes": True}


class HouseholdSummary(HouseholdRead):
    member_count: int


class AddMemberRequest(BaseModel):
    person_id: UUID
    relationship: Relationship = Relationship.OTHER


class RelationshipUpdate(BaseModel):
    relationship: Relationship


class MemberDetail(BaseModel):
    member: HouseholdMemberRead
    person: PersonRead


class HouseholdDetail(BaseModel):
    household: HouseholdRead
    members: list[MemberDetail]
    available_people: list[PersonRead]
