"""SQLAlchemy ORM models for organizations, people, households, tags and profile fields."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, ForeignKey, Index, Integer, String, Text, Uuid, func
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flock.db.base import Base
from flock.db.enums import (
    DEFAULT_PERSON_STATUS, FieldVisibility, NoteVisibility, Relationship
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )


# =============================================================================
# Tenant
# =============================================================================

class Organization(Base):
    """
    A congregation using the console.

    All records belong to an organization and every query
    is scoped by organization_id.
    """
    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    people: Mapped[list["Person"]] = relationship(
        back_populates="organization",
        cascade="all, delete-orphan",
    )


# =============================================================================
# People & Households
# =============================================================================

class Person(TimestampMixin, Base):
    """
    A person record.

    `fields` maps ProfileFieldDef.key to a value shaped by the field type.
    Values for archived definitions are kept as-is. `household_id` is a
    reference; HouseholdMember is the membership list.
    """
    __tablename__ = "people"
    __table_args__ = (
        Index("idx_people_org_status", "organization_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    preferred_name: Mapped[str | None] = mapped_column(String(100))
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(50))
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_PERSON_STATUS.value, nullable=False
    )
    tag_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    household_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("households.id", ondelete="SET NULL")
    )
    fields: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    organization: Mapped["Organization"] = relationship(back_populates="people")


class Household(TimestampMixin, Base):
    __tablename__ = "households"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class HouseholdMember(Base):
    """Join record between a household and a person."""
    __tablename__ = "household_members"
    __table_args__ = (
        Index("idx_household_members_household", "household_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    household_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )
    person_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("people.id", ondelete="CASCADE"), nullable=False
    )
    relationship: Mapped[str] = mapped_column(
        String(20), default=Relationship.OTHER.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )


# =============================================================================
# Tags
# =============================================================================

class Tag(Base):
    """A label attached to people through Person.tag_ids. Usage counts are derived."""
    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(20), default="#1890ff", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )


# =============================================================================
# Profile Field Definitions
# =============================================================================

class ProfileFieldDef(TimestampMixin, Base):
    """
    Runtime-configurable custom attribute collected on people.

    Archived definitions are hidden from forms, lists and exports;
    Person.fields data for them is retained.
    """
    __tablename__ = "profile_field_defs"
    __table_args__ = (
        Index("idx_profile_field_defs_org_order", "organization_id", "order_index"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    options: Mapped[list | None] = mapped_column(JSON)
    required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    visibility: Mapped[str] = mapped_column(
        String(20), default=FieldVisibility.PUBLIC.value, nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


# =============================================================================
# Notes
# =============================================================================

class Note(Base):
    __tablename__ = "notes"
    __table_args__ = (
        Index("idx_notes_person", "person_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    person_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("people.id", ondelete="CASCADE"), nullable=False
    )
    # Users live in the external auth system; no FK.
    author_user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    visibility: Mapped[str] = mapped_column(
        String(20), default=NoteVisibility.ORG.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
