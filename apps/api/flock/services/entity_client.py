"""Generic entity client: list/get/create/update per record type.

Every service in the console goes through this contract instead of
touching the ORM directly. Results come back in the `{success, data,
message}` envelope; failures are logged here and reported through the
envelope rather than raised. There is no delete.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flock.db.models import Household, HouseholdMember, Note, Person, ProfileFieldDef, Tag
from flock.schemas.common import EntityResult
from flock.schemas.household import (
    HouseholdCreate,
    HouseholdMemberCreate,
    HouseholdMemberRead,
    HouseholdMemberUpdate,
    HouseholdRead,
    HouseholdUpdate,
)
from flock.schemas.note import NoteCreate, NoteRead, NoteUpdate
from flock.schemas.person import PersonCreate, PersonRead, PersonUpdate
from flock.schemas.profile_field import ProfileFieldRead, ProfileFieldRecord, ProfileFieldUpdate
from flock.schemas.tag import TagCreate, TagRead, TagUpdate

logger = logging.getLogger(__name__)


class EntityClientError(Exception):
    """A data call failed; carries the user-facing message."""


class EntityNotFoundError(EntityClientError):
    """The requested record does not exist in the organization."""

    pass


class EntityValidationError(EntityClientError):
    """The payload was rejected by the record schema."""

    pass


class ConflictError(Exception):
    """The action is blocked by existing data (e.g. a tag still in use)."""

    pass


class UnsupportedOperationError(Exception):
    """The entity contract has no call that can perform this action."""

    pass


@dataclass(frozen=True)
class EntityType:
    """How one record type maps onto the ORM and its schemas."""

    name: str
    model: type
    read_schema: type[BaseModel]
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]
    json_columns: tuple[str, ...] = ()


ENTITY_TYPES: dict[str, EntityType] = {
    "people": EntityType(
        name="Person",
        model=Person,
        read_schema=PersonRead,
        create_schema=PersonCreate,
        update_schema=PersonUpdate,
        json_columns=("tag_ids", "fields"),
    ),
    "households": EntityType(
        name="Household",
        model=Household,
        read_schema=HouseholdRead,
        create_schema=HouseholdCreate,
        update_schema=HouseholdUpdate,
    ),
    "household_members": EntityType(
        name="Household member",
        model=HouseholdMember,
        read_schema=HouseholdMemberRead,
        create_schema=HouseholdMemberCreate,
        update_schema=HouseholdMemberUpdate,
    ),
    "tags": EntityType(
        name="Tag",
        model=Tag,
        read_schema=TagRead,
        create_schema=TagCreate,
        update_schema=TagUpdate,
    ),
    "profile_fields": EntityType(
        name="Profile field",
        model=ProfileFieldDef,
        read_schema=ProfileFieldRead,
        create_schema=ProfileFieldRecord,
        update_schema=ProfileFieldUpdate,
        json_columns=("options",),
    ),
    "notes": EntityType(
        name="Note",
        model=Note,
        read_schema=NoteRead,
        create_schema=NoteCreate,
        update_schema=NoteUpdate,
    ),
}


def as_list(data: Any) -> list:
    """Normalize an envelope payload that may be one record or a collection."""
    if data is None:
        return []
    if isinstance(data, (list, tuple)):
        return list(data)
    return [data]


def require(result: EntityResult) -> Any:
    """Return the payload of a successful result or raise EntityClientError."""
    if not result.success:
        if result.not_found:
            raise EntityNotFoundError(result.message or "Not found")
        if result.invalid:
            raise EntityValidationError(result.message or "Invalid payload")
        raise EntityClientError(result.message or "Request failed")
    return result.data


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


class EntityClient:
    """Org-scoped CRUD over a single ORM model."""

    def __init__(self, db: Session, org_id: UUID, entity: EntityType):
        self.db = db
        self.org_id = org_id
        self.entity = entity

    def __repr__(self) -> str:
        return f"EntityClient({self.entity.name!r}, org_id={self.org_id})"

    # -------------------------------------------------------------------------
    # Contract
    # -------------------------------------------------------------------------

    def list(self) -> EntityResult:
        model = self.entity.model
        try:
            rows = (
                self.db.query(model)
                .filter(model.organization_id == self.org_id)
                .order_by(model.created_at, model.id)
                .all()
            )
        except SQLAlchemyError as exc:
            return self._failed("list", exc)
        return EntityResult.ok([self.entity.read_schema.model_validate(r) for r in rows])

    def get(self, entity_id: UUID) -> EntityResult:
        try:
            row = self._get_row(entity_id)
        except SQLAlchemyError as exc:
            return self._failed("get", exc)
        if row is None:
            return EntityResult.fail(f"{self.entity.name} not found", not_found=True)
        return EntityResult.ok(self.entity.read_schema.model_validate(row))

    def create(self, payload: dict[str, Any] | BaseModel) -> EntityResult:
        try:
            data = self.entity.create_schema.model_validate(self._as_dict(payload))
        except ValidationError as exc:
            return EntityResult.fail(_validation_message(exc), invalid=True)

        row = self.entity.model(
            organization_id=self.org_id,
            **self._to_columns(data.model_dump()),
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            return self._failed("create", exc)
        return EntityResult.ok(self.entity.read_schema.model_validate(row))

    def update(self, entity_id: UUID, partial: dict[str, Any] | BaseModel) -> EntityResult:
        try:
            data = self.entity.update_schema.model_validate(self._as_dict(partial))
        except ValidationError as exc:
            return EntityResult.fail(_validation_message(exc), invalid=True)

        try:
            row = self._get_row(entity_id)
            if row is None:
                return EntityResult.fail(f"{self.entity.name} not found", not_found=True)
            for key, value in self._to_columns(data.model_dump(exclude_unset=True)).items():
                setattr(row, key, value)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            return self._failed("update", exc)
        return EntityResult.ok(self.entity.read_schema.model_validate(row))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _get_row(self, entity_id: UUID):
        model = self.entity.model
        return (
            self.db.query(model)
            .filter(model.organization_id == self.org_id, model.id == entity_id)
            .first()
        )

    @staticmethod
    def _as_dict(payload: dict[str, Any] | BaseModel) -> dict[str, Any]:
        if isinstance(payload, BaseModel):
            return payload.model_dump(exclude_unset=True)
        return dict(payload)

    def _to_columns(self, values: dict[str, Any]) -> dict[str, Any]:
        columns: dict[str, Any] = {}
        for key, value in values.items():
            if key in self.entity.json_columns:
                value = to_jsonable_python(value)
            elif isinstance(value, Enum):
                value = value.value
            columns[key] = value
        return columns

    def _failed(self, action: str, exc: SQLAlchemyError) -> EntityResult:
        self.db.rollback()
        logger.exception(
            "Entity %s failed",
            action,
            extra={"entity": self.entity.name, "org_id": str(self.org_id)},
        )
        return EntityResult.fail(f"Failed to {action} {self.entity.name.lower()}")


@dataclass
class EntityClients:
    """One client per record type, all scoped to the same organization."""

    people: EntityClient
    households: EntityClient
    household_members: EntityClient
    tags: EntityClient
    profile_fields: EntityClient
    notes: EntityClient

    def by_name(self, entity_type: str) -> EntityClient:
        if entity_type not in ENTITY_TYPES:
            raise KeyError(entity_type)
        return getattr(self, entity_type)


def get_entity_clients(db: Session, org_id: UUID) -> EntityClients:
    return EntityClients(
        **{name: EntityClient(db, org_id, entity) for name, entity in ENTITY_TYPES.items()}
    )
