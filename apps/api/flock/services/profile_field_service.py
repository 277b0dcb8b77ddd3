"""Profile field registry: org-scoped custom field definitions.

Definitions drive form rendering, list filters, CSV import targets and
export columns. Everything here goes through the entity client.
"""

import logging
import re
from dataclasses import dataclass
from uuid import UUID

from flock.db.enums import FIELD_TYPES_WITH_OPTIONS
from flock.schemas.profile_field import ProfileFieldCreate, ProfileFieldEdit, ProfileFieldRead
from flock.services.entity_client import EntityClient, EntityClientError, as_list, require

logger = logging.getLogger(__name__)

_NON_KEY_CHARS = re.compile(r"[^a-z0-9]+")


def generate_key(label: str) -> str:
    """Derive a slug key from a label: "Date of Birth!" -> "date_of_birth"."""
    return _NON_KEY_CHARS.sub("_", label.lower()).strip("_")


def sort_fields(fields: list[ProfileFieldRead]) -> list[ProfileFieldRead]:
    return sorted(fields, key=lambda f: f.order_index)


def active_fields(fields: list[ProfileFieldRead]) -> list[ProfileFieldRead]:
    """Non-archived definitions in display order."""
    return sort_fields([f for f in fields if not f.archived])


def list_all_fields(client: EntityClient) -> list[ProfileFieldRead]:
    """Every definition, archived included, in display order."""
    return sort_fields(as_list(require(client.list())))


def list_fields(client: EntityClient) -> list[ProfileFieldRead]:
    """Active definitions in display order."""
    return active_fields(as_list(require(client.list())))


def get_field(client: EntityClient, field_id: UUID) -> ProfileFieldRead | None:
    result = client.get(field_id)
    if not result.success:
        return None
    return result.data


def next_order_index(fields: list[ProfileFieldRead]) -> int:
    return max([f.order_index for f in fields] + [0]) + 1


def create_field(client: EntityClient, body: ProfileFieldCreate) -> ProfileFieldRead:
    """
    Create a definition.

    The key comes from the request or is derived from the label. The new
    field is appended after every existing one (archived included).

    Raises:
        ValueError: the key is empty after normalization
        EntityClientError: the underlying create failed
    """
    key = generate_key(body.key) if body.key else generate_key(body.label)
    if not key:
        raise ValueError("Field key must contain at least one letter or number")

    existing = as_list(require(client.list()))
    if any(f.key == key for f in existing):
        # Keys are not enforced unique; both definitions share one Person.fields entry.
        logger.warning("Profile field key %s already exists in org %s", key, client.org_id)

    payload = body.model_dump(exclude={"key"})
    payload.update(key=key, order_index=next_order_index(existing), archived=False)
    return require(client.create(payload))


def update_field(client: EntityClient, field_id: UUID, body: ProfileFieldEdit) -> ProfileFieldRead:
    """
    Raises:
        EntityNotFoundError: field does not exist
        ValueError: a choice field would be left without options
    """
    field = require(client.get(field_id))
    changes = body.model_dump(exclude_unset=True)
    if (
        field.type in FIELD_TYPES_WITH_OPTIONS
        and "options" in changes
        and not changes["options"]
    ):
        raise ValueError("Options are required for select and multiselect fields")
    return require(client.update(field_id, changes))


def archive_field(client: EntityClient, field_id: UUID) -> ProfileFieldRead:
    """Soft-delete a definition. Person.fields values for its key are left untouched."""
    return require(client.update(field_id, {"archived": True}))


@dataclass
class ReorderResult:
    success: bool
    fields: list[ProfileFieldRead]
    message: str


def reorder_fields(client: EntityClient, ordered_ids: list[UUID]) -> ReorderResult:
    """
    Rewrite order_index for every active field to its 1-based position.

    `ordered_ids` must be exactly the set of active field ids. Archived
    fields are renumbered after the active ones, keeping their relative
    order, so indices stay unique.

    One update is issued per field; there is no transaction across them.
    Every update is attempted. If any fails, the server's current view is
    re-fetched and returned with success=False so callers can discard
    their local ordering.

    Raises:
        ValueError: ids do not match the active field set
    """
    current = list_all_fields(client)
    active = [f for f in current if not f.archived]
    by_id = {f.id: f for f in active}

    if len(ordered_ids) != len(set(ordered_ids)) or set(ordered_ids) != set(by_id):
        raise ValueError("Reorder must list every active field exactly once")

    archived = [f for f in current if f.archived]
    new_order = [by_id[field_id] for field_id in ordered_ids] + archived

    failures = 0
    for position, field in enumerate(new_order, start=1):
        result = client.update(field.id, {"order_index": position})
        if not result.success:
            failures += 1
            logger.error(
                "Failed to update order for field %s: %s", field.id, result.message
            )

    if failures:
        try:
            fields = list_fields(client)
        except EntityClientError:
            logger.exception("Failed to reload profile fields after reorder")
            fields = active_fields(current)
        return ReorderResult(
            success=False,
            fields=fields,
            message="Failed to update field order",
        )

    return ReorderResult(
        success=True,
        fields=list_fields(client),
        message="Field order updated successfully",
    )
