"""Tag service - tag catalogue and usage counts."""

import logging
from collections import Counter
from uuid import UUID

from flock.schemas.person import PersonRead
from flock.schemas.tag import TagCreate, TagRead, TagUpdate, TagWithCount
from flock.services.entity_client import (
    ConflictError,
    EntityClients,
    UnsupportedOperationError,
    as_list,
    require,
)

logger = logging.getLogger(__name__)


def list_tags(clients: EntityClients) -> list[TagRead]:
    return as_list(require(clients.tags.list()))


def tag_usage(people: list[PersonRead]) -> Counter:
    """Number of people carrying each tag id."""
    usage: Counter = Counter()
    for person in people:
        usage.update(set(person.tag_ids))
    return usage


def tags_with_counts(clients: EntityClients) -> list[TagWithCount]:
    """Tags with their usage counts, most used first (ties keep creation order)."""
    tags = list_tags(clients)
    usage = tag_usage(as_list(require(clients.people.list())))
    counted = [
        TagWithCount(**tag.model_dump(), people_count=usage.get(tag.id, 0)) for tag in tags
    ]
    return sorted(counted, key=lambda t: t.people_count, reverse=True)


def top_tags(clients: EntityClients, limit: int = 5) -> list[TagWithCount]:
    return tags_with_counts(clients)[:limit]


def resolve_tags(tag_ids: list[UUID], tags: list[TagRead]) -> list[TagRead]:
    """Tag records for ids, in the given order; unknown ids are dropped."""
    by_id = {t.id: t for t in tags}
    return [by_id[tag_id] for tag_id in tag_ids if tag_id in by_id]


def create_tag(clients: EntityClients, body: TagCreate) -> TagRead:
    return require(clients.tags.create(body))


def update_tag(clients: EntityClients, tag_id: UUID, body: TagUpdate) -> TagRead:
    return require(clients.tags.update(tag_id, body))


def delete_tag(clients: EntityClients, tag_id: UUID) -> None:
    """
    Tags cannot be deleted through the entity contract.

    A tag still attached to people is reported as a conflict first.

    Raises:
        EntityNotFoundError: tag does not exist
        ConflictError: tag is in use
        UnsupportedOperationError: otherwise
    """
    require(clients.tags.get(tag_id))
    in_use = tag_usage(as_list(require(clients.people.list()))).get(tag_id, 0)
    if in_use:
        raise ConflictError(f"Tag is assigned to {in_use} people")
    logger.info("Tag delete requested but not supported", extra={"tag_id": str(tag_id)})
    raise UnsupportedOperationError("Deleting tags is not supported")
