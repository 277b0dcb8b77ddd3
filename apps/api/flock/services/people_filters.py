"""Filtering for the people list.

Filters are a pure predicate over an already fetched collection: no
indexing, and the input order is preserved. Every active filter must
match (logical AND); an empty filter set returns the collection as-is.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable
from uuid import UUID

from flock.db.enums import PersonStatus
from flock.schemas.person import PersonRead
from flock.schemas.profile_field import ProfileFieldRead
from flock.services import form_renderer

FIELD_PARAM_PREFIX = "field."


@dataclass
class PeopleFilters:
    search: str | None = None
    status: PersonStatus | None = None
    tag_ids: list[UUID] = field(default_factory=list)
    # profile field key -> value compared for exact equality
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.search or self.status or self.tag_ids or self.active_field_filters())

    def active_field_filters(self) -> dict[str, Any]:
        return {k: v for k, v in self.fields.items() if v is not None and v != ""}


def _search_text(person: PersonRead) -> Iterable[str]:
    return (
        person.first_name,
        person.last_name,
        f"{person.first_name} {person.last_name}",
        person.preferred_name or "",
        person.email or "",
        person.phone or "",
    )


def matches_search(person: PersonRead, search: str) -> bool:
    needle = search.strip().lower()
    if not needle:
        return True
    return any(needle in value.lower() for value in _search_text(person))


def matches_tags(person: PersonRead, tag_ids: list[UUID]) -> bool:
    """Non-empty intersection between the person's tags and the selected tags."""
    return bool(set(person.tag_ids) & set(tag_ids))


def matches(person: PersonRead, filters: PeopleFilters) -> bool:
    if filters.search and not matches_search(person, filters.search):
        return False
    if filters.status and person.status != filters.status:
        return False
    if filters.tag_ids and not matches_tags(person, filters.tag_ids):
        return False
    for key, expected in filters.active_field_filters().items():
        if person.fields.get(key) != expected:
            return False
    return True


def filter_people(people: list[PersonRead], filters: PeopleFilters) -> list[PersonRead]:
    if filters.is_empty:
        return list(people)
    return [p for p in people if matches(p, filters)]


def sort_by_display_name(people: list[PersonRead]) -> list[PersonRead]:
    return sorted(people, key=lambda p: p.display_name.lower())


def parse_field_params(
    params: Iterable[tuple[str, str]],
    fields: list[ProfileFieldRead],
) -> dict[str, Any]:
    """
    Read `field.<key>=<value>` query parameters into typed filter values.

    Unknown or archived keys are rejected; blank values are skipped.

    Raises:
        ValueError: unknown field key or a value that does not fit the field type
    """
    by_key = {f.key: f for f in fields if not f.archived}
    result: dict[str, Any] = {}
    for name, raw in params:
        if not name.startswith(FIELD_PARAM_PREFIX):
            continue
        key = name[len(FIELD_PARAM_PREFIX):]
        definition = by_key.get(key)
        if definition is None:
            raise ValueError(f"Unknown profile field: {key}")
        if not raw.strip():
            continue
        try:
            result[key] = form_renderer.coerce_value(definition, raw)
        except ValueError as exc:
            raise ValueError(f"Invalid value for {definition.label}: {exc}") from exc
    return result
