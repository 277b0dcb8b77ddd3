"""Person service - people records, status changes, tags and profile view."""

import logging
from uuid import UUID

from flock.db.enums import PersonStatus, Role, is_staff
from flock.schemas.household import MemberDetail
from flock.schemas.person import BulkStatusResult, PersonCreate, PersonRead, PersonUpdate
from flock.schemas.person_profile import PersonProfile
from flock.schemas.profile_field import ProfileFieldRead
from flock.services import form_renderer, household_service, note_service, tag_service
from flock.services.entity_client import EntityClientError, EntityClients, as_list, require
from flock.services.people_filters import PeopleFilters, filter_people, sort_by_display_name
from flock.services.profile_field_service import list_all_fields

logger = logging.getLogger(__name__)


def list_people(clients: EntityClients, filters: PeopleFilters | None = None) -> list[PersonRead]:
    """People matching the filters, sorted by display name."""
    people = as_list(require(clients.people.list()))
    if filters is not None:
        people = filter_people(people, filters)
    return sort_by_display_name(people)


def get_person(clients: EntityClients, person_id: UUID) -> PersonRead:
    return require(clients.people.get(person_id))


def visible_to_role(
    clients: EntityClients,
    people: list[PersonRead],
    role: Role | str,
    definitions: list[ProfileFieldRead] | None = None,
) -> list[PersonRead]:
    """
    Copies of `people` carrying only the custom values the role may see.

    Staff get the records unchanged. Other roles lose staff-only, archived
    and undefined keys.
    """
    if is_staff(role):
        return people
    if definitions is None:
        definitions = list_all_fields(clients.profile_fields)
    return [
        p.model_copy(
            update={"fields": form_renderer.visible_values(definitions, p.fields, role)}
        )
        for p in people
    ]


def person_for_role(clients: EntityClients, person: PersonRead, role: Role | str) -> PersonRead:
    return visible_to_role(clients, [person], role)[0]


def members_for_role(
    clients: EntityClients, details: list[MemberDetail], role: Role | str
) -> list[MemberDetail]:
    people = visible_to_role(clients, [d.person for d in details], role)
    return [d.model_copy(update={"person": p}) for d, p in zip(details, people)]


# =============================================================================
# Create / update
# =============================================================================

def _check_references(
    clients: EntityClients, tag_ids: list[UUID] | None, household_id: UUID | None
) -> None:
    if tag_ids:
        known = {t.id for t in tag_service.list_tags(clients)}
        unknown = [str(t) for t in tag_ids if t not in known]
        if unknown:
            raise ValueError(f"Unknown tag: {', '.join(unknown)}")
    if household_id is not None and not clients.households.get(household_id).success:
        raise ValueError("Unknown household")


def _prepare_fields(
    definitions: list[ProfileFieldRead],
    submitted: dict,
    role: Role | str,
    existing: dict | None = None,
) -> dict:
    """
    Validate submitted custom values and merge them over the stored ones.

    On update only the submitted keys are validated. Values for fields the
    role cannot see and for archived fields are carried over from
    `existing` untouched.
    """
    errors = form_renderer.validate_field_values(
        definitions, submitted, role, partial=existing is not None
    )
    if errors:
        raise ValueError("; ".join(errors))

    fields = dict(existing or {})
    fields.update(form_renderer.prepare_field_values(definitions, submitted, role))
    return fields


def create_person(clients: EntityClients, body: PersonCreate, role: Role | str) -> PersonRead:
    """
    Create a person from the dynamic form.

    Raises:
        ValueError: custom values fail validation or references are unknown
    """
    _check_references(clients, body.tag_ids, body.household_id)
    definitions = list_all_fields(clients.profile_fields)
    payload = body.model_dump()
    payload["fields"] = _prepare_fields(definitions, body.fields, role)
    person = require(clients.people.create(payload))
    logger.info("Person created", extra={"person_id": str(person.id)})
    return person


def update_person(
    clients: EntityClients, person_id: UUID, body: PersonUpdate, role: Role | str
) -> PersonRead:
    """
    Apply a partial update.

    When `fields` is present it is merged over the stored values; keys the
    role cannot see are never overwritten.
    """
    existing = get_person(clients, person_id)
    changes = body.model_dump(exclude_unset=True)
    _check_references(clients, changes.get("tag_ids"), changes.get("household_id"))

    if body.fields is not None:
        definitions = list_all_fields(clients.profile_fields)
        changes["fields"] = _prepare_fields(definitions, body.fields, role, existing.fields)

    return require(clients.people.update(person_id, changes))


def set_status(clients: EntityClients, person_id: UUID, status: PersonStatus) -> PersonRead:
    return require(clients.people.update(person_id, {"status": status}))


def bulk_set_status(
    clients: EntityClients, person_ids: list[UUID], status: PersonStatus
) -> BulkStatusResult:
    """Issue one update per person; failures are counted, not raised."""
    updated = failed = 0
    for person_id in dict.fromkeys(person_ids):
        result = clients.people.update(person_id, {"status": status})
        if result.success:
            updated += 1
        else:
            failed += 1
            logger.warning(
                "Bulk status update failed for person %s: %s", person_id, result.message
            )
    return BulkStatusResult(updated=updated, failed=failed)


def update_tags(clients: EntityClients, person_id: UUID, tag_ids: list[UUID]) -> PersonRead:
    """Replace a person's tags; duplicates are dropped."""
    tag_ids = list(dict.fromkeys(tag_ids))
    get_person(clients, person_id)
    _check_references(clients, tag_ids, None)
    return require(clients.people.update(person_id, {"tag_ids": tag_ids}))


# =============================================================================
# Views
# =============================================================================

def build_person_form(
    clients: EntityClients, role: Role | str, person_id: UUID | None = None
) -> list[form_renderer.FormControl]:
    """Empty form for a new person, or the edit form for an existing one."""
    values = get_person(clients, person_id).fields if person_id else {}
    definitions = list_all_fields(clients.profile_fields)
    return form_renderer.build_form(definitions, values, role)


def get_profile(clients: EntityClients, person_id: UUID, role: Role | str) -> PersonProfile:
    """
    Person with resolved tags, household, notes and read-only custom fields.

    Only the person lookup is fatal; a failed secondary fetch leaves its
    section empty.
    """
    person = get_person(clients, person_id)
    profile = PersonProfile(person=person, display_name=person.display_name, tags=[])

    try:
        profile.tags = tag_service.resolve_tags(person.tag_ids, tag_service.list_tags(clients))
    except EntityClientError:
        logger.exception("Failed to load tags for profile")

    if person.household_id:
        try:
            detail = household_service.get_household_detail(clients, person.household_id)
            profile.household = detail.household
            profile.household_members = [
                d for d in detail.members if d.person.id != person.id
            ]
        except EntityClientError:
            logger.exception("Failed to load household for profile")

    try:
        profile.notes = note_service.list_person_notes(clients, person.id, role)
    except EntityClientError:
        logger.exception("Failed to load notes for profile")

    try:
        definitions = list_all_fields(clients.profile_fields)
        profile.fields = [
            c.to_schema()
            for c in form_renderer.build_form(definitions, person.fields, role, read_only=True)
        ]
    except EntityClientError:
        logger.exception("Failed to load profile fields for profile")
        # Without definitions nothing is known to be visible
        definitions = []

    profile.person = visible_to_role(clients, [person], role, definitions)[0]
    people = visible_to_role(
        clients, [d.person for d in profile.household_members], role, definitions
    )
    profile.household_members = [
        d.model_copy(update={"person": p}) for d, p in zip(profile.household_members, people)
    ]
    return profile
