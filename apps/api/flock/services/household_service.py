"""Household service - households, membership and member counts.

Membership is recorded twice: a HouseholdMember join record and the
person's `household_id`. A member is current when both agree. The
entity contract has no delete, so removing a member only clears
`household_id`; the join record stays behind.
"""

import logging
from collections import Counter
from uuid import UUID

from flock.db.enums import Relationship
from flock.schemas.household import (
    AddMemberRequest,
    HouseholdCreate,
    HouseholdDetail,
    HouseholdMemberRead,
    HouseholdRead,
    HouseholdSummary,
    HouseholdUpdate,
    MemberDetail,
)
from flock.schemas.person import PersonRead
from flock.services.entity_client import (
    ConflictError,
    EntityClients,
    EntityNotFoundError,
    UnsupportedOperationError,
    as_list,
    require,
)

logger = logging.getLogger(__name__)


def current_members(
    household_id: UUID,
    members: list[HouseholdMemberRead],
    people: list[PersonRead],
) -> list[MemberDetail]:
    """Join records for the household whose person still points at it."""
    people_by_id = {p.id: p for p in people}
    details = []
    for member in members:
        if member.household_id != household_id:
            continue
        person = people_by_id.get(member.person_id)
        # Members whose person is missing are dropped
        if person is None or person.household_id != household_id:
            continue
        details.append(MemberDetail(member=member, person=person))
    return details


def member_counts(
    members: list[HouseholdMemberRead], people: list[PersonRead]
) -> Counter:
    people_by_id = {p.id: p for p in people}
    counts: Counter = Counter()
    for member in members:
        person = people_by_id.get(member.person_id)
        if person is not None and person.household_id == member.household_id:
            counts[member.household_id] += 1
    return counts


def list_households(clients: EntityClients, search: str | None = None) -> list[HouseholdSummary]:
    """Households with member counts, optionally filtered by name substring."""
    households = as_list(require(clients.households.list()))
    members = as_list(require(clients.household_members.list()))
    people = as_list(require(clients.people.list()))
    counts = member_counts(members, people)

    if search and search.strip():
        needle = search.strip().lower()
        households = [h for h in households if needle in h.name.lower()]

    return [
        HouseholdSummary(**h.model_dump(), member_count=counts.get(h.id, 0))
        for h in households
    ]


def create_household(clients: EntityClients, body: HouseholdCreate) -> HouseholdRead:
    return require(clients.households.create(body))


def rename_household(
    clients: EntityClients, household_id: UUID, body: HouseholdUpdate
) -> HouseholdRead:
    return require(clients.households.update(household_id, body))


def get_household_detail(clients: EntityClients, household_id: UUID) -> HouseholdDetail:
    """
    Household, its current members joined to people, and the people that
    can still be added.

    Raises:
        EntityNotFoundError: household does not exist
    """
    household = require(clients.households.get(household_id))
    members = as_list(require(clients.household_members.list()))
    people = as_list(require(clients.people.list()))

    details = current_members(household_id, members, people)
    member_ids = {d.person.id for d in details}
    available = [p for p in people if p.id not in member_ids]

    return HouseholdDetail(household=household, members=details, available_people=available)


def add_member(
    clients: EntityClients, household_id: UUID, body: AddMemberRequest
) -> MemberDetail:
    """
    Add a person to a household.

    Creates the join record (or reuses the person's earlier record for
    this household) and points the person's `household_id` at it.

    Raises:
        EntityNotFoundError: household or person does not exist
        ConflictError: person is already a current member
    """
    require(clients.households.get(household_id))
    person: PersonRead = require(clients.people.get(body.person_id))

    existing = [
        m
        for m in as_list(require(clients.household_members.list()))
        if m.household_id == household_id and m.person_id == body.person_id
    ]
    if existing and person.household_id == household_id:
        raise ConflictError("Person is already a member of this household")

    if existing:
        member = require(
            clients.household_members.update(
                existing[0].id, {"relationship": body.relationship}
            )
        )
    else:
        member = require(
            clients.household_members.create(
                {
                    "household_id": household_id,
                    "person_id": body.person_id,
                    "relationship": body.relationship,
                }
            )
        )

    person = require(clients.people.update(body.person_id, {"household_id": household_id}))
    logger.info(
        "Household member added",
        extra={"household_id": str(household_id), "person_id": str(body.person_id)},
    )
    return MemberDetail(member=member, person=person)


def remove_member(clients: EntityClients, household_id: UUID, person_id: UUID) -> PersonRead:
    """
    Clear the person's household reference.

    Raises:
        EntityNotFoundError: person does not exist or is not in this household
    """
    person: PersonRead = require(clients.people.get(person_id))
    if person.household_id != household_id:
        raise EntityNotFoundError("Person is not a member of this household")
    return require(clients.people.update(person_id, {"household_id": None}))


def update_relationship(
    clients: EntityClients,
    household_id: UUID,
    person_id: UUID,
    relationship: Relationship,
) -> MemberDetail:
    """
    Change how a current member relates to the household.

    Raises:
        EntityNotFoundError: person is not a current member
    """
    detail = get_household_detail(clients, household_id)
    found = next((d for d in detail.members if d.person.id == person_id), None)
    if found is None:
        raise EntityNotFoundError("Person is not a member of this household")
    member = require(
        clients.household_members.update(found.member.id, {"relationship": relationship})
    )
    return MemberDetail(member=member, person=found.person)


def delete_household(clients: EntityClients, household_id: UUID) -> None:
    """
    Households cannot be deleted through the entity contract.

    Raises:
        EntityNotFoundError: household does not exist
        ConflictError: household still has members
        UnsupportedOperationError: otherwise
    """
    detail = get_household_detail(clients, household_id)
    if detail.members:
        raise ConflictError(f"Household has {len(detail.members)} members")
    raise UnsupportedOperationError("Deleting households is not supported")
