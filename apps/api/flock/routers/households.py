"""Household endpoints: households, members and relationships."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from flock.core.deps import get_clients, get_current_session, require_csrf_header, require_roles
from flock.db.enums import ROLES_CAN_EDIT
from flock.schemas.auth import UserSession
from flock.schemas.household import (
    AddMemberRequest,
    HouseholdCreate,
    HouseholdDetail,
    HouseholdRead,
    HouseholdSummary,
    HouseholdUpdate,
    MemberDetail,
    RelationshipUpdate,
)
from flock.schemas.person import PersonRead
from flock.services import household_service, person_service
from flock.services.entity_client import EntityClients


router = APIRouter(
    prefix="/households",
    tags=["households"],
    dependencies=[Depends(get_current_session)],
)

EDIT_DEPENDENCIES = [Depends(require_roles(ROLES_CAN_EDIT)), Depends(require_csrf_header)]


@router.get("", response_model=list[HouseholdSummary])
def list_households(
    search: str | None = Query(None, max_length=100),
    clients: EntityClients = Depends(get_clients),
):
    return household_service.list_households(clients, search)


@router.post("", response_model=HouseholdRead, status_code=201, dependencies=EDIT_DEPENDENCIES)
def create_household(body: HouseholdCreate, clients: EntityClients = Depends(get_clients)):
    return household_service.create_household(clients, body)


@router.get("/{household_id:uuid}", response_model=HouseholdDetail)
def get_household(
    household_id: UUID,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    detail = household_service.get_household_detail(clients, household_id)
    return detail.model_copy(
        update={
            "members": person_service.members_for_role(clients, detail.members, session.role),
            "available_people": person_service.visible_to_role(
                clients, detail.available_people, session.role
            ),
        }
    )


@router.patch(
    "/{household_id:uuid}", response_model=HouseholdRead, dependencies=EDIT_DEPENDENCIES
)
def rename_household(
    household_id: UUID,
    body: HouseholdUpdate,
    clients: EntityClients = Depends(get_clients),
):
    return household_service.rename_household(clients, household_id, body)


@router.delete("/{household_id:uuid}", status_code=204, dependencies=EDIT_DEPENDENCIES)
def delete_household(household_id: UUID, clients: EntityClients = Depends(get_clients)):
    # Always raises: 404, 409 with members, else 501
    household_service.delete_household(clients, household_id)


# =============================================================================
# Members
# =============================================================================

@router.post(
    "/{household_id:uuid}/members",
    response_model=MemberDetail,
    status_code=201,
    dependencies=EDIT_DEPENDENCIES,
)
def add_member(
    household_id: UUID,
    body: AddMemberRequest,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    detail = household_service.add_member(clients, household_id, body)
    return person_service.members_for_role(clients, [detail], session.role)[0]


@router.delete(
    "/{household_id:uuid}/members/{person_id:uuid}",
    response_model=PersonRead,
    dependencies=EDIT_DEPENDENCIES,
)
def remove_member(
    household_id: UUID,
    person_id: UUID,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    person = household_service.remove_member(clients, household_id, person_id)
    return person_service.person_for_role(clients, person, session.role)


@router.patch(
    "/{household_id:uuid}/members/{person_id:uuid}",
    response_model=MemberDetail,
    dependencies=EDIT_DEPENDENCIES,
)
def update_relationship(
    household_id: UUID,
    person_id: UUID,
    body: RelationshipUpdate,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    detail = household_service.update_relationship(
        clients, household_id, person_id, body.relationship
    )
    return person_service.members_for_role(clients, [detail], session.role)[0]
