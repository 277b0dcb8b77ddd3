"""People endpoints: list, profile, form, create/update, status, tags and notes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from flock.core.deps import get_clients, get_current_session, require_csrf_header, require_roles
from flock.db.enums import ROLES_CAN_EDIT, PersonStatus, Role
from flock.schemas.auth import UserSession
from flock.schemas.note import NoteRead, NoteRequest
from flock.schemas.person import (
    BulkStatusResult,
    BulkStatusUpdate,
    PersonCreate,
    PersonListItem,
    PersonListResponse,
    PersonRead,
    PersonStatusUpdate,
    PersonTagsUpdate,
    PersonUpdate,
)
from flock.schemas.person_profile import PersonProfile
from flock.schemas.profile_field import FormControlRead
from flock.services import form_renderer, note_service, person_service, profile_field_service
from flock.services.entity_client import EntityClients
from flock.services.people_filters import PeopleFilters, parse_field_params


router = APIRouter(
    prefix="/people",
    tags=["people"],
    dependencies=[Depends(get_current_session)],
)

EDIT_DEPENDENCIES = [Depends(require_roles(ROLES_CAN_EDIT)), Depends(require_csrf_header)]


def build_filters(
    request: Request,
    clients: EntityClients,
    role: Role | str,
    search: str | None,
    status: PersonStatus | None,
    tag_ids: list[UUID],
) -> PeopleFilters:
    """Filters from query params; `field.<key>=value` adds a dynamic field filter."""
    field_params = [
        (name, value)
        for name, value in request.query_params.multi_items()
        if name.startswith("field.")
    ]
    fields = {}
    if field_params:
        definitions = form_renderer.visible_fields(
            profile_field_service.list_all_fields(clients.profile_fields), role
        )
        try:
            fields = parse_field_params(field_params, definitions)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    return PeopleFilters(search=search, status=status, tag_ids=tag_ids, fields=fields)


@router.get("", response_model=PersonListResponse)
def list_people(
    request: Request,
    search: str | None = Query(None, max_length=100),
    status: PersonStatus | None = Query(None),
    tag_ids: list[UUID] = Query([]),
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    filters = build_filters(request, clients, session.role, search, status, tag_ids)
    people = person_service.visible_to_role(
        clients, person_service.list_people(clients, filters), session.role
    )
    items = [
        PersonListItem(**p.model_dump(), display_name=p.display_name) for p in people
    ]
    return PersonListResponse(items=items, total=len(items))


@router.get("/form", response_model=list[FormControlRead])
def get_person_form(
    person_id: UUID | None = None,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    controls = person_service.build_person_form(clients, session.role, person_id)
    return [c.to_schema() for c in controls]


@router.post("", response_model=PersonRead, status_code=201, dependencies=EDIT_DEPENDENCIES)
def create_person(
    body: PersonCreate,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    try:
        person = person_service.create_person(clients, body, session.role)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return person_service.person_for_role(clients, person, session.role)


@router.post("/bulk-status", response_model=BulkStatusResult, dependencies=EDIT_DEPENDENCIES)
def bulk_update_status(body: BulkStatusUpdate, clients: EntityClients = Depends(get_clients)):
    return person_service.bulk_set_status(clients, body.person_ids, body.status)


@router.get("/{person_id:uuid}", response_model=PersonRead)
def get_person(
    person_id: UUID,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    person = person_service.get_person(clients, person_id)
    return person_service.person_for_role(clients, person, session.role)


@router.get("/{person_id:uuid}/profile", response_model=PersonProfile)
def get_person_profile(
    person_id: UUID,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    return person_service.get_profile(clients, person_id, session.role)


@router.patch("/{person_id:uuid}", response_model=PersonRead, dependencies=EDIT_DEPENDENCIES)
def update_person(
    person_id: UUID,
    body: PersonUpdate,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    try:
        person = person_service.update_person(clients, person_id, body, session.role)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return person_service.person_for_role(clients, person, session.role)


@router.patch(
    "/{person_id:uuid}/status", response_model=PersonRead, dependencies=EDIT_DEPENDENCIES
)
def update_status(
    person_id: UUID,
    body: PersonStatusUpdate,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    person = person_service.set_status(clients, person_id, body.status)
    return person_service.person_for_role(clients, person, session.role)


@router.put("/{person_id:uuid}/tags", response_model=PersonRead, dependencies=EDIT_DEPENDENCIES)
def update_tags(
    person_id: UUID,
    body: PersonTagsUpdate,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    try:
        person = person_service.update_tags(clients, person_id, body.tag_ids)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return person_service.person_for_role(clients, person, session.role)


# =============================================================================
# Notes
# =============================================================================

@router.get("/{person_id:uuid}/notes", response_model=list[NoteRead])
def list_notes(
    person_id: UUID,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    person_service.get_person(clients, person_id)
    return note_service.list_person_notes(clients, person_id, session.role)


@router.post(
    "/{person_id:uuid}/notes",
    response_model=NoteRead,
    status_code=201,
    dependencies=EDIT_DEPENDENCIES,
)
def add_note(
    person_id: UUID,
    body: NoteRequest,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    try:
        return note_service.add_note(clients, person_id, session, body)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
