"""Profile field definition endpoints (settings page)."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from flock.core.deps import get_clients, require_csrf_header, require_roles
from flock.db.enums import ROLES_CAN_MANAGE_FIELDS
from flock.schemas.profile_field import (
    FormControlRead,
    ProfileFieldCreate,
    ProfileFieldEdit,
    ProfileFieldRead,
    ReorderRequest,
    ReorderResponse,
)
from flock.services import form_renderer, profile_field_service
from flock.services.entity_client import EntityClients


router = APIRouter(
    prefix="/profile-fields",
    tags=["profile-fields"],
    dependencies=[Depends(require_roles(ROLES_CAN_MANAGE_FIELDS))],
)


@router.get("", response_model=list[ProfileFieldRead])
def list_profile_fields(
    include_archived: bool = False,
    clients: EntityClients = Depends(get_clients),
):
    if include_archived:
        return profile_field_service.list_all_fields(clients.profile_fields)
    return profile_field_service.list_fields(clients.profile_fields)


@router.get("/preview", response_model=list[FormControlRead])
def preview_profile_fields(clients: EntityClients = Depends(get_clients)):
    fields = profile_field_service.list_fields(clients.profile_fields)
    return [c.to_schema() for c in form_renderer.preview_form(fields)]


@router.post(
    "",
    response_model=ProfileFieldRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_profile_field(body: ProfileFieldCreate, clients: EntityClients = Depends(get_clients)):
    try:
        return profile_field_service.create_field(clients.profile_fields, body)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.put(
    "/reorder",
    response_model=ReorderResponse,
    dependencies=[Depends(require_csrf_header)],
)
def reorder_profile_fields(body: ReorderRequest, clients: EntityClients = Depends(get_clients)):
    try:
        result = profile_field_service.reorder_fields(clients.profile_fields, body.field_ids)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ReorderResponse(success=result.success, message=result.message, fields=result.fields)


@router.patch(
    "/{field_id:uuid}",
    response_model=ProfileFieldRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_profile_field(
    field_id: UUID,
    body: ProfileFieldEdit,
    clients: EntityClients = Depends(get_clients),
):
    try:
        return profile_field_service.update_field(clients.profile_fields, field_id, body)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post(
    "/{field_id:uuid}/archive",
    response_model=ProfileFieldRead,
    dependencies=[Depends(require_csrf_header)],
)
def archive_profile_field(field_id: UUID, clients: EntityClients = Depends(get_clients)):
    return profile_field_service.archive_field(clients.profile_fields, field_id)
