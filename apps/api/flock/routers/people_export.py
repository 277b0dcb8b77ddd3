"""People CSV export endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from flock.core.deps import get_clients, get_current_session, require_csrf_header
from flock.schemas.auth import UserSession
from flock.schemas.people_export import ExportColumn, ExportRequest
from flock.services import (
    csv_export_service,
    form_renderer,
    person_service,
    profile_field_service,
    tag_service,
)
from flock.services.entity_client import EntityClients
from flock.services.people_filters import PeopleFilters, parse_field_params


router = APIRouter(prefix="/people/export", tags=["people", "export"])


@router.get("/columns", response_model=list[ExportColumn])
def list_export_columns(
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    fields = profile_field_service.list_all_fields(clients.profile_fields)
    return csv_export_service.available_columns(fields, session.role)


@router.post("", dependencies=[Depends(require_csrf_header)])
def export_people(
    body: ExportRequest,
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    fields = profile_field_service.list_all_fields(clients.profile_fields)
    try:
        field_filters = parse_field_params(
            [(f"field.{key}", value) for key, value in body.fields.items()],
            form_renderer.visible_fields(fields, session.role),
        )
        filters = PeopleFilters(
            search=body.search, status=body.status, tag_ids=body.tag_ids, fields=field_filters
        )
        people = person_service.list_people(clients, filters)
        content = csv_export_service.build_csv(
            people,
            csv_export_service.DEFAULT_COLUMNS if body.columns is None else body.columns,
            fields,
            tag_service.list_tags(clients),
            session.role,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    filename = csv_export_service.export_filename()
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=content, media_type="text/csv; charset=utf-8", headers=headers)
