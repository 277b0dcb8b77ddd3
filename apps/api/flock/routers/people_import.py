"""
People CSV import endpoints.

Upload -> map -> validate -> import. Every step takes the uploaded file;
validate and execute also take the column mapping as a JSON form field.
"""

import json

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from flock.core.deps import get_clients, require_csrf_header, require_roles
from flock.db.enums import ROLES_CAN_EDIT
from flock.schemas.people_import import (
    ImportPreviewResponse,
    ImportResultResponse,
    ImportValidationResponse,
)
from flock.services import csv_import_service, profile_field_service
from flock.services.entity_client import EntityClients


router = APIRouter(
    prefix="/people/import",
    tags=["people", "import"],
    dependencies=[Depends(require_roles(ROLES_CAN_EDIT))],
)


async def _read_csv(file: UploadFile) -> csv_import_service.ParsedCSV:
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="File must be a CSV")
    content = await file.read()
    try:
        return csv_import_service.parse_csv(content)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _parse_mapping(raw: str) -> dict[str, str | None]:
    try:
        mapping = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="Mapping must be valid JSON") from exc
    if not isinstance(mapping, dict) or not all(
        isinstance(k, str) and (v is None or isinstance(v, str)) for k, v in mapping.items()
    ):
        raise HTTPException(
            status_code=400, detail="Mapping must be an object of column -> field key"
        )
    return {k: (v or None) for k, v in mapping.items()}


@router.get("/sample")
def download_sample():
    headers = {
        "Content-Disposition": (
            f'attachment; filename="{csv_import_service.SAMPLE_CSV_FILENAME}"'
        )
    }
    return Response(
        content=csv_import_service.SAMPLE_CSV, media_type="text/csv", headers=headers
    )


@router.post(
    "/preview",
    response_model=ImportPreviewResponse,
    dependencies=[Depends(require_csrf_header)],
)
async def preview_import(
    file: UploadFile = File(...),
    clients: EntityClients = Depends(get_clients),
):
    parsed = await _read_csv(file)
    fields = profile_field_service.list_fields(clients.profile_fields)
    return ImportPreviewResponse(
        headers=parsed.headers,
        sample_rows=parsed.preview_rows(),
        total_rows=parsed.total_rows,
        mapping=csv_import_service.auto_map(parsed.headers),
        targets=csv_import_service.mapping_targets(fields),
    )


@router.post(
    "/validate",
    response_model=ImportValidationResponse,
    dependencies=[Depends(require_csrf_header)],
)
async def validate_import(
    file: UploadFile = File(...),
    mapping: str = Form(...),
    clients: EntityClients = Depends(get_clients),
):
    parsed = await _read_csv(file)
    column_mapping = _parse_mapping(mapping)
    fields = profile_field_service.list_fields(clients.profile_fields)
    try:
        csv_import_service.check_mapping_targets(column_mapping, fields)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    errors = csv_import_service.validate_mapping(parsed, column_mapping)
    return ImportValidationResponse(valid=not errors, errors=errors)


@router.post(
    "/execute",
    response_model=ImportResultResponse,
    dependencies=[Depends(require_csrf_header)],
)
async def execute_import(
    file: UploadFile = File(...),
    mapping: str = Form(...),
    clients: EntityClients = Depends(get_clients),
):
    parsed = await _read_csv(file)
    column_mapping = _parse_mapping(mapping)
    fields = profile_field_service.list_fields(clients.profile_fields)
    try:
        csv_import_service.check_mapping_targets(column_mapping, fields)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    result = csv_import_service.execute_import(clients.people, parsed, column_mapping, fields)
    return ImportResultResponse(
        success_count=result.success_count,
        error_count=result.error_count,
        message=result.message,
    )
