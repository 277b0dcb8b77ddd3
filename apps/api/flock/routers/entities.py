"""Generic entity endpoints exposing the list/get/create/update contract."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException

from flock.core.deps import get_clients, require_csrf_header, require_roles
from flock.db.enums import ROLES_STAFF
from flock.schemas.common import EntityResult
from flock.services.entity_client import EntityClient, EntityClients


router = APIRouter(
    prefix="/entities",
    tags=["entities"],
    dependencies=[Depends(require_roles(ROLES_STAFF))],
)


def _client(clients: EntityClients, entity_type: str) -> EntityClient:
    try:
        return clients.by_name(entity_type)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown entity type '{entity_type}'")


@router.get("/{entity_type}", response_model=EntityResult)
def list_entities(entity_type: str, clients: EntityClients = Depends(get_clients)):
    return _client(clients, entity_type).list()


@router.get("/{entity_type}/{entity_id:uuid}", response_model=EntityResult)
def get_entity(
    entity_type: str,
    entity_id: UUID,
    clients: EntityClients = Depends(get_clients),
):
    return _client(clients, entity_type).get(entity_id)


@router.post(
    "/{entity_type}",
    response_model=EntityResult,
    dependencies=[Depends(require_csrf_header)],
)
def create_entity(
    entity_type: str,
    payload: dict[str, Any] = Body(...),
    clients: EntityClients = Depends(get_clients),
):
    return _client(clients, entity_type).create(payload)


@router.patch(
    "/{entity_type}/{entity_id:uuid}",
    response_model=EntityResult,
    dependencies=[Depends(require_csrf_header)],
)
def update_entity(
    entity_type: str,
    entity_id: UUID,
    partial: dict[str, Any] = Body(...),
    clients: EntityClients = Depends(get_clients),
):
    return _client(clients, entity_type).update(entity_id, partial)
