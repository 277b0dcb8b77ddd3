"""Tag endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends

from flock.core.deps import get_clients, get_current_session, require_csrf_header, require_roles
from flock.db.enums import ROLES_CAN_EDIT
from flock.schemas.tag import TagCreate, TagRead, TagUpdate, TagWithCount
from flock.services import tag_service
from flock.services.entity_client import EntityClients


router = APIRouter(
    prefix="/tags",
    tags=["tags"],
    dependencies=[Depends(get_current_session)],
)


@router.get("", response_model=list[TagWithCount])
def list_tags(clients: EntityClients = Depends(get_clients)):
    return tag_service.tags_with_counts(clients)


@router.post(
    "",
    response_model=TagRead,
    status_code=201,
    dependencies=[Depends(require_roles(ROLES_CAN_EDIT)), Depends(require_csrf_header)],
)
def create_tag(body: TagCreate, clients: EntityClients = Depends(get_clients)):
    return tag_service.create_tag(clients, body)


@router.patch(
    "/{tag_id:uuid}",
    response_model=TagRead,
    dependencies=[Depends(require_roles(ROLES_CAN_EDIT)), Depends(require_csrf_header)],
)
def update_tag(tag_id: UUID, body: TagUpdate, clients: EntityClients = Depends(get_clients)):
    return tag_service.update_tag(clients, tag_id, body)


@router.delete(
    "/{tag_id:uuid}",
    status_code=204,
    dependencies=[Depends(require_roles(ROLES_CAN_EDIT)), Depends(require_csrf_header)],
)
def delete_tag(tag_id: UUID, clients: EntityClients = Depends(get_clients)):
    # Always raises: 404, 409 when in use, else 501
    tag_service.delete_tag(clients, tag_id)
