"""Dashboard endpoint."""

from fastapi import APIRouter, Depends

from flock.core.deps import get_clients, get_current_session
from flock.schemas.auth import UserSession
from flock.schemas.dashboard import DashboardResponse
from flock.services import dashboard_service
from flock.services.entity_client import EntityClients


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    session: UserSession = Depends(get_current_session),
    clients: EntityClients = Depends(get_clients),
):
    return dashboard_service.get_dashboard(clients, session.role)
