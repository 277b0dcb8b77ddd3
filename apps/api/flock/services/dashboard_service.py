"""Dashboard service - data for dashboard widgets."""

import logging
from datetime import datetime, timezone

from flock.db.enums import PersonStatus, Role
from flock.schemas.dashboard import DashboardResponse, PeopleStats
from flock.schemas.person import PersonRead
from flock.services import note_service, tag_service
from flock.services.entity_client import EntityClientError, EntityClients, as_list, require

logger = logging.getLogger(__name__)

RECENT_NOTES_LIMIT = 10
TOP_TAGS_LIMIT = 5


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def people_stats(people: list[PersonRead], now: datetime | None = None) -> PeopleStats:
    now = _as_utc(now) if now else datetime.now(timezone.utc)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return PeopleStats(
        total_people=len(people),
        active_people=sum(1 for p in people if p.status == PersonStatus.ACTIVE),
        inactive_people=sum(1 for p in people if p.status == PersonStatus.INACTIVE),
        visitors=sum(1 for p in people if p.status == PersonStatus.VISITOR),
        people_this_month=sum(1 for p in people if _as_utc(p.created_at) >= month_start),
    )


def get_dashboard(
    clients: EntityClients, role: Role | str, now: datetime | None = None
) -> DashboardResponse:
    """
    Stats, recent notes and top tags.

    Each widget is loaded on its own; a failed fetch leaves that widget
    empty instead of failing the whole dashboard.
    """
    stats = PeopleStats(
        total_people=0, active_people=0, inactive_people=0, visitors=0, people_this_month=0
    )
    try:
        stats = people_stats(as_list(require(clients.people.list())), now)
    except EntityClientError:
        logger.exception("Failed to load people stats")

    recent = []
    try:
        recent = note_service.recent_notes(clients, role, RECENT_NOTES_LIMIT)
    except EntityClientError:
        logger.exception("Failed to load recent notes")

    top = []
    try:
        top = tag_service.top_tags(clients, TOP_TAGS_LIMIT)
    except EntityClientError:
        logger.exception("Failed to load top tags")

    return DashboardResponse(stats=stats, recent_notes=recent, top_tags=top)
