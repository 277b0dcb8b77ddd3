"""API routers."""

from flock.routers.dashboard import router as dashboard_router
from flock.routers.entities import router as entities_router
from flock.routers.households import router as households_router
from flock.routers.people import router as people_router
from flock.routers.people_export import router as people_export_router
from flock.routers.people_import import router as people_import_router
from flock.routers.profile_fields import router as profile_fields_router
from flock.routers.tags import router as tags_router

__all__ = [
    "dashboard_router",
    "entities_router",
    "households_router",
    "people_router",
    "people_export_router",
    "people_import_router",
    "profile_fields_router",
    "tags_router",
]
