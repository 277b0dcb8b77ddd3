"""FastAPI dependencies for session context, authorization, and database access."""

from typing import Generator
from uuid import UUID

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from flock.core.config import settings
from flock.db.session import SessionLocal


# Session context headers set by the upstream auth layer
ORG_HEADER = "X-Org-Id"
USER_HEADER = "X-User-Id"
ROLE_HEADER = "X-Role"

CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _parse_uuid(value: str, header: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Invalid {header} header")


def get_current_session(request: Request, db: Session = Depends(get_db)):
    """
    Get session context: user_id, org_id, role.

    The context is trusted as supplied by the auth layer. When the headers
    are absent and DEV_BYPASS_AUTH is on, the mock context from settings
    is used instead.

    Raises:
        HTTPException 401: No session context
        HTTPException 403: Unknown role or organization
    """
    # Import here to avoid circular imports
    from flock.db.enums import Role
    from flock.db.models import Organization
    from flock.schemas.auth import UserSession

    org_value = request.headers.get(ORG_HEADER)
    user_value = request.headers.get(USER_HEADER)
    role_value = request.headers.get(ROLE_HEADER)

    if not (org_value and user_value and role_value):
        if not settings.DEV_BYPASS_AUTH:
            raise HTTPException(status_code=401, detail="Not authenticated")
        org_value, user_value, role_value = (
            settings.DEV_ORG_ID,
            settings.DEV_USER_ID,
            settings.DEV_ROLE,
        )

    # Validate role is a known enum value - return 403 not 500
    role_value = role_value.strip().lower()
    if not Role.has_value(role_value):
        raise HTTPException(
            status_code=403,
            detail=f"Unknown role '{role_value}'. Contact administrator.",
        )

    org_id = _parse_uuid(org_value, ORG_HEADER)
    user_id = _parse_uuid(user_value, USER_HEADER)

    if db.get(Organization, org_id) is None:
        raise HTTPException(status_code=403, detail="Unknown organization")

    session = UserSession(user_id=user_id, org_id=org_id, role=Role(role_value))
    request.state.user_session = session
    return session


def require_roles(allowed_roles):
    """
    Dependency factory for role-based authorization.

    Uses enum values (not strings) to prevent drift.

    Usage:
        @router.post("/fields", dependencies=[Depends(require_roles(ROLES_STAFF))])
    """
    def dependency(request: Request, db: Session = Depends(get_db)):
        session = get_current_session(request, db)
        if session.role not in allowed_roles:
            raise HTTPException(
                status_code=403,
                detail=f"Role '{session.role.value}' not authorized for this action",
            )
        return session
    return dependency


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Apply to state-changing endpoints (POST, PATCH, DELETE).

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'",
        )


def get_clients(request: Request, db: Session = Depends(get_db)):
    """Entity clients scoped to the caller's organization."""
    from flock.services.entity_client import get_entity_clients

    session = get_current_session(request, db)
    return get_entity_clients(db, session.org_id)
