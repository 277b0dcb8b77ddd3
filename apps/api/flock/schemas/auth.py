"""Session context schemas."""

from uuid import UUID

from pydantic import BaseModel

from flock.db.enums import Role, is_staff


class UserSession(BaseModel):
    """
    Session context for a request.

    Supplied by the upstream auth layer and trusted as-is; this
    service never re-verifies the role.
    """
    user_id: UUID
    org_id: UUID
    role: Role

    @property
    def is_staff(self) -> bool:
        return is_staff(self.role)

    @property
    def can_edit(self) -> bool:
        return self.role != Role.VIEWER
