"""Enum definitions for application constants."""

from enum import Enum


class Role(str, Enum):
    """
    Organization roles, most privileged first.

    - OWNER / ADMIN: staff; manage profile fields, see staff-only data
    - MEMBER: edit people, households, tags and notes
    - VIEWER: read-only (may still export)
    """
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class PersonStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    VISITOR = "visitor"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]


DEFAULT_PERSON_STATUS = PersonStatus.ACTIVE


class Relationship(str, Enum):
    """Relationship of a person to the household they belong to."""
    HEAD = "head"
    SPOUSE = "spouse"
    CHILD = "child"
    OTHER = "other"


class FieldType(str, Enum):
    """Data types for profile field definitions."""
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    CHECKBOX = "checkbox"
    SELECT = "select"
    MULTISELECT = "multiselect"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"


# Field types that must carry a non-empty options list
FIELD_TYPES_WITH_OPTIONS = frozenset({FieldType.SELECT, FieldType.MULTISELECT})


class FieldVisibility(str, Enum):
    PUBLIC = "public"
    STAFF_ONLY = "staff_only"


class NoteVisibility(str, Enum):
    ORG = "org"
    STAFF_ONLY = "staff_only"


# =============================================================================
# Role Permission Sets
# =============================================================================

# Roles that see staff-only fields, notes and export columns
ROLES_STAFF = frozenset({Role.OWNER, Role.ADMIN})

# Roles that may create and edit people, households, tags and notes
ROLES_CAN_EDIT = frozenset({Role.OWNER, Role.ADMIN, Role.MEMBER})

# Roles that may manage profile field definitions
ROLES_CAN_MANAGE_FIELDS = ROLES_STAFF


def is_staff(role: Role | str) -> bool:
    return Role(role) in ROLES_STAFF
