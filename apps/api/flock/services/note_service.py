"""Note service - notes attached to people."""

from uuid import UUID

import nh3

from flock.db.enums import NoteVisibility, Role, is_staff
from flock.schemas.auth import UserSession
from flock.schemas.note import NoteRead, NoteRequest
from flock.services.entity_client import EntityClients, as_list, require

# Allowed HTML tags for rich text note bodies
ALLOWED_TAGS = {"p", "br", "strong", "em", "ul", "ol", "li", "a", "blockquote"}
ALLOWED_ATTRIBUTES = {"a": {"href", "target"}}


def sanitize_html(html: str) -> str:
    """Sanitize HTML to prevent XSS, allowing only safe rich text tags."""
    return nh3.clean(html, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES)


def is_visible(note: NoteRead, role: Role | str) -> bool:
    return note.visibility == NoteVisibility.ORG or is_staff(role)


def newest_first(notes: list[NoteRead]) -> list[NoteRead]:
    return sorted(notes, key=lambda n: n.created_at, reverse=True)


def list_notes(clients: EntityClients, role: Role | str) -> list[NoteRead]:
    """All notes the role may see, newest first."""
    notes = as_list(require(clients.notes.list()))
    return newest_first([n for n in notes if is_visible(n, role)])


def list_person_notes(
    clients: EntityClients, person_id: UUID, role: Role | str
) -> list[NoteRead]:
    return [n for n in list_notes(clients, role) if n.person_id == person_id]


def recent_notes(clients: EntityClients, role: Role | str, limit: int = 10) -> list[NoteRead]:
    return list_notes(clients, role)[:limit]


def add_note(
    clients: EntityClients,
    person_id: UUID,
    session: UserSession,
    body: NoteRequest,
) -> NoteRead:
    """
    Add a note to a person.

    Raises:
        EntityNotFoundError: person does not exist
        ValueError: body is empty once sanitized
    """
    require(clients.people.get(person_id))

    clean_body = sanitize_html(body.body).strip()
    if not clean_body:
        raise ValueError("Note body is empty")

    return require(
        clients.notes.create(
            {
                "person_id": person_id,
                "author_user_id": session.user_id,
                "body": clean_body,
                "visibility": body.visibility,
            }
        )
    )
