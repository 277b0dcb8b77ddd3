"""
Seed script to create a demo congregation: profile fields, tags, households,
40 people and a few notes.
Run with: python -m scripts.seed_mock_data
"""

import os
import random
import uuid

from flock.core.config import settings
from flock.db.enums import (
    FieldType, FieldVisibility, NoteVisibility, PersonStatus, Relationship, Role
)
from flock.db.models import Organization
from flock.db.session import SessionLocal
from flock.schemas.auth import UserSession
from flock.schemas.household import AddMemberRequest, HouseholdCreate
from flock.schemas.note import NoteRequest
from flock.schemas.profile_field import ProfileFieldCreate
from flock.schemas.tag import TagCreate
from flock.services import household_service, note_service, profile_field_service, tag_service
from flock.services.entity_client import get_entity_clients, require

# Sample data pools
FIRST_NAMES = [
    "Emma", "Olivia", "Ava", "Isabella", "Sophia", "Mia", "Charlotte", "Amelia",
    "James", "John", "Robert", "Michael", "William", "David", "Richard", "Joseph",
    "Grace", "Hannah", "Samuel", "Ruth", "Daniel", "Esther", "Caleb", "Naomi",
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Martinez", "Wilson", "Anderson", "Taylor", "Thomas", "Moore", "Jackson", "Lee",
]

TAGS = [
    ("Youth", "#52c41a"),
    ("Choir", "#722ed1"),
    ("Volunteer", "#fa8c16"),
    ("Small Group Leader", "#13c2c2"),
    ("New Member Class", "#eb2f96"),
]

PROFILE_FIELDS = [
    ProfileFieldCreate(label="Date of Birth", type=FieldType.DATE),
    ProfileFieldCreate(label="Baptized", type=FieldType.CHECKBOX),
    ProfileFieldCreate(
        label="Campus",
        type=FieldType.SELECT,
        options=[
            {"value": "north", "label": "North"},
            {"value": "south", "label": "South"},
        ],
    ),
    ProfileFieldCreate(
        label="Ministries",
        type=FieldType.MULTISELECT,
        options=[
            {"value": "music", "label": "Music"},
            {"value": "kids", "label": "Kids"},
            {"value": "hospitality", "label": "Hospitality"},
        ],
    ),
    ProfileFieldCreate(
        label="Pastoral Notes", type=FieldType.TEXTAREA, visibility=FieldVisibility.STAFF_ONLY
    ),
]


def random_phone() -> str:
    return f"({random.randint(200, 999)}) {random.randint(200, 999)}-{random.randint(1000, 9999)}"


def random_email(first: str, last: str, idx: int) -> str:
    return f"{first.lower()}.{last.lower()}{idx}@example.org"


def random_birth_date() -> str:
    return f"{random.randint(1950, 2012)}-{random.randint(1, 12):02d}-{random.randint(1, 28):02d}"


def get_or_create_org(db) -> Organization:
    org_slug = os.getenv("SEED_ORG_SLUG")
    if org_slug:
        org = db.query(Organization).filter(Organization.slug == org_slug).first()
    else:
        org = db.get(Organization, uuid.UUID(settings.DEV_ORG_ID))
    if org:
        return org

    org = Organization(
        id=uuid.UUID(settings.DEV_ORG_ID),
        name="Grace Community Church",
        slug=org_slug or "grace",
    )
    db.add(org)
    db.commit()
    print(f"Created organization: {org.name}")
    return org


def create_people(clients, tags, count: int = 40) -> list:
    print(f"Creating {count} people...")
    statuses = [PersonStatus.ACTIVE] * 6 + [PersonStatus.INACTIVE, PersonStatus.VISITOR] * 2
    people = []
    for idx in range(count):
        first = random.choice(FIRST_NAMES)
        last = random.choice(LAST_NAMES)
        person = require(
            clients.people.create(
                {
                    "first_name": first,
                    "last_name": last,
                    "email": random_email(first, last, idx) if random.random() > 0.1 else None,
                    "phone": random_phone() if random.random() > 0.2 else None,
                    "status": random.choice(statuses),
                    "tag_ids": [t.id for t in random.sample(tags, k=random.randint(0, 2))],
                    "fields": {
                        "date_of_birth": random_birth_date(),
                        "baptized": random.random() > 0.4,
                        "campus": random.choice(["north", "south"]),
                        "ministries": random.sample(
                            ["music", "kids", "hospitality"], k=random.randint(0, 2)
                        ),
                    },
                }
            )
        )
        people.append(person)
    print(f"Created {count} people")
    return people


def create_households(clients, people) -> None:
    by_last_name: dict[str, list] = {}
    for person in people:
        by_last_name.setdefault(person.last_name, []).append(person)

    created = 0
    for last_name, members in by_last_name.items():
        if len(members) < 2:
            continue
        household = household_service.create_household(
            clients, HouseholdCreate(name=f"The {last_name} Family")
        )
        relationships = [Relationship.HEAD, Relationship.SPOUSE]
        for idx, person in enumerate(members[:4]):
            relationship = relationships[idx] if idx < len(relationships) else Relationship.CHILD
            household_service.add_member(
                clients,
                household.id,
                AddMemberRequest(person_id=person.id, relationship=relationship),
            )
        created += 1
    print(f"Created {created} households")


def main(session_factory=SessionLocal):
    """Main entry point."""
    print("Seeding mock data...")

    db = session_factory()

    try:
        org = get_or_create_org(db)
        print(f"Using organization: {org.name} ({org.id})")
        clients = get_entity_clients(db, org.id)

        if profile_field_service.list_all_fields(clients.profile_fields):
            print("Profile fields already exist; skipping field seeding")
        else:
            for body in PROFILE_FIELDS:
                profile_field_service.create_field(clients.profile_fields, body)
            print(f"Created {len(PROFILE_FIELDS)} profile fields")

        tags = tag_service.list_tags(clients)
        if not tags:
            tags = [
                tag_service.create_tag(clients, TagCreate(name=name, color=color))
                for name, color in TAGS
            ]
            print(f"Created {len(tags)} tags")

        people = create_people(clients, tags)
        create_households(clients, people)

        session = UserSession(
            user_id=uuid.UUID(settings.DEV_USER_ID), org_id=org.id, role=Role.ADMIN
        )
        for person in random.sample(people, k=min(8, len(people))):
            note_service.add_note(
                clients,
                person.id,
                session,
                NoteRequest(
                    body="<p>Followed up after Sunday service.</p>",
                    visibility=random.choice(list(NoteVisibility)),
                ),
            )
        print("Created notes")

        print("Done.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
