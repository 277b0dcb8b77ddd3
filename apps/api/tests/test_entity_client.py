"""Tests for the generic entity client contract."""

import uuid

import pytest

from flock.db.models import Organization
from flock.services.entity_client import (
    EntityClientError,
    EntityNotFoundError,
    EntityValidationError,
    as_list,
    get_entity_clients,
    require,
)


def test_create_and_get_round_trip(clients):
    created = clients.tags.create({"name": "Youth", "color": "#52c41a"})

    assert created.success is True
    fetched = clients.tags.get(created.data.id)
    assert fetched.success is True
    assert fetched.data.name == "Youth"
    assert fetched.data.organization_id == clients.tags.org_id


def test_envelope_serialization_hides_failure_flags(clients):
    result = clients.tags.get(uuid.uuid4())

    assert result.success is False
    assert result.not_found is True
    assert result.model_dump() == {"success": False, "data": None, "message": "Tag not found"}


def test_invalid_payload_reported_in_envelope(clients):
    result = clients.tags.create({"name": "", "color": "blue"})

    assert result.success is False
    assert result.invalid is True
    assert "name" in result.message
    assert "color" in result.message


def test_update_is_partial(clients, make_person):
    person = make_person("Ada", "Lovelace", email="ada@example.com")

    updated = require(clients.people.update(person.id, {"phone": "555-0100"}))

    assert updated.phone == "555-0100"
    assert updated.email == "ada@example.com"
    assert updated.first_name == "Ada"


def test_update_missing_record(clients):
    result = clients.people.update(uuid.uuid4(), {"first_name": "Nobody"})
    assert result.success is False
    assert result.not_found is True


def test_records_are_scoped_to_organization(db, clients, make_person):
    person = make_person()
    other_org = Organization(id=uuid.uuid4(), name="Other", slug="other")
    db.add(other_org)
    db.commit()
    other = get_entity_clients(db, other_org.id)

    assert as_list(require(other.people.list())) == []
    assert other.people.get(person.id).not_found is True
    assert other.people.update(person.id, {"first_name": "Eve"}).success is False


def test_list_in_creation_order(make_tag, clients):
    names = ["One", "Two", "Three"]
    for name in names:
        make_tag(name)

    assert [t.name for t in require(clients.tags.list())] == names


def test_json_columns_round_trip(clients, make_tag):
    tag = make_tag("Choir")
    person = require(
        clients.people.create(
            {
                "first_name": "Grace",
                "last_name": "Hopper",
                "tag_ids": [tag.id, tag.id],
                "fields": {"ministries": ["music"], "baptized": True},
            }
        )
    )

    fetched = require(clients.people.get(person.id))
    assert fetched.tag_ids == [tag.id]
    assert fetched.fields == {"ministries": ["music"], "baptized": True}


def test_as_list():
    assert as_list(None) == []
    assert as_list("x") == ["x"]
    assert as_list(("a", "b")) == ["a", "b"]


def test_require_raises_by_failure_kind(clients):
    with pytest.raises(EntityNotFoundError, match="Person not found"):
        require(clients.people.get(uuid.uuid4()))
    with pytest.raises(EntityValidationError):
        require(clients.people.create({"first_name": "No last name"}))

    from flock.schemas.common import EntityResult

    with pytest.raises(EntityClientError) as excinfo:
        require(EntityResult.fail("Failed to list person"))
    assert type(excinfo.value) is EntityClientError


def test_by_name(clients):
    assert clients.by_name("household_members") is clients.household_members
    with pytest.raises(KeyError):
        clients.by_name("users")
