"""Tests for the profile field registry: keys, ordering, archive and reorder."""

import re
import uuid

import pytest
from pydantic import ValidationError

from flock.db.enums import FieldType
from flock.schemas.common import EntityResult
from flock.schemas.profile_field import ProfileFieldCreate, ProfileFieldEdit
from flock.services import profile_field_service
from flock.services.entity_client import EntityClient, EntityNotFoundError, require


KEY_PATTERN = re.compile(r"^[a-z0-9]+(_[a-z0-9]+)*$")


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Date of Birth!", "date_of_birth"),
        ("  Spiritual Gifts  ", "spiritual_gifts"),
        ("--Small__Group--", "small_group"),
        ("T-Shirt Size (Adult)", "t_shirt_size_adult"),
        ("Année", "ann_e"),
        ("Phone #2", "phone_2"),
    ],
)
def test_generate_key(label, expected):
    key = profile_field_service.generate_key(label)
    assert key == expected
    assert KEY_PATTERN.match(key)


def test_generate_key_empty_for_symbols_only():
    assert profile_field_service.generate_key("!!! ???") == ""


def test_create_field_derives_key_and_appends(clients, make_field):
    first = make_field("Date of Birth", FieldType.DATE)
    second = make_field("Baptized", FieldType.CHECKBOX)

    assert first.key == "date_of_birth"
    assert first.order_index == 1
    assert second.order_index == 2
    assert first.archived is False


def test_create_field_explicit_key_is_normalized(clients):
    field = profile_field_service.create_field(
        clients.profile_fields,
        ProfileFieldCreate(label="Shirt", type=FieldType.TEXT, key="Shirt Size"),
    )
    assert field.key == "shirt_size"


def test_create_field_rejects_empty_key(clients):
    with pytest.raises(ValueError, match="at least one letter or number"):
        profile_field_service.create_field(
            clients.profile_fields, ProfileFieldCreate(label="???", type=FieldType.TEXT)
        )


def test_create_field_order_counts_archived(clients, make_field):
    first = make_field("First")
    make_field("Second")
    profile_field_service.archive_field(clients.profile_fields, first.id)

    third = make_field("Third")
    assert third.order_index == 3


def test_duplicate_key_is_allowed(clients, make_field):
    make_field("Campus")
    again = make_field("Campus")
    keys = [f.key for f in profile_field_service.list_fields(clients.profile_fields)]
    assert keys == ["campus", "campus"]
    assert again.order_index == 2


def test_select_requires_options():
    with pytest.raises(ValidationError):
        ProfileFieldCreate(label="Campus", type=FieldType.SELECT)


def test_list_fields_sorted_and_active_only(clients, make_field):
    a = make_field("A")
    b = make_field("B")
    c = make_field("C")
    require(clients.profile_fields.update(a.id, {"order_index": 9}))
    profile_field_service.archive_field(clients.profile_fields, b.id)

    active = profile_field_service.list_fields(clients.profile_fields)
    assert [f.id for f in active] == [c.id, a.id]

    everything = profile_field_service.list_all_fields(clients.profile_fields)
    assert {f.id for f in everything} == {a.id, b.id, c.id}


def test_archive_keeps_person_values(clients, make_field, make_person):
    field = make_field("Shirt Size")
    person = make_person(fields={"shirt_size": "L"})

    profile_field_service.archive_field(clients.profile_fields, field.id)

    assert field.id not in [f.id for f in profile_field_service.list_fields(clients.profile_fields)]
    stored = require(clients.people.get(person.id))
    assert stored.fields == {"shirt_size": "L"}


def test_update_field_rejects_clearing_options(clients, make_field):
    field = make_field(
        "Campus", FieldType.SELECT, options=[{"value": "north", "label": "North"}]
    )
    with pytest.raises(ValueError):
        profile_field_service.update_field(
            clients.profile_fields, field.id, ProfileFieldEdit(options=[])
        )


def test_update_field_missing(clients):
    with pytest.raises(EntityNotFoundError):
        profile_field_service.update_field(
            clients.profile_fields, uuid.uuid4(), ProfileFieldEdit(label="X")
        )


# =============================================================================
# Reorder
# =============================================================================

def test_reorder_assigns_contiguous_positions(clients, make_field):
    a, b, c = make_field("A"), make_field("B"), make_field("C")

    result = profile_field_service.reorder_fields(clients.profile_fields, [c.id, a.id, b.id])

    assert result.success is True
    assert [f.id for f in result.fields] == [c.id, a.id, b.id]
    assert [f.order_index for f in result.fields] == [1, 2, 3]


def test_reorder_renumbers_archived_after_active(clients, make_field):
    a, b, c = make_field("A"), make_field("B"), make_field("C")
    profile_field_service.archive_field(clients.profile_fields, a.id)

    result = profile_field_service.reorder_fields(clients.profile_fields, [c.id, b.id])

    assert result.success is True
    everything = profile_field_service.list_all_fields(clients.profile_fields)
    assert [(f.id, f.order_index) for f in everything] == [(c.id, 1), (b.id, 2), (a.id, 3)]


def test_reorder_rejects_mismatched_ids(clients, make_field):
    a, b = make_field("A"), make_field("B")
    with pytest.raises(ValueError):
        profile_field_service.reorder_fields(clients.profile_fields, [a.id])
    with pytest.raises(ValueError):
        profile_field_service.reorder_fields(clients.profile_fields, [a.id, a.id])
    with pytest.raises(ValueError):
        profile_field_service.reorder_fields(clients.profile_fields, [a.id, b.id, uuid.uuid4()])


class FlakyClient(EntityClient):
    """Fails updates for one record id."""

    def __init__(self, inner: EntityClient, failing_id):
        super().__init__(inner.db, inner.org_id, inner.entity)
        self.failing_id = failing_id
        self.update_calls = []

    def update(self, entity_id, partial):
        self.update_calls.append(entity_id)
        if entity_id == self.failing_id:
            return EntityResult.fail("Failed to update profile field")
        return super().update(entity_id, partial)


def test_reorder_partial_failure_returns_server_view(clients, make_field):
    a, b, c = make_field("A"), make_field("B"), make_field("C")
    flaky = FlakyClient(clients.profile_fields, failing_id=a.id)

    result = profile_field_service.reorder_fields(flaky, [c.id, b.id, a.id])

    assert result.success is False
    assert result.message == "Failed to update field order"
    # every update is still attempted
    assert flaky.update_calls == [c.id, b.id, a.id]
    # the returned view is what the server holds: c and b moved, a did not
    by_id = {f.id: f.order_index for f in result.fields}
    assert by_id == {c.id: 1, b.id: 2, a.id: 1}
