"""Tests for people list filtering."""

import uuid

import pytest

from flock.db.enums import FieldType, PersonStatus
from flock.services.people_filters import (
    PeopleFilters,
    filter_people,
    parse_field_params,
    sort_by_display_name,
)


@pytest.fixture
def tags(make_tag):
    return make_tag("Youth"), make_tag("Choir"), make_tag("Staff")


@pytest.fixture
def people(make_person, tags):
    youth, choir, _ = tags
    return [
        make_person(
            "John", "Smith", email="john@example.com", tag_ids=[youth.id],
            fields={"campus": "north"},
        ),
        make_person(
            "Jane", "Doe", phone="555-0101", status=PersonStatus.VISITOR,
            tag_ids=[choir.id], fields={"campus": "south"},
        ),
        make_person(
            "Bob", "Johnson", preferred_name="Bobby", status=PersonStatus.INACTIVE,
            tag_ids=[youth.id, choir.id], fields={"campus": "north", "baptized": True},
        ),
    ]


def names(people):
    return [p.first_name for p in people]


def test_empty_filters_return_input(people):
    result = filter_people(people, PeopleFilters())
    assert result == people
    assert result is not people


def test_search_matches_names_email_and_phone(people):
    assert names(filter_people(people, PeopleFilters(search="john"))) == ["John", "Bob"]
    assert names(filter_people(people, PeopleFilters(search="JANE DOE"))) == ["Jane"]
    assert names(filter_people(people, PeopleFilters(search="example.com"))) == ["John"]
    assert names(filter_people(people, PeopleFilters(search="0101"))) == ["Jane"]
    assert names(filter_people(people, PeopleFilters(search="bobby"))) == ["Bob"]


def test_blank_search_is_ignored(people):
    assert filter_people(people, PeopleFilters(search="   ")) == people


def test_status_filter(people):
    assert names(filter_people(people, PeopleFilters(status=PersonStatus.VISITOR))) == ["Jane"]


def test_tag_filter_is_any_of(people, tags):
    youth, choir, staff = tags

    assert names(filter_people(people, PeopleFilters(tag_ids=[youth.id]))) == ["John", "Bob"]
    assert names(filter_people(people, PeopleFilters(tag_ids=[youth.id, choir.id]))) == [
        "John", "Jane", "Bob"
    ]
    assert filter_people(people, PeopleFilters(tag_ids=[staff.id])) == []


def test_filters_combine_with_and(people, tags):
    youth, _, _ = tags
    filters = PeopleFilters(
        search="o", status=PersonStatus.INACTIVE, tag_ids=[youth.id], fields={"campus": "north"}
    )
    assert names(filter_people(people, filters)) == ["Bob"]


def test_field_filter_exact_match(people):
    assert names(filter_people(people, PeopleFilters(fields={"campus": "north"}))) == [
        "John", "Bob"
    ]
    assert names(filter_people(people, PeopleFilters(fields={"baptized": True}))) == ["Bob"]
    # blank values are not active filters
    assert filter_people(people, PeopleFilters(fields={"campus": ""})) == people


def test_sort_by_display_name(people):
    assert names(sort_by_display_name(people)) == ["Bob", "Jane", "John"]


def test_parse_field_params(make_field):
    fields = [
        make_field("Campus"),
        make_field("Baptized", FieldType.CHECKBOX),
        make_field("Age", FieldType.NUMBER),
    ]
    params = [
        ("search", "x"),
        ("field.campus", "north"),
        ("field.baptized", "yes"),
        ("field.age", "  "),
    ]
    assert parse_field_params(params, fields) == {"campus": "north", "baptized": True}


def test_parse_field_params_rejects_unknown_key(make_field):
    fields = [make_field("Campus")]
    with pytest.raises(ValueError, match="Unknown profile field: shoe_size"):
        parse_field_params([("field.shoe_size", "11")], fields)


def test_parse_field_params_rejects_bad_value(make_field):
    fields = [make_field("Age", FieldType.NUMBER)]
    with pytest.raises(ValueError, match="Invalid value for Age"):
        parse_field_params([("field.age", "old")], fields)


def test_unknown_tag_id_matches_nobody(people):
    assert filter_people(people, PeopleFilters(tag_ids=[uuid.uuid4()])) == []
