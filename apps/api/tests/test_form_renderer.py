"""Tests for dynamic form rendering of profile field definitions."""

from datetime import date

import pytest

from flock.db.enums import FieldType, FieldVisibility, Role
from flock.services import form_renderer


@pytest.fixture
def fields(make_field):
    """One definition per control kind, in creation order."""
    return [
        make_field("Nickname"),
        make_field("Bio", FieldType.TEXTAREA),
        make_field("Age", FieldType.NUMBER, required=True),
        make_field("Date of Birth", FieldType.DATE),
        make_field("Baptized", FieldType.CHECKBOX, required=True),
        make_field(
            "Campus",
            FieldType.SELECT,
            options=[{"value": "north", "label": "North"}, {"value": "south", "label": "South"}],
        ),
        make_field(
            "Ministries",
            FieldType.MULTISELECT,
            options=[{"value": "music", "label": "Music"}, {"value": "kids", "label": "Kids"}],
        ),
        make_field("Pastoral Notes", FieldType.TEXTAREA, visibility=FieldVisibility.STAFF_ONLY),
    ]


def by_key(controls):
    return {c.key: c for c in controls}


def test_widgets_follow_field_type(fields):
    controls = by_key(form_renderer.build_form(fields, {}, Role.ADMIN))

    assert controls["nickname"].widget == "input"
    assert controls["bio"].widget == "textarea"
    assert controls["age"].widget == "number"
    assert controls["date_of_birth"].widget == "date_picker"
    assert controls["baptized"].widget == "switch"
    assert controls["campus"].widget == "select"
    assert controls["ministries"].widget == "multi_select"
    assert [o.value for o in controls["campus"].options] == ["north", "south"]


def test_every_field_type_has_a_widget():
    assert set(form_renderer.WIDGETS) == set(FieldType)


def test_checkbox_is_never_required(fields):
    controls = by_key(form_renderer.build_form(fields, {}, Role.ADMIN))

    assert controls["baptized"].required is False
    assert controls["baptized"].value is False
    assert controls["age"].required is True


def test_form_keeps_definition_order(fields):
    controls = form_renderer.build_form(fields, {}, Role.OWNER)
    assert [c.key for c in controls] == [f.key for f in fields]


def test_staff_only_fields_hidden_from_members(fields):
    member_keys = [c.key for c in form_renderer.build_form(fields, {}, Role.MEMBER)]
    viewer_keys = [c.key for c in form_renderer.build_form(fields, {}, Role.VIEWER)]
    admin_keys = [c.key for c in form_renderer.build_form(fields, {}, Role.ADMIN)]

    assert "pastoral_notes" not in member_keys
    assert "pastoral_notes" not in viewer_keys
    assert "pastoral_notes" in admin_keys


def test_archived_fields_not_rendered(clients, fields):
    from flock.services import profile_field_service

    archived = profile_field_service.archive_field(clients.profile_fields, fields[0].id)
    remaining = [archived] + fields[1:]

    keys = [c.key for c in form_renderer.build_form(remaining, {"nickname": "Ace"}, Role.ADMIN)]
    assert "nickname" not in keys


def test_date_loads_as_date_and_dumps_as_iso(fields):
    dob = fields[3]
    control = form_renderer.render_control(dob, "1990-04-12")

    assert control.value == date(1990, 4, 12)
    assert control.to_schema().value == "1990-04-12"
    assert form_renderer.dump_value(dob, date(1990, 4, 12)) == "1990-04-12"
    assert form_renderer.dump_value(dob, "04/12/1990") == "1990-04-12"
    assert form_renderer.dump_value(dob, "") is None


def test_unparseable_stored_date_loads_as_empty(fields):
    assert form_renderer.load_value(fields[3], "someday") is None


def test_multiselect_scalar_loads_as_list(fields):
    assert form_renderer.load_value(fields[6], "music") == ["music"]
    assert form_renderer.load_value(fields[6], None) == []


def test_read_only_display_values(fields):
    values = {
        "date_of_birth": "1990-04-12",
        "baptized": True,
        "ministries": ["music", "kids"],
    }
    controls = by_key(form_renderer.build_form(fields, values, Role.ADMIN, read_only=True))

    assert controls["date_of_birth"].display_value == "04/12/1990"
    assert controls["baptized"].display_value == "Yes"
    assert controls["ministries"].display_value == "music, kids"
    assert controls["nickname"].display_value == "-"
    assert all(c.read_only for c in controls.values())


def test_format_display_checkbox_false(fields):
    assert form_renderer.format_display(fields[4], False) == "No"


def test_preview_uses_sample_placeholders(fields):
    controls = form_renderer.preview_form(fields)

    assert controls[0].placeholder == "Sample nickname"
    assert all(c.read_only for c in controls)
    assert all(c.display_value is None for c in controls)
    # Preview shows staff-only fields too; it is a staff-only page
    assert "pastoral_notes" in [c.key for c in controls]


# =============================================================================
# Submission
# =============================================================================

def test_validate_reports_missing_required(fields):
    errors = form_renderer.validate_field_values(fields, {}, Role.ADMIN)
    assert errors == ["Age is required"]


def test_validate_type_errors(fields):
    submitted = {
        "age": "forty",
        "campus": "east",
        "ministries": ["music", "choir"],
        "date_of_birth": "not a date",
        "baptized": "maybe",
    }
    errors = form_renderer.validate_field_values(fields, submitted, Role.ADMIN)

    assert "Age must be a number" in errors
    assert 'Campus: "east" is not an allowed option' in errors
    assert "Ministries: choir not allowed" in errors
    assert 'Date of Birth: invalid date "not a date"' in errors
    assert "Baptized must be true or false" in errors


def test_validate_accepts_good_values(fields):
    submitted = {
        "age": 41,
        "campus": "north",
        "ministries": ["kids"],
        "date_of_birth": "1983-01-02",
        "baptized": False,
    }
    assert form_renderer.validate_field_values(fields, submitted, Role.ADMIN) == []


def test_prepare_drops_hidden_and_unknown_keys(fields):
    submitted = {"nickname": "Ace", "pastoral_notes": "private", "shoe_size": 11}

    prepared = form_renderer.prepare_field_values(fields, submitted, Role.MEMBER)
    assert prepared == {"nickname": "Ace"}


@pytest.mark.parametrize(
    "index,raw,expected",
    [
        (2, "42", 42),
        (2, " 3.5 ", 3.5),
        (4, "Yes", True),
        (4, "0", False),
        (6, "music; kids;", ["music", "kids"]),
        (3, "12/25/2020", "2020-12-25"),
        (0, "  Ace ", "Ace"),
    ],
)
def test_coerce_value(fields, index, raw, expected):
    assert form_renderer.coerce_value(fields[index], raw) == expected


def test_coerce_value_rejects_bad_input(fields):
    with pytest.raises(ValueError):
        form_renderer.coerce_value(fields[2], "lots")
    with pytest.raises(ValueError):
        form_renderer.coerce_value(fields[4], "perhaps")
    with pytest.raises(ValueError):
        form_renderer.coerce_value(fields[3], "31/31/2020")


@pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity"])
def test_coerce_number_rejects_non_finite(fields, raw):
    with pytest.raises(ValueError, match="finite"):
        form_renderer.coerce_value(fields[2], raw)


def test_partial_validation_checks_submitted_keys_only(fields):
    def errors(submitted):
        return form_renderer.validate_field_values(fields, submitted, Role.ADMIN, partial=True)

    # Age is required but only checked when submitted
    assert errors({"nickname": "Ace"}) == []
    assert errors({"campus": "east"}) == ['Campus: "east" is not an allowed option']
    assert errors({"age": ""}) == ["Age is required"]


def test_visible_values_drop_hidden_and_unknown_keys(fields):
    values = {"nickname": "Ace", "pastoral_notes": "private", "retired_key": 1}

    assert form_renderer.visible_values(fields, values, Role.MEMBER) == {"nickname": "Ace"}
    assert form_renderer.visible_values(fields, values, Role.ADMIN) == {
        "nickname": "Ace",
        "pastoral_notes": "private",
    }
