"""CSV export helpers for people."""

import csv
import io
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable

from flock.core.config import settings
from flock.db.enums import FieldType, Role
from flock.schemas.people_export import ExportColumn
from flock.schemas.person import PersonRead
from flock.schemas.profile_field import ProfileFieldRead
from flock.schemas.tag import TagRead
from flock.services import form_renderer

CUSTOM_COLUMN_PREFIX = "field."

CORE_COLUMNS: list[ExportColumn] = [
    ExportColumn(key="first_name", label="First Name", default=True),
    ExportColumn(key="last_name", label="Last Name", default=True),
    ExportColumn(key="preferred_name", label="Preferred Name"),
    ExportColumn(key="email", label="Email", default=True),
    ExportColumn(key="phone", label="Phone", default=True),
    ExportColumn(key="status", label="Status", default=True),
    ExportColumn(key="tags", label="Tags"),
    ExportColumn(key="household", label="Household"),
    ExportColumn(key="created_at", label="Created Date"),
    ExportColumn(key="updated_at", label="Updated Date"),
]
DEFAULT_COLUMNS = [c.key for c in CORE_COLUMNS if c.default]

LIST_SEPARATOR = "; "

CSV_DANGEROUS_PREFIXES = ("=", "+", "-", "@")
# Phone numbers and signed numbers are data, not formulas
_PHONE_OR_NUMBER = re.compile(r"^[+\-]?[\d\s().\-]+$")


def _csv_safe(value: str) -> str:
    if value and value.startswith(CSV_DANGEROUS_PREFIXES) and not _PHONE_OR_NUMBER.match(value):
        return f"'{value}"
    return value


def custom_column_key(field: ProfileFieldRead) -> str:
    return f"{CUSTOM_COLUMN_PREFIX}{field.key}"


def available_columns(fields: list[ProfileFieldRead], role: Role | str) -> list[ExportColumn]:
    """Core columns plus every active custom field the role can see."""
    ordered = sorted(form_renderer.visible_fields(fields, role), key=lambda f: f.order_index)
    return CORE_COLUMNS + [
        ExportColumn(key=custom_column_key(f), label=f.label, custom=True) for f in ordered
    ]


def _format_date(value: Any) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.strftime(settings.EXPORT_DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(settings.EXPORT_DATE_FORMAT)
    return form_renderer.parse_date(value).strftime(settings.EXPORT_DATE_FORMAT)


def format_value(value: Any, field: ProfileFieldRead | None = None) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return LIST_SEPARATOR.join(str(v) for v in value)
    if isinstance(value, (datetime, date)):
        return _format_date(value)
    if field is not None and field.type == FieldType.DATE:
        try:
            return _format_date(value)
        except ValueError:
            return str(value)
    return str(value)


def format_cell(
    column: str,
    person: PersonRead,
    tags_by_id: dict,
    fields_by_column: dict[str, ProfileFieldRead],
) -> str:
    if column == "tags":
        names = [tags_by_id[t].name for t in person.tag_ids if t in tags_by_id]
        return LIST_SEPARATOR.join(names)
    if column == "household":
        return "Yes" if person.household_id else "No"
    if column == "status":
        return person.status.value
    if column in fields_by_column:
        field = fields_by_column[column]
        return format_value(person.fields.get(field.key), field)
    return format_value(getattr(person, column))


def resolve_columns(
    selected: list[str], fields: list[ProfileFieldRead], role: Role | str
) -> list[ExportColumn]:
    """
    Raises:
        ValueError: nothing selected, or a column the role cannot export
    """
    if not selected:
        raise ValueError("Please select at least one column to export")
    by_key = {c.key: c for c in available_columns(fields, role)}
    unknown = [key for key in selected if key not in by_key]
    if unknown:
        raise ValueError(f"Unknown export column: {', '.join(unknown)}")
    return [by_key[key] for key in dict.fromkeys(selected)]


def build_csv(
    people: Iterable[PersonRead],
    selected: list[str],
    fields: list[ProfileFieldRead],
    tags: list[TagRead],
    role: Role | str,
) -> str:
    """Render the selected columns for each person as CSV text with a header row."""
    columns = resolve_columns(selected, fields, role)
    tags_by_id = {t.id: t for t in tags}
    fields_by_column = {custom_column_key(f): f for f in fields if not f.archived}

    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow([_csv_safe(c.label) for c in columns])
    for person in people:
        writer.writerow(
            [
                _csv_safe(format_cell(c.key, person, tags_by_id, fields_by_column))
                for c in columns
            ]
        )
    return output.getvalue()


def export_filename(today: date | None = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"people-export-{today.isoformat()}.csv"
