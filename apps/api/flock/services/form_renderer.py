"""Dynamic form rendering for profile field definitions.

A definition plus the stored value maps to one input control. The same
rendering is used by the create/edit form, the read-only profile view
and the settings preview, so the type -> control table lives only here.
"""

import math
from dataclasses import dataclass, field as dc_field
from datetime import date, datetime
from typing import Any, Iterable

from flock.core.config import settings
from flock.db.enums import FieldType, FieldVisibility, Role, is_staff
from flock.schemas.profile_field import FieldOption, FormControlRead, ProfileFieldRead


WIDGETS: dict[FieldType, str] = {
    FieldType.TEXT: "input",
    FieldType.EMAIL: "input",
    FieldType.PHONE: "input",
    FieldType.URL: "input",
    FieldType.TEXTAREA: "textarea",
    FieldType.NUMBER: "number",
    FieldType.DATE: "date_picker",
    FieldType.CHECKBOX: "switch",
    FieldType.SELECT: "select",
    FieldType.MULTISELECT: "multi_select",
}

TRUTHY_VALUES = {"true", "yes", "y", "1", "on", "x"}
FALSY_VALUES = {"false", "no", "n", "0", "off", ""}

DATE_INPUT_FORMATS = ["%Y-%m-%d", "%m/%d/%Y", "%m-%d-%Y", "%Y/%m/%d"]


@dataclass
class FormControl:
    """One rendered input for a field definition."""

    key: str
    label: str
    field_type: FieldType
    widget: str
    required: bool
    read_only: bool
    value: Any = None
    options: list[FieldOption] = dc_field(default_factory=list)
    placeholder: str | None = None
    display_value: str | None = None

    def to_schema(self) -> FormControlRead:
        value = self.value
        if isinstance(value, date):
            value = value.isoformat()
        return FormControlRead(
            key=self.key,
            label=self.label,
            field_type=self.field_type,
            widget=self.widget,
            required=self.required,
            read_only=self.read_only,
            value=value,
            options=self.options,
            placeholder=self.placeholder,
            display_value=self.display_value,
        )


# =============================================================================
# Visibility
# =============================================================================

def is_visible(field: ProfileFieldRead, role: Role | str) -> bool:
    """Staff-only fields are shown to owners and admins only."""
    return field.visibility == FieldVisibility.PUBLIC or is_staff(role)


def visible_fields(fields: Iterable[ProfileFieldRead], role: Role | str) -> list[ProfileFieldRead]:
    return [f for f in fields if not f.archived and is_visible(f, role)]


def visible_values(
    fields: Iterable[ProfileFieldRead], values: dict[str, Any] | None, role: Role | str
) -> dict[str, Any]:
    """Stored custom values restricted to the keys of fields the role can see."""
    keys = {f.key for f in visible_fields(fields, role)}
    return {k: v for k, v in (values or {}).items() if k in keys}


# =============================================================================
# Value conversion
# =============================================================================

def parse_date(value: Any) -> date:
    """Parse a stored or submitted date. Accepts date, datetime, ISO strings and US dates."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if "T" in text:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    for fmt in DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {value}")


def load_value(field: ProfileFieldRead, stored: Any) -> Any:
    """Stored value -> edit value (ISO string -> date, scalar -> list for multiselect)."""
    if stored is None:
        return [] if field.type == FieldType.MULTISELECT else None
    if field.type == FieldType.DATE:
        try:
            return parse_date(stored)
        except ValueError:
            return None
    if field.type == FieldType.MULTISELECT and not isinstance(stored, list):
        return [stored]
    return stored


def dump_value(field: ProfileFieldRead, edited: Any) -> Any:
    """Edit value -> stored value (date -> ISO-8601 string)."""
    if edited is None:
        return None
    if field.type == FieldType.DATE:
        if isinstance(edited, str) and not edited.strip():
            return None
        return parse_date(edited).isoformat()
    return edited


def coerce_value(field: ProfileFieldRead, raw: str) -> Any:
    """
    Convert a raw text value (CSV cell, query string) to the field's type.

    Raises:
        ValueError: the text cannot be read as the field's type
    """
    text = raw.strip()
    if field.type == FieldType.NUMBER:
        number = float(text)
        if not math.isfinite(number):
            raise ValueError(f"Not a finite number: {raw}")
        return int(number) if number.is_integer() else number
    if field.type == FieldType.CHECKBOX:
        lowered = text.lower()
        if lowered in TRUTHY_VALUES:
            return True
        if lowered in FALSY_VALUES:
            return False
        raise ValueError(f"Not a yes/no value: {raw}")
    if field.type == FieldType.MULTISELECT:
        return [part.strip() for part in text.split(";") if part.strip()]
    if field.type == FieldType.DATE:
        return parse_date(text).isoformat()
    return text


def _is_missing(value: Any) -> bool:
    return value is None or value == "" or value == []


def format_display(field: ProfileFieldRead, value: Any) -> str:
    """Read-only rendering used on the profile page."""
    if value is None:
        return "-"
    if field.type == FieldType.CHECKBOX:
        return "Yes" if value else "No"
    if field.type == FieldType.MULTISELECT:
        return ", ".join(str(v) for v in value) if isinstance(value, list) else str(value)
    if field.type == FieldType.DATE:
        try:
            return parse_date(value).strftime(settings.EXPORT_DATE_FORMAT)
        except ValueError:
            return str(value)
    return str(value)


# =============================================================================
# Rendering
# =============================================================================

def render_control(
    field: ProfileFieldRead,
    value: Any = None,
    read_only: bool = False,
) -> FormControl:
    """Map a definition and its stored value to an input control."""
    # Booleans are never "missing"
    required = field.required and field.type != FieldType.CHECKBOX
    control = FormControl(
        key=field.key,
        label=field.label,
        field_type=field.type,
        widget=WIDGETS[field.type],
        required=required,
        read_only=read_only,
        value=load_value(field, value),
        options=list(field.options or []),
    )
    if field.type == FieldType.CHECKBOX and control.value is None:
        control.value = False
    if read_only:
        control.display_value = format_display(field, value)
    return control


def build_form(
    fields: Iterable[ProfileFieldRead],
    values: dict[str, Any] | None,
    role: Role | str,
    read_only: bool = False,
) -> list[FormControl]:
    """Controls for every active field visible to the role, in definition order."""
    values = values or {}
    ordered = sorted(visible_fields(fields, role), key=lambda f: f.order_index)
    return [render_control(f, values.get(f.key), read_only=read_only) for f in ordered]


def preview_form(fields: Iterable[ProfileFieldRead]) -> list[FormControl]:
    """Disabled sample rendering for the settings page."""
    controls = []
    for f in sorted((f for f in fields if not f.archived), key=lambda f: f.order_index):
        control = render_control(f, read_only=True)
        control.display_value = None
        control.placeholder = f"Sample {f.label.lower()}"
        controls.append(control)
    return controls


# =============================================================================
# Submission
# =============================================================================

def validate_field_values(
    fields: Iterable[ProfileFieldRead],
    submitted: dict[str, Any],
    role: Role | str,
    partial: bool = False,
) -> list[str]:
    """
    Return human readable errors for a form submission; empty when valid.

    With `partial`, only the submitted keys are checked; stored values of
    other fields are left alone. Blanking a required field is still an error.
    """
    errors: list[str] = []
    for f in visible_fields(fields, role):
        if partial and f.key not in submitted:
            continue
        value = submitted.get(f.key)
        if _is_missing(value):
            if f.required and f.type != FieldType.CHECKBOX:
                errors.append(f"{f.label} is required")
            continue

        allowed = {o.value for o in f.options or []}
        if f.type == FieldType.NUMBER and (
            isinstance(value, bool) or not isinstance(value, (int, float))
        ):
            errors.append(f"{f.label} must be a number")
        elif f.type == FieldType.CHECKBOX and not isinstance(value, bool):
            errors.append(f"{f.label} must be true or false")
        elif f.type == FieldType.SELECT and value not in allowed:
            errors.append(f'{f.label}: "{value}" is not an allowed option')
        elif f.type == FieldType.MULTISELECT:
            if not isinstance(value, list):
                errors.append(f"{f.label} must be a list of options")
            else:
                invalid = [v for v in value if v not in allowed]
                if invalid:
                    errors.append(f"{f.label}: {', '.join(map(str, invalid))} not allowed")
        elif f.type == FieldType.DATE:
            try:
                parse_date(value)
            except ValueError:
                errors.append(f'{f.label}: invalid date "{value}"')
    return errors


def prepare_field_values(
    fields: Iterable[ProfileFieldRead],
    submitted: dict[str, Any],
    role: Role | str,
) -> dict[str, Any]:
    """
    Convert a validated submission into storable values.

    Only keys of active fields visible to the role are taken; everything
    else in the submission is ignored.
    """
    prepared: dict[str, Any] = {}
    for f in visible_fields(fields, role):
        if f.key not in submitted:
            continue
        prepared[f.key] = dump_value(f, submitted[f.key])
    return prepared
