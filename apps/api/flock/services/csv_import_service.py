"""CSV import service for bulk people creation.

Flow: upload -> map -> validate -> import.

- Parse CSV (standard quoting rules, BOM tolerated)
- Propose a column mapping from header names
- Validate the mapping against the first preview rows
- Create one person per row; failures are counted, not raised
"""

import csv
import io
import logging
from dataclasses import dataclass
from typing import Any

from flock.core.config import settings
from flock.db.enums import DEFAULT_PERSON_STATUS, PersonStatus
from flock.schemas.people_import import ImportTarget
from flock.schemas.profile_field import ProfileFieldRead
from flock.services import form_renderer
from flock.services.entity_client import EntityClient
from flock.services.profile_field_service import active_fields

logger = logging.getLogger(__name__)


class ImportValidationError(Exception):
    """The mapping or the preview rows are invalid; carries every message."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


# =============================================================================
# Targets & Mapping
# =============================================================================

CORE_FIELDS: list[ImportTarget] = [
    ImportTarget(key="first_name", label="First Name", required=True),
    ImportTarget(key="last_name", label="Last Name", required=True),
    ImportTarget(key="preferred_name", label="Preferred Name"),
    ImportTarget(key="email", label="Email"),
    ImportTarget(key="phone", label="Phone"),
    ImportTarget(key="status", label="Status", required=True),
]
CORE_FIELD_KEYS = {f.key for f in CORE_FIELDS}

SAMPLE_CSV = (
    "First Name,Last Name,Email,Phone,Status\n"
    "John,Doe,john@example.com,(555) 123-4567,active\n"
    "Jane,Smith,jane@example.com,(555) 987-6543,visitor"
)
SAMPLE_CSV_FILENAME = "people-import-sample.csv"


def auto_map_header(header: str) -> str | None:
    """Propose a core target for a header by substring match; first rule wins."""
    lower = header.lower()
    if "first" in lower and "name" in lower:
        return "first_name"
    if "last" in lower and "name" in lower:
        return "last_name"
    if "email" in lower:
        return "email"
    if "phone" in lower:
        return "phone"
    if "status" in lower:
        return "status"
    return None


def auto_map(headers: list[str]) -> dict[str, str | None]:
    return {header: auto_map_header(header) for header in headers}


def mapping_targets(fields: list[ProfileFieldRead]) -> list[ImportTarget]:
    """Core targets followed by every active custom field."""
    custom = [
        ImportTarget(key=f.key, label=f.label, required=False, custom=True)
        for f in active_fields(fields)
    ]
    return CORE_FIELDS + sorted(custom, key=lambda t: t.label.lower())


def check_mapping_targets(mapping: dict[str, str | None], fields: list[ProfileFieldRead]) -> None:
    """
    Raises:
        ValueError: a column is mapped to a key that is neither core nor an active custom field
    """
    allowed = {t.key for t in mapping_targets(fields)}
    for header, target in mapping.items():
        if target and target not in allowed:
            raise ValueError(f'Column "{header}" is mapped to unknown field "{target}"')


# =============================================================================
# CSV Parsing
# =============================================================================

@dataclass
class ParsedCSV:
    headers: list[str]
    rows: list[dict[str, str]]

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    def preview_rows(self, limit: int | None = None) -> list[dict[str, str]]:
        return self.rows[: limit or settings.IMPORT_PREVIEW_ROWS]


def decode_csv(file_content: bytes | str) -> str:
    """
    Raises:
        ValueError: file too large or not UTF-8
    """
    if isinstance(file_content, str):
        return file_content
    if len(file_content) > settings.IMPORT_MAX_BYTES:
        raise ValueError(f"CSV file exceeds {settings.IMPORT_MAX_BYTES} bytes")
    try:
        return file_content.decode("utf-8-sig")  # Handle BOM
    except UnicodeDecodeError as exc:
        raise ValueError("CSV file must be UTF-8 encoded") from exc


def parse_csv(file_content: bytes | str) -> ParsedCSV:
    """
    Parse CSV content into headers and header-keyed rows.

    Blank lines are skipped; short rows are padded with empty strings.

    Raises:
        ValueError: fewer than a header row and one data row
    """
    text = decode_csv(file_content)
    reader = csv.reader(io.StringIO(text))
    lines = [
        [cell.strip() for cell in line]
        for line in reader
        if any(cell.strip() for cell in line)
    ]
    if len(lines) < 2:
        raise ValueError("CSV file must have at least a header row and one data row")

    headers = lines[0]
    rows = []
    for values in lines[1:]:
        rows.append(
            {header: values[i] if i < len(values) else "" for i, header in enumerate(headers)}
        )
    return ParsedCSV(headers=headers, rows=rows)


# =============================================================================
# Validation
# =============================================================================

def validate_mapping(
    parsed: ParsedCSV,
    mapping: dict[str, str | None],
) -> list[str]:
    """
    Check required targets are mapped and preview rows hold valid values.

    Returns every problem found; an empty list means the import may run.
    """
    errors: list[str] = []
    mapped = {target for target in mapping.values() if target}

    for field in CORE_FIELDS:
        if field.required and field.key not in mapped:
            errors.append(f'Required field "{field.label}" is not mapped')

    statuses = PersonStatus.values()
    for index, row in enumerate(parsed.preview_rows(), start=1):
        for column, target in mapping.items():
            if not target:
                continue
            value = row.get(column, "")
            if target == "status" and value.lower() not in statuses:
                errors.append(
                    f'Row {index}: Invalid status "{value}". '
                    "Must be active, inactive, or visitor"
                )
            if target == "email" and value and "@" not in value:
                errors.append(f'Row {index}: Invalid email "{value}"')
    return errors


# =============================================================================
# Import
# =============================================================================

def build_person_payload(
    row: dict[str, str],
    mapping: dict[str, str | None],
    fields_by_key: dict[str, ProfileFieldRead],
) -> dict[str, Any]:
    """
    Apply the mapping to one row.

    Core targets become top-level attributes; every other target goes into
    `fields`, converted to the field's type. Empty cells are left out.

    Raises:
        ValueError: a custom value does not fit its field type
    """
    payload: dict[str, Any] = {"status": DEFAULT_PERSON_STATUS.value, "fields": {}}
    for column, target in mapping.items():
        if not target:
            continue
        value = row.get(column, "").strip()
        if not value:
            continue
        if target in CORE_FIELD_KEYS:
            payload[target] = value.lower() if target == "status" else value
            continue
        definition = fields_by_key.get(target)
        payload["fields"][target] = (
            form_renderer.coerce_value(definition, value) if definition else value
        )
    return payload


@dataclass
class ImportResult:
    success_count: int = 0
    error_count: int = 0

    @property
    def message(self) -> str:
        return (
            f"Import completed: {self.success_count} people imported, "
            f"{self.error_count} errors"
        )


def execute_import(
    people: EntityClient,
    parsed: ParsedCSV,
    mapping: dict[str, str | None],
    fields: list[ProfileFieldRead],
) -> ImportResult:
    """
    Create one person per row.

    Rows are independent: a failed row is counted and the rest continue.

    Raises:
        ImportValidationError: mapping or preview rows are invalid
    """
    errors = validate_mapping(parsed, mapping)
    if errors:
        raise ImportValidationError(errors)

    fields_by_key = {f.key: f for f in fields if not f.archived}
    result = ImportResult()
    for row_number, row in enumerate(parsed.rows, start=1):
        try:
            payload = build_person_payload(row, mapping, fields_by_key)
        except ValueError as exc:
            result.error_count += 1
            logger.warning("Import row %s rejected: %s", row_number, exc)
            continue

        created = people.create(payload)
        if created.success:
            result.success_count += 1
        else:
            result.error_count += 1
            logger.warning("Import row %s failed: %s", row_number, created.message)

    logger.info(
        "People import finished",
        extra={
            "org_id": str(people.org_id),
            "success_count": result.success_count,
            "error_count": result.error_count,
        },
    )
    return result
