"""Pydantic schemas for the people CSV import flow."""

from pydantic import BaseModel, Field


class ImportTarget(BaseModel):
    """A field a CSV column can be mapped to."""

    key: str
    label: str
    required: bool = False
    custom: bool = False


class ImportPreviewResponse(BaseModel):
    headers: list[str]
    sample_rows: list[dict[str, str]]
    total_rows: int
    # CSV header -> target key (None when unmapped)
    mapping: dict[str, str | None]
    targets: list[ImportTarget]


class ImportValidationResponse(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


class ImportResultResponse(BaseModel):
    success_count: int
    error_count: int
    message: str
