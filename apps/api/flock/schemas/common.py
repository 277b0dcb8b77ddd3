"""Shared response envelope used by the entity client contract."""

from typing import Any

from pydantic import BaseModel, Field


class EntityResult(BaseModel):
    """`{success, data, message}`; `data` may be a single record or a list."""

    success: bool
    data: Any = None
    message: str | None = None
    # Failure kind flags; not part of the envelope
    not_found: bool = Field(default=False, exclude=True)
    invalid: bool = Field(default=False, exclude=True)

    @classmethod
    def ok(cls, data: Any) -> "EntityResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(
        cls, message: str, not_found: bool = False, invalid: bool = False
    ) -> "EntityResult":
        return cls(success=False, message=message, not_found=not_found, invalid=invalid)


class MessageResponse(BaseModel):
    message: str
