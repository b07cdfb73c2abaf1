"""
Schema base classes.

Request bodies reject unknown fields, so attempts to set server-owned
columns such as an asset's state or occupant fail validation instead of
being silently dropped.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

__all__ = [
    "BaseSchema",
    "RequestSchema",
    "ResponseSchema",
    "FrozenSchema",
]


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class RequestSchema(BaseSchema):
    model_config = ConfigDict(extra="forbid")


class ResponseSchema(BaseSchema):
    """Rendered from an ORM row."""

    id: str
    created_at: datetime
    updated_at: datetime


class FrozenSchema(BaseModel):
    """Immutable fact record handed between components."""

    model_config = ConfigDict(frozen=True, from_attributes=True)
