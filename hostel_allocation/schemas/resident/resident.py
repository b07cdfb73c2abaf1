"""
Resident schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from hostel_allocation.schemas.common.base import RequestSchema, ResponseSchema

__all__ = ["ResidentCreate", "ResidentResponse"]


class ResidentCreate(RequestSchema):
    """
    Enrollment request. When asset_id is given the resident is assigned
    through the coordinator right after the record is created.
    """

    external_resident_code: str = Field(..., min_length=1, max_length=50, examples=["STU2024001"])
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    contact_number: Optional[str] = Field(default=None, max_length=20)
    admission_date: Optional[date] = None
    asset_id: Optional[str] = Field(default=None, description="Asset to assign on enrollment")

    @field_validator("external_resident_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class ResidentResponse(ResponseSchema):
    external_resident_code: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    contact_number: Optional[str] = None
    admission_date: Optional[date] = None
    assigned_asset_id: Optional[str] = None
    is_active: bool
    checked_out_at: Optional[datetime] = None
