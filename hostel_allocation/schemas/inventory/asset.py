"""
Asset schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from hostel_allocation.models.base.enums import MAINTENANCE_TARGET_STATES, AssetState
from hostel_allocation.schemas.common.base import BaseSchema, RequestSchema, ResponseSchema

__all__ = [
    "AssetCreate",
    "AssetResponse",
    "MaintenanceStateUpdate",
    "OccupancySummary",
]


class AssetCreate(RequestSchema):
    """
    Schema for registering a new inventory item.

    The asset always starts Available; state cannot be supplied.
    """

    category: str = Field(..., min_length=1, max_length=50, examples=["bed", "furniture"])
    item_name: str = Field(..., min_length=1, max_length=100, examples=["Bed A1"])
    location: str = Field(..., min_length=1, max_length=100, examples=["Block A"])
    floor: Optional[str] = Field(default=None, max_length=20)
    room_label: str = Field(..., min_length=1, max_length=50, examples=["101"])
    external_code: Optional[str] = Field(
        default=None,
        min_length=3,
        max_length=64,
        description="Printed barcode; generated when omitted",
    )
    description: Optional[str] = Field(default=None, max_length=1000)
    purchase_date: Optional[date] = None
    purchase_cost: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("external_code")
    @classmethod
    def normalize_external_code(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v


class MaintenanceStateUpdate(RequestSchema):
    state: AssetState = Field(..., description="available, in_maintenance or damaged")

    @field_validator("state")
    @classmethod
    def validate_target(cls, v: AssetState) -> AssetState:
        if v not in MAINTENANCE_TARGET_STATES:
            raise ValueError("Occupied can only be set by an assignment")
        return v


class AssetResponse(ResponseSchema):
    category: str
    item_name: str
    location: str
    floor: Optional[str] = None
    room_label: str
    human_label: str
    external_code: str
    public_slug: str
    state: AssetState
    occupant_id: Optional[str] = None
    last_status_change: datetime
    description: Optional[str] = None
    purchase_date: Optional[date] = None
    purchase_cost: Optional[Decimal] = None
    public_url: Optional[str] = None


class OccupancySummary(BaseSchema):
    category: Optional[str] = None
    total: int
    occupied: int
    available: int
    in_maintenance: int
    damaged: int
