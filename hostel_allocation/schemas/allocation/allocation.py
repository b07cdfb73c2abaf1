"""
Allocation schemas: the committed-change fact record, side-effect payloads
and the API request/response bodies.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import Field, model_validator

from hostel_allocation.models.base.base_model import utcnow
from hostel_allocation.models.base.enums import (
    AllocationReason,
    AuditTargetType,
    NotificationCategory,
)
from hostel_allocation.schemas.common.base import BaseSchema, FrozenSchema, RequestSchema
from hostel_allocation.schemas.inventory.asset import AssetResponse
from hostel_allocation.schemas.resident.resident import ResidentResponse

__all__ = [
    "AllocationChange",
    "AuditEntry",
    "NotificationMessage",
    "AssignRequest",
    "ReleaseRequest",
    "SwapRequest",
    "AllocationResponse",
    "SwapResponse",
]


class AllocationChange(FrozenSchema):
    """
    Fact record of one committed binding change.

    new_asset_id is None for a release; previous_asset_id is None for a
    first assignment.
    """

    timestamp: datetime = Field(default_factory=utcnow)
    resident_id: str
    previous_asset_id: Optional[str] = None
    new_asset_id: Optional[str] = None
    actor_id: str
    reason: AllocationReason

    @property
    def action(self) -> str:
        if self.new_asset_id is None:
            return "asset_released"
        if self.previous_asset_id is None:
            return "asset_assigned"
        return "asset_moved"


class AuditEntry(FrozenSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=utcnow)
    actor_id: str
    action: str
    target_type: AuditTargetType
    target_id: str
    description: str
    details: Dict[str, Any] = Field(default_factory=dict)


class NotificationMessage(FrozenSchema):
    recipient_id: str
    message: str
    category: NotificationCategory = NotificationCategory.ALLOCATION
    link: Optional[str] = None


# ============================================================================
# API BODIES
# ============================================================================


class AssignRequest(RequestSchema):
    resident_id: str = Field(..., min_length=1)
    asset_id: str = Field(..., min_length=1)


class ReleaseRequest(RequestSchema):
    resident_id: str = Field(..., min_length=1)


class SwapRequest(RequestSchema):
    first_resident_id: str = Field(..., min_length=1)
    second_resident_id: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_distinct(self) -> "SwapRequest":
        if self.first_resident_id == self.second_resident_id:
            raise ValueError("A resident cannot be swapped with themself")
        return self


class AllocationResponse(BaseSchema):
    resident: ResidentResponse
    asset: Optional[AssetResponse] = None
    previous_asset_id: Optional[str] = None
    changed: bool = True


class SwapResponse(BaseSchema):
    residents: List[ResidentResponse]
    assets: List[AssetResponse]
