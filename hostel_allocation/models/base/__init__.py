from hostel_allocation.models.base.base_model import Base, BaseModel, TimestampModel, utcnow
from hostel_allocation.models.base.enums import (
    MAINTENANCE_TARGET_STATES,
    AllocationReason,
    AssetState,
    AuditTargetType,
    NotificationCategory,
)

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "utcnow",
    "AssetState",
    "MAINTENANCE_TARGET_STATES",
    "AllocationReason",
    "AuditTargetType",
    "NotificationCategory",
]
