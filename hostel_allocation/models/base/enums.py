"""
Shared enumerations for models and schemas.
"""

import enum


class AssetState(str, enum.Enum):
    """Lifecycle state of an allocatable asset."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    IN_MAINTENANCE = "in_maintenance"
    DAMAGED = "damaged"


# States an administrator may set directly; OCCUPIED is reserved to the coordinator.
MAINTENANCE_TARGET_STATES = frozenset(
    {AssetState.AVAILABLE, AssetState.IN_MAINTENANCE, AssetState.DAMAGED}
)


class AllocationReason(str, enum.Enum):
    """Why an allocation change happened."""
    ASSIGN = "assign"
    MOVE = "move"
    RELEASE = "release"
    SWAP = "swap"
    CHECKOUT = "checkout"
    REMOVAL = "removal"
    MAINTENANCE = "maintenance"


class AuditTargetType(str, enum.Enum):
    RESIDENT = "Resident"
    ASSET = "Asset"


class NotificationCategory(str, enum.Enum):
    ALLOCATION = "allocation"
