from hostel_allocation.schemas.allocation.allocation import (
    AllocationChange,
    AllocationResponse,
    AssignRequest,
    AuditEntry,
    NotificationMessage,
    ReleaseRequest,
    SwapRequest,
    SwapResponse,
)

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
