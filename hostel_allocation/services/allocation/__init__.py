from hostel_allocation.services.allocation.assignment_coordinator import (
    AllocationResult,
    AssignmentCoordinator,
)
from hostel_allocation.services.allocation.side_effect_dispatcher import (
    DispatchOutcome,
    SideEffectDispatcher,
)
from hostel_allocation.services.allocation.sinks import (
    AuditSink,
    NotificationSink,
    SqlAuditSink,
    SqlNotificationSink,
)

__all__ = [
    "AllocationResult",
    "AssignmentCoordinator",
    "DispatchOutcome",
    "SideEffectDispatcher",
    "AuditSink",
    "NotificationSink",
    "SqlAuditSink",
    "SqlNotificationSink",
]
