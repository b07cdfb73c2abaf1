"""
Side-effect dispatcher for committed allocation changes.

Turns an AllocationChange into one audit entry plus best-effort
notifications on a worker pool. Nothing here can fail or roll back the
allocation that produced the change: every error ends as a log line and a
failure counter.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_for_futures
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set

from hostel_allocation.config.database import Database
from hostel_allocation.config.logging import get_logger
from hostel_allocation.config.settings import Settings
from hostel_allocation.core.monitoring import audit_failures, notification_failures
from hostel_allocation.models.base.enums import AuditTargetType, NotificationCategory
from hostel_allocation.schemas.allocation.allocation import (
    AllocationChange,
    AuditEntry,
    NotificationMessage,
)
from hostel_allocation.services.allocation.sinks import (
    AuditSink,
    NotificationSink,
    SqlAuditSink,
    SqlNotificationSink,
)

logger = get_logger(__name__)


@dataclass
class DispatchOutcome:
    """Result of one dispatch, carried by its Future."""

    audit_written: bool = False
    notifications_sent: int = 0
    notifications_failed: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.audit_written and self.notifications_failed == 0


class SideEffectDispatcher:
    """
    Fire-and-forget delivery of audit entries and notifications with:
    - Bounded worker pool, callers never block
    - Per-write retries with linear backoff
    - Audit and notification failures isolated from each other
    - flush/shutdown for orderly draining
    """

    def __init__(
        self,
        audit_sink: AuditSink,
        notification_sink: NotificationSink,
        max_workers: int = 4,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        notifications_enabled: bool = True,
        link_builder: Optional[Callable[[str], str]] = None,
    ):
        self.audit_sink = audit_sink
        self.notification_sink = notification_sink
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.notifications_enabled = notifications_enabled
        self.link_builder = link_builder

        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="side-effects",
        )
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, database: Database, config: Settings) -> "SideEffectDispatcher":
        return cls(
            audit_sink=SqlAuditSink(database),
            notification_sink=SqlNotificationSink(database),
            max_workers=config.SIDE_EFFECT_WORKERS,
            max_retries=config.SIDE_EFFECT_MAX_RETRIES,
            retry_delay=config.SIDE_EFFECT_RETRY_DELAY,
            notifications_enabled=config.NOTIFICATIONS_ENABLED,
            link_builder=config.resident_room_url,
        )

    # -------------------------------------------------------------------------
    # Dispatching
    # -------------------------------------------------------------------------

    def dispatch(self, change: AllocationChange) -> "Future[DispatchOutcome]":
        """Queue the audit entry and resident notification for a committed change."""
        return self.submit(
            self.build_audit_entry(change),
            [self.build_notification(change)],
        )

    def submit(
        self,
        entry: AuditEntry,
        notifications: Sequence[NotificationMessage] = (),
    ) -> "Future[DispatchOutcome]":
        """Queue an arbitrary audit entry with its notifications."""
        future = self._executor.submit(self._deliver, entry, list(notifications))
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _deliver(
        self,
        entry: AuditEntry,
        notifications: List[NotificationMessage],
    ) -> DispatchOutcome:
        outcome = DispatchOutcome()

        try:
            self._with_retries(lambda: self.audit_sink.append(entry), "audit append")
            outcome.audit_written = True
        except Exception as e:
            audit_failures.inc()
            outcome.errors.append(f"audit: {e}")
            logger.error(
                f"Audit entry lost after {self.max_retries} attempts: {e}",
                extra={
                    "audit_id": entry.id,
                    "action": entry.action,
                    "target_id": entry.target_id,
                },
            )

        if not self.notifications_enabled:
            return outcome

        for notification in notifications:
            try:
                self._with_retries(
                    lambda n=notification: self.notification_sink.enqueue(n),
                    "notification enqueue",
                )
                outcome.notifications_sent += 1
            except Exception as e:
                notification_failures.inc()
                outcome.notifications_failed += 1
                outcome.errors.append(f"notification: {e}")
                logger.error(
                    f"Notification to {notification.recipient_id} dropped: {e}",
                    extra={"recipient_id": notification.recipient_id},
                )

        return outcome

    def _with_retries(self, operation: Callable[[], None], label: str) -> None:
        attempts = 0
        while True:
            try:
                operation()
                return
            except Exception as e:
                attempts += 1
                if attempts >= self.max_retries:
                    raise
                logger.warning(
                    f"{label} failed (attempt {attempts}/{self.max_retries}): {e}",
                    extra={"attempt": attempts, "error": str(e)},
                )
                time.sleep(self.retry_delay * attempts)

    # -------------------------------------------------------------------------
    # Payload construction
    # -------------------------------------------------------------------------

    def build_audit_entry(self, change: AllocationChange) -> AuditEntry:
        return AuditEntry(
            timestamp=change.timestamp,
            actor_id=change.actor_id,
            action=change.action,
            target_type=AuditTargetType.RESIDENT,
            target_id=change.resident_id,
            description=self._describe(change),
            details={
                "previous_asset_id": change.previous_asset_id,
                "new_asset_id": change.new_asset_id,
                "reason": change.reason.value,
            },
        )

    def build_notification(self, change: AllocationChange) -> NotificationMessage:
        if change.new_asset_id is None:
            message = "Your bed assignment has been released."
        elif change.previous_asset_id is None:
            message = "You have been assigned a bed."
        else:
            message = "Your bed assignment has changed."

        return NotificationMessage(
            recipient_id=change.resident_id,
            message=message,
            category=NotificationCategory.ALLOCATION,
            link=self.link_builder(change.resident_id) if self.link_builder else None,
        )

    @staticmethod
    def _describe(change: AllocationChange) -> str:
        if change.new_asset_id is None:
            return (
                f"Resident {change.resident_id} released asset "
                f"{change.previous_asset_id} ({change.reason.value})"
            )
        if change.previous_asset_id is None:
            return (
                f"Resident {change.resident_id} assigned asset "
                f"{change.new_asset_id} ({change.reason.value})"
            )
        return (
            f"Resident {change.resident_id} moved from {change.previous_asset_id} "
            f"to {change.new_asset_id} ({change.reason.value})"
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for in-flight dispatches. Returns False if some are still running."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait_for_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        logger.info("Shutting down side-effect dispatcher")
        self._executor.shutdown(wait=wait)
