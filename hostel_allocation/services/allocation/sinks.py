"""
Side-effect sinks: where audit entries and notifications end up.

The dispatcher only knows the two protocols below. The SQL sinks open a
short-lived session per write and never touch the allocation session.
"""

from typing import Protocol

from hostel_allocation.config.database import Database
from hostel_allocation.config.logging import get_logger
from hostel_allocation.repositories.audit.audit_log_repository import AuditLogRepository
from hostel_allocation.repositories.notification.notification_repository import (
    NotificationRepository,
)
from hostel_allocation.schemas.allocation.allocation import AuditEntry, NotificationMessage

logger = get_logger(__name__)


class AuditSink(Protocol):
    def append(self, entry: AuditEntry) -> None:
        ...


class NotificationSink(Protocol):
    def enqueue(self, notification: NotificationMessage) -> None:
        ...


class SqlAuditSink:
    """Writes audit entries to the audit_logs table."""

    def __init__(self, database: Database):
        self.database = database

    def append(self, entry: AuditEntry) -> None:
        with self.database.session_scope() as session:
            AuditLogRepository(session).append({
                "id": entry.id,
                "timestamp": entry.timestamp,
                "actor_id": entry.actor_id,
                "action": entry.action,
                "target_type": entry.target_type.value,
                "target_id": entry.target_id,
                "description": entry.description,
                "details": entry.details,
            })


class SqlNotificationSink:
    """In-app delivery: the notification row is the delivered message."""

    def __init__(self, database: Database):
        self.database = database

    def enqueue(self, notification: NotificationMessage) -> None:
        with self.database.session_scope() as session:
            record = NotificationRepository(session).create_notification({
                "recipient_id": notification.recipient_id,
                "message": notification.message,
                "category": notification.category.value,
                "link": notification.link,
                "delivered": True,
            })
            logger.debug(
                f"Notification queued for {notification.recipient_id}",
                extra={"notification_id": record.id, "category": record.category},
            )
