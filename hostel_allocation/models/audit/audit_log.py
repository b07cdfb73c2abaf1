"""
Append-only audit log.

Rows are written once by the audit sink and never updated or deleted
through the ORM; the mapper listeners below enforce that.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from hostel_allocation.models.base.base_model import BaseModel, utcnow

__all__ = ["AuditLog", "AuditLogImmutableError"]


class AuditLogImmutableError(RuntimeError):
    """Raised when code tries to modify or delete a written audit row."""


class AuditLog(BaseModel):
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_target", "target_type", "target_id"),
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )
    actor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    target_type: Mapped[str] = mapped_column(String(32), nullable=False)
    target_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)


@event.listens_for(AuditLog, "before_update")
def _reject_audit_update(mapper, connection, target):
    raise AuditLogImmutableError(f"Audit entry {target.id} is immutable")


@event.listens_for(AuditLog, "before_delete")
def _reject_audit_delete(mapper, connection, target):
    raise AuditLogImmutableError(f"Audit entry {target.id} cannot be deleted")
