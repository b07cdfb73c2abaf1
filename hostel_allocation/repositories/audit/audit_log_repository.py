"""
Audit log repository. Rows are append-only, so the only write is append.
"""

from typing import Any, Dict

from sqlalchemy.orm import Session

from hostel_allocation.models.audit.audit_log import AuditLog
from hostel_allocation.repositories.base.base_repository import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):

    def __init__(self, session: Session):
        super().__init__(AuditLog, session)

    def append(self, data: Dict[str, Any]) -> AuditLog:
        return self.create(data)

