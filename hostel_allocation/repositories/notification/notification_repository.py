"""
Notification repository.
"""

from typing import Any, Dict

from sqlalchemy.orm import Session

from hostel_allocation.models.notification.notification import Notification
from hostel_allocation.repositories.base.base_repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):

    def __init__(self, session: Session):
        super().__init__(Notification, session)

    def create_notification(self, data: Dict[str, Any]) -> Notification:
        return self.create(data)

