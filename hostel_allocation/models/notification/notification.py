"""
In-app notification model.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hostel_allocation.models.base.base_model import BaseModel, utcnow

__all__ = ["Notification"]


class Notification(BaseModel):
    __tablename__ = "notifications"

    # No foreign key: a removed resident still receives the removal notice.
    recipient_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    link: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    delivered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
