"""
Resident model.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from hostel_allocation.models.base.base_model import BaseModel, TimestampModel

__all__ = ["Resident"]


class Resident(BaseModel, TimestampModel):
    """
    A person enrolled in the hostel. Holds at most one asset.

    assigned_asset_id is written only by the assignment coordinator and
    mirrors Asset.occupant_id.
    """

    __tablename__ = "residents"

    external_resident_code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    admission_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    assigned_asset_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("assets.id"),
        nullable=True,
        unique=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    checked_out_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Resident(id={self.id}, code={self.external_resident_code}, asset={self.assigned_asset_id})>"
