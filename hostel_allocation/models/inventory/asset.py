"""
Allocatable asset model (beds and furniture).

The pair (state, occupant_id) is a single fact stored in two columns;
the check constraint keeps them from disagreeing.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    inspect,
)
from sqlalchemy.orm import Mapped, mapped_column, validates

from hostel_allocation.models.base.base_model import BaseModel, TimestampModel, utcnow
from hostel_allocation.models.base.enums import AssetState

__all__ = ["Asset", "asset_state_type"]

asset_state_type = SAEnum(
    AssetState,
    name="asset_state",
    native_enum=False,
    length=32,
    values_callable=lambda states: [s.value for s in states],
    validate_strings=True,
)


class Asset(BaseModel, TimestampModel):
    """
    Inventory item that can be held by at most one resident.

    external_code is the printed scan code; public_slug is the short
    identifier embedded in the public QR landing URL. Both are unique and
    cannot change once assigned.
    """

    __tablename__ = "assets"
    __table_args__ = (
        CheckConstraint(
            "(state = 'occupied') = (occupant_id IS NOT NULL)",
            name="occupancy_mirrors_state",
        ),
        Index("ix_assets_category_state", "category", "state"),
    )

    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    item_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Human label: where the item physically is
    location: Mapped[str] = mapped_column(String(100), nullable=False)
    floor: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    room_label: Mapped[str] = mapped_column(String(50), nullable=False)

    external_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    public_slug: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    state: Mapped[AssetState] = mapped_column(
        asset_state_type,
        nullable=False,
        default=AssetState.AVAILABLE,
        index=True,
    )
    occupant_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("residents.id", use_alter=True, name="fk_assets_occupant_id_residents"),
        nullable=True,
        index=True,
    )
    last_status_change: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    purchase_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    purchase_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    @validates("external_code", "public_slug")
    def _validate_immutable_identifier(self, key: str, value: str) -> str:
        current = getattr(self, key)
        if inspect(self).persistent and current is not None and value != current:
            raise ValueError(f"{key} cannot be changed once assigned")
        return value

    @property
    def human_label(self) -> str:
        parts = [self.location]
        if self.floor:
            parts.append(f"Floor {self.floor}")
        parts.append(f"Room {self.room_label}")
        return " / ".join(parts)

    @property
    def is_occupied(self) -> bool:
        return self.occupant_id is not None

    def __repr__(self) -> str:
        return f"<Asset(id={self.id}, code={self.external_code}, state={self.state})>"
