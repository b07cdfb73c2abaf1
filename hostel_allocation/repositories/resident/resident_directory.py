"""
Resident directory: authoritative store of residents and their asset binding.
"""

from typing import Any, Dict, Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hostel_allocation.config.logging import get_logger
from hostel_allocation.core.exceptions import (
    ConflictError,
    DuplicateEntryError,
    ResidentNotFoundError,
)
from hostel_allocation.models.base.base_model import utcnow
from hostel_allocation.models.resident.resident import Resident
from hostel_allocation.repositories.base.base_repository import BaseRepository

logger = get_logger(__name__)


class ResidentDirectory(BaseRepository[Resident]):
    """
    Repository for Resident records.

    assigned_asset_id is only ever changed through bind_asset, which is
    conditional on the binding the caller last observed.
    """

    def __init__(self, session: Session):
        super().__init__(Resident, session)

    def enroll(self, data: Dict[str, Any]) -> Resident:
        data = dict(data)
        data.pop("assigned_asset_id", None)

        code = data["external_resident_code"]
        if self.exists({"external_resident_code": code}):
            raise DuplicateEntryError("external_resident_code", code)

        try:
            resident = self.create(data)
        except IntegrityError as e:
            raise DuplicateEntryError("external_resident_code", code) from e

        logger.info(
            f"Resident enrolled: {resident.external_resident_code}",
            extra={"resident_id": resident.id},
        )
        return resident

    def get(self, resident_id: str) -> Resident:
        resident = self.find_by_id(resident_id)
        if resident is None:
            raise ResidentNotFoundError(resident_id)
        return resident

    def get_by_external_code(self, code: str) -> Resident:
        resident = self.find_one_by({"external_resident_code": code})
        if resident is None:
            raise ResidentNotFoundError(message=f"Resident not found (code: {code})")
        return resident

    def find_by_asset(self, asset_id: str) -> Optional[Resident]:
        return self.find_one_by({"assigned_asset_id": asset_id})

    def bind_asset(
        self,
        resident_id: str,
        expected_asset_id: Optional[str],
        new_asset_id: Optional[str],
    ) -> Resident:
        """
        Point the resident at new_asset_id if their binding is still
        expected_asset_id.

        Raises:
            ConflictError: the binding changed since it was read
            IntegrityError: another resident already holds new_asset_id
        """
        if expected_asset_id is None:
            current = Resident.assigned_asset_id.is_(None)
        else:
            current = Resident.assigned_asset_id == expected_asset_id

        stmt = (
            update(Resident)
            .where(Resident.id == resident_id, current)
            .values(assigned_asset_id=new_asset_id, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        matched = self.execute_guarded(stmt, "bind_asset")

        if matched != 1:
            self.get(resident_id)
            raise ConflictError(
                new_asset_id or expected_asset_id or "",
                message=f"Resident {resident_id} binding changed concurrently",
            )
        return self.get(resident_id)

    def mark_checked_out(self, resident_id: str) -> Resident:
        now = utcnow()
        stmt = (
            update(Resident)
            .where(Resident.id == resident_id)
            .values(is_active=False, checked_out_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if self.execute_guarded(stmt, "mark_checked_out") != 1:
            raise ResidentNotFoundError(resident_id)
        return self.get(resident_id)

    def remove(self, resident_id: str) -> None:
        """Delete a resident that no longer holds an asset."""
        stmt = (
            delete(Resident)
            .where(Resident.id == resident_id, Resident.assigned_asset_id.is_(None))
            .execution_options(synchronize_session=False)
        )
        if self.execute_guarded(stmt, "remove") != 1:
            resident = self.get(resident_id)
            raise ConflictError(
                resident.assigned_asset_id or "",
                message=f"Resident {resident_id} still holds an asset",
            )
