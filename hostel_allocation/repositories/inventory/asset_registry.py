"""
Asset registry: authoritative store of allocatable assets and their state.

Every state transition is a single conditional UPDATE whose row count
decides the outcome. The registry never reads a row and then writes it
back, so two processes sharing the database cannot both win a claim.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hostel_allocation.config.logging import get_logger
from hostel_allocation.core.exceptions import (
    AssetNotFoundError,
    AssetOccupiedError,
    ConflictError,
    DuplicateEntryError,
    StorageError,
    ValidationError,
)
from hostel_allocation.models.base.base_model import utcnow
from hostel_allocation.models.base.enums import MAINTENANCE_TARGET_STATES, AssetState
from hostel_allocation.models.inventory.asset import Asset
from hostel_allocation.repositories.base.base_repository import BaseRepository
from hostel_allocation.utils.identifiers import IDGenerator

logger = get_logger(__name__)


class AssetRegistry(BaseRepository[Asset]):
    """
    Repository for Asset records.

    Handles:
    - Asset creation with identifier collision checks
    - Atomic claim (try_reserve) and release
    - Maintenance state changes on unoccupied assets
    - Pass-through lookups and availability listings
    """

    def __init__(self, session: Session, slug_length: int = 10, max_identifier_attempts: int = 5):
        super().__init__(Asset, session)
        self.slug_length = slug_length
        self.max_identifier_attempts = max_identifier_attempts

    # ============================================================================
    # CREATION
    # ============================================================================

    def create_asset(self, data: Dict[str, Any]) -> Asset:
        """
        Create an asset in Available state.

        A caller-supplied external_code must be unused. Missing identifiers
        are generated and re-rolled on collision.
        """
        data = dict(data)
        data.pop("state", None)
        data.pop("occupant_id", None)

        external_code = data.get("external_code")
        if external_code:
            if self.exists({"external_code": external_code}):
                raise DuplicateEntryError("external_code", external_code)
        else:
            data["external_code"] = self._unique_identifier(
                "external_code",
                lambda: IDGenerator.generate_external_code(data.get("category", "")),
            )

        data["public_slug"] = self._unique_identifier(
            "public_slug",
            lambda: IDGenerator.generate_public_slug(self.slug_length),
        )
        data["state"] = AssetState.AVAILABLE
        data["occupant_id"] = None

        try:
            asset = self.create(data)
        except IntegrityError as e:
            # Lost a race against a concurrent insert of the same identifier
            raise DuplicateEntryError(
                "external_code",
                data["external_code"],
                message="Asset identifier already in use",
            ) from e

        logger.info(
            f"Asset created: {asset.external_code}",
            extra={"asset_id": asset.id, "category": asset.category},
        )
        return asset

    def _unique_identifier(self, field: str, generate) -> str:
        for _ in range(self.max_identifier_attempts):
            candidate = generate()
            if not self.exists({field: candidate}):
                return candidate
        raise StorageError(
            f"Could not generate a unique {field}",
            operation="create_asset",
        )

    # ============================================================================
    # LOOKUPS
    # ============================================================================

    def get(self, asset_id: str) -> Asset:
        asset = self.find_by_id(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset

    def get_by_external_code(self, external_code: str) -> Asset:
        asset = self.find_one_by({"external_code": external_code})
        if asset is None:
            raise AssetNotFoundError(message=f"Asset not found (code: {external_code})")
        return asset

    def get_by_public_slug(self, public_slug: str) -> Asset:
        asset = self.find_one_by({"public_slug": public_slug})
        if asset is None:
            raise AssetNotFoundError(message=f"Asset not found (slug: {public_slug})")
        return asset

    def list_available(
        self,
        category: Optional[str] = None,
        location: Optional[str] = None,
        floor: Optional[str] = None,
        room_label: Optional[str] = None,
        item_name: Optional[str] = None,
    ) -> List[Asset]:
        """
        Find available assets with filters.

        item_name matches case-insensitively as a substring.
        """
        query = select(Asset).where(Asset.state == AssetState.AVAILABLE)

        if category:
            query = query.where(Asset.category == category)
        if location:
            query = query.where(Asset.location == location)
        if floor:
            query = query.where(Asset.floor == floor)
        if room_label:
            query = query.where(Asset.room_label == room_label)
        if item_name:
            query = query.where(func.lower(Asset.item_name).contains(item_name.lower()))

        query = query.order_by(Asset.location, Asset.floor, Asset.room_label, Asset.external_code)
        return list(self.session.execute(query).scalars().all())

    def occupancy_summary(self, category: Optional[str] = None) -> Dict[str, int]:
        query = select(Asset.state, func.count(Asset.id)).group_by(Asset.state)
        if category:
            query = query.where(Asset.category == category)

        counts = {state: 0 for state in AssetState}
        for state, count in self.session.execute(query).all():
            counts[AssetState(state)] = count

        return {
            "total": sum(counts.values()),
            "occupied": counts[AssetState.OCCUPIED],
            "available": counts[AssetState.AVAILABLE],
            "in_maintenance": counts[AssetState.IN_MAINTENANCE],
            "damaged": counts[AssetState.DAMAGED],
        }

    # ============================================================================
    # STATE TRANSITIONS
    # ============================================================================

    def try_reserve(
        self,
        asset_id: str,
        occupant_id: str,
        expected_state: AssetState = AssetState.AVAILABLE,
    ) -> Asset:
        """
        Claim an asset for occupant_id if it is currently in expected_state.

        This is the only path that marks an asset Occupied.

        Raises:
            AssetNotFoundError: unknown asset id
            ConflictError: the asset was not in expected_state when the
                conditional update ran
            IntegrityError: occupant_id does not reference a resident
        """
        if expected_state == AssetState.OCCUPIED:
            raise ValidationError("An occupied asset cannot be reserved")

        now = utcnow()
        stmt = (
            update(Asset)
            .where(Asset.id == asset_id, Asset.state == expected_state)
            .values(
                state=AssetState.OCCUPIED,
                occupant_id=occupant_id,
                last_status_change=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        matched = self.execute_guarded(stmt, "try_reserve")

        if matched != 1:
            self.get(asset_id)
            logger.info(
                f"Reservation conflict on asset {asset_id}",
                extra={"asset_id": asset_id, "occupant_id": occupant_id},
            )
            raise ConflictError(asset_id, expected_state.value)

        return self.get(asset_id)

    def release(self, asset_id: str, expected_occupant_id: Optional[str] = None) -> Asset:
        """
        Set an occupied asset back to Available and clear its occupant.

        Idempotent: releasing an asset that is not occupied is a no-op.
        When expected_occupant_id is given, the asset is released only if
        that resident still holds it; a different holder is a conflict.
        """
        now = utcnow()
        conditions = [Asset.id == asset_id, Asset.state == AssetState.OCCUPIED]
        if expected_occupant_id is not None:
            conditions.append(Asset.occupant_id == expected_occupant_id)

        stmt = (
            update(Asset)
            .where(*conditions)
            .values(
                state=AssetState.AVAILABLE,
                occupant_id=None,
                last_status_change=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        matched = self.execute_guarded(stmt, "release")

        asset = self.get(asset_id)
        if matched != 1 and expected_occupant_id is not None and asset.occupant_id is not None:
            raise ConflictError(
                asset_id,
                AssetState.OCCUPIED.value,
                message=f"Asset {asset_id} is held by another resident",
            )
        return asset

    def set_maintenance_state(self, asset_id: str, state: AssetState) -> Asset:
        """
        Move an unoccupied asset between Available, InMaintenance and Damaged.

        Raises:
            ValidationError: state is not a maintenance target
            AssetOccupiedError: the asset has an occupant (never mutated)
        """
        state = AssetState(state)
        if state not in MAINTENANCE_TARGET_STATES:
            raise ValidationError(
                f"Cannot set state {state.value} directly",
                field_errors={"state": [f"must be one of {sorted(s.value for s in MAINTENANCE_TARGET_STATES)}"]},
            )

        now = utcnow()
        stmt = (
            update(Asset)
            .where(Asset.id == asset_id, Asset.occupant_id.is_(None))
            .values(state=state, last_status_change=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        matched = self.execute_guarded(stmt, "set_maintenance_state")

        asset = self.get(asset_id)
        if matched != 1:
            raise AssetOccupiedError(asset_id, asset.occupant_id)
        return asset

    def delete_asset(self, asset_id: str) -> None:
        """Hard delete, allowed only while the asset has no occupant."""
        stmt = (
            delete(Asset)
            .where(Asset.id == asset_id, Asset.occupant_id.is_(None))
            .execution_options(synchronize_session=False)
        )
        matched = self.execute_guarded(stmt, "delete_asset")
        if matched != 1:
            asset = self.get(asset_id)
            raise AssetOccupiedError(asset_id, asset.occupant_id)
