"""
Asset administration service.

Creation, lookups, availability listings and maintenance state changes.
Occupancy is never changed here; that belongs to the assignment
coordinator.
"""

from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from hostel_allocation.config.settings import Settings, settings as default_settings
from hostel_allocation.models.base.enums import AllocationReason, AssetState, AuditTargetType
from hostel_allocation.models.inventory.asset import Asset
from hostel_allocation.repositories.inventory.asset_registry import AssetRegistry
from hostel_allocation.schemas.allocation.allocation import AuditEntry
from hostel_allocation.schemas.inventory.asset import AssetCreate
from hostel_allocation.services.allocation.side_effect_dispatcher import SideEffectDispatcher
from hostel_allocation.services.base.base_service import BaseService
from hostel_allocation.utils.qr import render_qr_png


class AssetService(BaseService):

    def __init__(
        self,
        session: Session,
        dispatcher: SideEffectDispatcher,
        config: Optional[Settings] = None,
    ):
        super().__init__(session)
        self.config = config or default_settings
        self.dispatcher = dispatcher
        self.assets = AssetRegistry(
            session,
            slug_length=self.config.PUBLIC_SLUG_LENGTH,
            max_identifier_attempts=self.config.IDENTIFIER_MAX_ATTEMPTS,
        )

    # -------------------------------------------------------------------------
    # Creation / retirement
    # -------------------------------------------------------------------------

    def create_asset(self, request: AssetCreate, actor_id: str) -> Asset:
        with self.transaction("create_asset") as ctx:
            asset = self.assets.create_asset(request.model_dump(exclude_none=True))
            entry = AuditEntry(
                actor_id=actor_id,
                action="asset_created",
                target_type=AuditTargetType.ASSET,
                target_id=asset.id,
                description=f"Asset {asset.external_code} created ({asset.human_label})",
                details={
                    "external_code": asset.external_code,
                    "public_slug": asset.public_slug,
                    "category": asset.category,
                },
            )
            ctx.after_commit(lambda: self.dispatcher.submit(entry))
        return asset

    def retire_asset(self, asset_id: str, actor_id: str) -> None:
        """Hard delete an unoccupied asset."""
        with self.transaction("retire_asset") as ctx:
            asset = self.assets.get(asset_id)
            code = asset.external_code
            self.assets.delete_asset(asset_id)
            entry = AuditEntry(
                actor_id=actor_id,
                action="asset_retired",
                target_type=AuditTargetType.ASSET,
                target_id=asset_id,
                description=f"Asset {code} retired",
                details={"external_code": code},
            )
            ctx.after_commit(lambda: self.dispatcher.submit(entry))

        self._logger.info(f"Asset retired: {code}", extra={"asset_id": asset_id})

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_asset(self, asset_id: str) -> Asset:
        return self.assets.get(asset_id)

    def get_by_external_code(self, external_code: str) -> Asset:
        return self.assets.get_by_external_code(external_code.strip().upper())

    def get_by_public_slug(self, public_slug: str) -> Asset:
        return self.assets.get_by_public_slug(public_slug)

    def list_available(
        self,
        category: Optional[str] = None,
        location: Optional[str] = None,
        floor: Optional[str] = None,
        room_label: Optional[str] = None,
        item_name: Optional[str] = None,
    ) -> List[Asset]:
        return self.assets.list_available(
            category=category.strip().lower() if category else None,
            location=location,
            floor=floor,
            room_label=room_label,
            item_name=item_name,
        )

    def occupancy_summary(self, category: Optional[str] = None) -> Dict[str, int]:
        return self.assets.occupancy_summary(category.strip().lower() if category else None)

    def public_url(self, asset: Asset) -> str:
        return self.config.public_asset_url(asset.public_slug)

    def qr_label(self, asset_id: str) -> bytes:
        """PNG QR code encoding the asset's public URL, for printed labels."""
        return render_qr_png(self.public_url(self.assets.get(asset_id)))

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def set_maintenance_state(self, asset_id: str, state: AssetState, actor_id: str) -> Asset:
        """
        Move an unoccupied asset into or out of maintenance.

        Raises:
            AssetOccupiedError: the asset has an occupant; nothing changes
        """
        with self.transaction("set_maintenance_state") as ctx:
            previous_state = self.assets.get(asset_id).state
            asset = self.assets.set_maintenance_state(asset_id, state)
            if asset.state == previous_state:
                return asset

            entry = AuditEntry(
                actor_id=actor_id,
                action="asset_state_changed",
                target_type=AuditTargetType.ASSET,
                target_id=asset.id,
                description=(
                    f"Asset {asset.external_code} moved from "
                    f"{AssetState(previous_state).value} to {asset.state.value}"
                ),
                details={
                    "previous_state": AssetState(previous_state).value,
                    "new_state": asset.state.value,
                    "reason": AllocationReason.MAINTENANCE.value,
                },
            )
            ctx.after_commit(lambda: self.dispatcher.submit(entry))

        self._logger.info(
            f"Asset {asset.external_code} state set to {asset.state.value}",
            extra={"asset_id": asset.id, "state": asset.state.value},
        )
        return asset
