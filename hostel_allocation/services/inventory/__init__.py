from hostel_allocation.services.inventory.asset_service import AssetService

__all__ = ["AssetService"]
