from hostel_allocation.repositories.inventory.asset_registry import AssetRegistry

__all__ = ["AssetRegistry"]
