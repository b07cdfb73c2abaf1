from hostel_allocation.schemas.inventory.asset import (
    AssetCreate,
    AssetResponse,
    MaintenanceStateUpdate,
    OccupancySummary,
)

__all__ = ["AssetCreate", "AssetResponse", "MaintenanceStateUpdate", "OccupancySummary"]
