from hostel_allocation.models.inventory.asset import Asset

__all__ = ["Asset"]
