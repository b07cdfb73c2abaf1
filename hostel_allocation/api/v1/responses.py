"""
ORM to response-schema conversion shared by the endpoint modules.
"""

from typing import Optional

from hostel_allocation.config.settings import Settings
from hostel_allocation.models.inventory.asset import Asset
from hostel_allocation.schemas.allocation.allocation import AllocationResponse
from hostel_allocation.schemas.inventory.asset import AssetResponse
from hostel_allocation.schemas.resident.resident import ResidentResponse
from hostel_allocation.services.allocation.assignment_coordinator import AllocationResult


def asset_response(asset: Asset, config: Settings) -> AssetResponse:
    response = AssetResponse.model_validate(asset)
    return response.model_copy(update={"public_url": config.public_asset_url(asset.public_slug)})


def allocation_response(result: AllocationResult, config: Settings) -> AllocationResponse:
    """
    The asset is the one now held, or for a release the one just freed.
    """
    asset: Optional[Asset] = result.asset if result.asset is not None else result.previous_asset
    return AllocationResponse(
        resident=ResidentResponse.model_validate(result.resident),
        asset=asset_response(asset, config) if asset is not None else None,
        previous_asset_id=result.previous_asset.id if result.previous_asset is not None else None,
        changed=result.changed,
    )
