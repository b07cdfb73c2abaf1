from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from hostel_allocation.api.deps import get_actor_id, get_asset_service, get_settings
from hostel_allocation.api.v1.responses import asset_response
from hostel_allocation.config.settings import Settings
from hostel_allocation.schemas.inventory.asset import (
    AssetCreate,
    AssetResponse,
    MaintenanceStateUpdate,
    OccupancySummary,
)
from hostel_allocation.services.inventory.asset_service import AssetService

router = APIRouter(prefix="/assets", tags=["Assets"])


@router.post("", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
def create_asset(
    payload: AssetCreate,
    service: AssetService = Depends(get_asset_service),
    config: Settings = Depends(get_settings),
    actor_id: str = Depends(get_actor_id),
):
    asset = service.create_asset(payload, actor_id)
    return asset_response(asset, config)


@router.get("/available", response_model=List[AssetResponse])
def list_available_assets(
    category: Optional[str] = Query(default=None),
    location: Optional[str] = Query(default=None),
    floor: Optional[str] = Query(default=None),
    room_label: Optional[str] = Query(default=None),
    item_name: Optional[str] = Query(default=None, description="Case-insensitive substring"),
    service: AssetService = Depends(get_asset_service),
    config: Settings = Depends(get_settings),
):
    assets = service.list_available(
        category=category,
        location=location,
        floor=floor,
        room_label=room_label,
        item_name=item_name,
    )
    return [asset_response(a, config) for a in assets]


@router.get("/summary", response_model=OccupancySummary)
def occupancy_summary(
    category: Optional[str] = Query(default=None),
    service: AssetService = Depends(get_asset_service),
):
    return OccupancySummary(category=category, **service.occupancy_summary(category))


@router.get("/by-code/{external_code}", response_model=AssetResponse)
def get_asset_by_code(
    external_code: str,
    service: AssetService = Depends(get_asset_service),
    config: Settings = Depends(get_settings),
):
    return asset_response(service.get_by_external_code(external_code), config)


@router.get("/by-slug/{public_slug}", response_model=AssetResponse)
def get_asset_by_slug(
    public_slug: str,
    service: AssetService = Depends(get_asset_service),
    config: Settings = Depends(get_settings),
):
    return asset_response(service.get_by_public_slug(public_slug), config)


@router.get("/{asset_id}", response_model=AssetResponse)
def get_asset(
    asset_id: str,
    service: AssetService = Depends(get_asset_service),
    config: Settings = Depends(get_settings),
):
    return asset_response(service.get_asset(asset_id), config)


@router.get("/{asset_id}/qr", response_class=Response)
def get_asset_qr_label(
    asset_id: str,
    service: AssetService = Depends(get_asset_service),
):
    return Response(content=service.qr_label(asset_id), media_type="image/png")


@router.patch("/{asset_id}/maintenance", response_model=AssetResponse)
def set_maintenance_state(
    asset_id: str,
    payload: MaintenanceStateUpdate,
    service: AssetService = Depends(get_asset_service),
    config: Settings = Depends(get_settings),
    actor_id: str = Depends(get_actor_id),
):
    asset = service.set_maintenance_state(asset_id, payload.state, actor_id)
    return asset_response(asset, config)


@router.delete("/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
def retire_asset(
    asset_id: str,
    service: AssetService = Depends(get_asset_service),
    actor_id: str = Depends(get_actor_id),
):
    service.retire_asset(asset_id, actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
