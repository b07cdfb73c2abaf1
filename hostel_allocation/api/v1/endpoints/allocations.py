"""
Allocation endpoints: thin wrappers around the assignment coordinator.
"""

from fastapi import APIRouter, Depends

from hostel_allocation.api.deps import get_actor_id, get_coordinator, get_settings
from hostel_allocation.api.v1.responses import allocation_response, asset_response
from hostel_allocation.config.settings import Settings
from hostel_allocation.schemas.allocation.allocation import (
    AllocationResponse,
    AssignRequest,
    ReleaseRequest,
    SwapRequest,
    SwapResponse,
)
from hostel_allocation.schemas.resident.resident import ResidentResponse
from hostel_allocation.services.allocation.assignment_coordinator import AssignmentCoordinator

router = APIRouter(prefix="/allocations", tags=["Allocations"])


@router.post("/assign", response_model=AllocationResponse)
def assign_asset(
    payload: AssignRequest,
    coordinator: AssignmentCoordinator = Depends(get_coordinator),
    config: Settings = Depends(get_settings),
    actor_id: str = Depends(get_actor_id),
):
    result = coordinator.assign(payload.resident_id, payload.asset_id, actor_id)
    return allocation_response(result, config)


@router.post("/release", response_model=AllocationResponse)
def release_asset(
    payload: ReleaseRequest,
    coordinator: AssignmentCoordinator = Depends(get_coordinator),
    config: Settings = Depends(get_settings),
    actor_id: str = Depends(get_actor_id),
):
    result = coordinator.release(payload.resident_id, actor_id)
    return allocation_response(result, config)


@router.post("/swap", response_model=SwapResponse)
def swap_assets(
    payload: SwapRequest,
    coordinator: AssignmentCoordinator = Depends(get_coordinator),
    config: Settings = Depends(get_settings),
    actor_id: str = Depends(get_actor_id),
):
    first, second = coordinator.swap(payload.first_resident_id, payload.second_resident_id, actor_id)
    return SwapResponse(
        residents=[ResidentResponse.model_validate(r.resident) for r in (first, second)],
        assets=[asset_response(r.asset, config) for r in (first, second)],
    )
