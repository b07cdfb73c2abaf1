from fastapi import APIRouter, Depends, Response, status

from hostel_allocation.api.deps import get_actor_id, get_resident_service, get_settings
from hostel_allocation.api.v1.responses import allocation_response
from hostel_allocation.config.settings import Settings
from hostel_allocation.schemas.allocation.allocation import AllocationResponse
from hostel_allocation.schemas.resident.resident import ResidentCreate, ResidentResponse
from hostel_allocation.services.resident.resident_service import ResidentService

router = APIRouter(prefix="/residents", tags=["Residents"])


@router.post("", response_model=AllocationResponse, status_code=status.HTTP_201_CREATED)
def enroll_resident(
    payload: ResidentCreate,
    service: ResidentService = Depends(get_resident_service),
    config: Settings = Depends(get_settings),
    actor_id: str = Depends(get_actor_id),
):
    result = service.enroll_resident(payload, actor_id)
    return allocation_response(result, config)


@router.get("/by-code/{external_resident_code}", response_model=ResidentResponse)
def get_resident_by_code(
    external_resident_code: str,
    service: ResidentService = Depends(get_resident_service),
):
    return service.get_by_external_code(external_resident_code)


@router.get("/{resident_id}", response_model=ResidentResponse)
def get_resident(
    resident_id: str,
    service: ResidentService = Depends(get_resident_service),
):
    return service.get_resident(resident_id)


@router.post("/{resident_id}/checkout", response_model=AllocationResponse)
def checkout_resident(
    resident_id: str,
    service: ResidentService = Depends(get_resident_service),
    config: Settings = Depends(get_settings),
    actor_id: str = Depends(get_actor_id),
):
    result = service.checkout_resident(resident_id, actor_id)
    return allocation_response(result, config)


@router.delete("/{resident_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_resident(
    resident_id: str,
    service: ResidentService = Depends(get_resident_service),
    actor_id: str = Depends(get_actor_id),
):
    service.remove_resident(resident_id, actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
