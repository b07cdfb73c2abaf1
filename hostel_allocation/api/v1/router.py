"""
API v1 Router - aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from hostel_allocation.api.v1.endpoints import allocations, assets, health, residents

router = APIRouter(
    responses={
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        503: {"description": "Storage Unavailable"},
    }
)

router.include_router(assets.router)
router.include_router(residents.router)
router.include_router(allocations.router)
router.include_router(health.router)
