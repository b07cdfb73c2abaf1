from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST

from hostel_allocation import __version__
from hostel_allocation.api.deps import get_database, get_dispatcher
from hostel_allocation.config.database import Database
from hostel_allocation.core.monitoring import render_metrics
from hostel_allocation.services.allocation.side_effect_dispatcher import SideEffectDispatcher

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(
    response: Response,
    database: Database = Depends(get_database),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
):
    db_status = database.check_connection()
    healthy = db_status["is_connected"]
    if not healthy:
        response.status_code = 503
    return {
        "status": "healthy" if healthy else "unhealthy",
        "version": __version__,
        "database": db_status,
        "pending_side_effects": dispatcher.pending_count,
    }


@router.get("/metrics")
def metrics():
    return Response(content=render_metrics(), media_type=CONTENT_TYPE_LATEST)
