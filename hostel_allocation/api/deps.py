"""
FastAPI dependencies.

The database, dispatcher and settings live on app.state; they are created
once by the application factory and handed to services per request.
"""

from typing import Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from hostel_allocation.config.database import Database
from hostel_allocation.config.settings import Settings
from hostel_allocation.services.allocation.assignment_coordinator import (
    SYSTEM_ACTOR,
    AssignmentCoordinator,
)
from hostel_allocation.services.allocation.side_effect_dispatcher import SideEffectDispatcher
from hostel_allocation.services.inventory.asset_service import AssetService
from hostel_allocation.services.resident.resident_service import ResidentService


# --- Application state ---------------------------------------------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_dispatcher(request: Request) -> SideEffectDispatcher:
    return request.app.state.dispatcher


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    db = database.session()
    try:
        yield db
    finally:
        db.close()


# --- Caller identity -----------------------------------------------------------

def get_actor_id(x_actor_id: Optional[str] = Header(default=None)) -> str:
    """Actor recorded in audit entries; authentication happens upstream."""
    if x_actor_id and x_actor_id.strip():
        return x_actor_id.strip()[:64]
    return SYSTEM_ACTOR


# --- Services ------------------------------------------------------------------

def get_asset_service(
    db: Session = Depends(get_db),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
    config: Settings = Depends(get_settings),
) -> AssetService:
    return AssetService(db, dispatcher, config)


def get_coordinator(
    db: Session = Depends(get_db),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
) -> AssignmentCoordinator:
    return AssignmentCoordinator(db, dispatcher)


def get_resident_service(
    db: Session = Depends(get_db),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
) -> ResidentService:
    return ResidentService(db, dispatcher)
