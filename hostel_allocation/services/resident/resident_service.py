"""
Resident lifecycle service: enrollment, checkout and removal.

Every step that touches an asset binding goes through the assignment
coordinator inside the same transaction as the resident change.
"""

from typing import Optional

from sqlalchemy.orm import Session

from hostel_allocation.models.base.enums import AllocationReason
from hostel_allocation.models.resident.resident import Resident
from hostel_allocation.repositories.resident.resident_directory import ResidentDirectory
from hostel_allocation.schemas.resident.resident import ResidentCreate
from hostel_allocation.services.allocation.assignment_coordinator import (
    SYSTEM_ACTOR,
    AllocationResult,
    AssignmentCoordinator,
)
from hostel_allocation.services.allocation.side_effect_dispatcher import SideEffectDispatcher
from hostel_allocation.services.base.base_service import BaseService


class ResidentService(BaseService):

    def __init__(
        self,
        session: Session,
        dispatcher: SideEffectDispatcher,
        coordinator: Optional[AssignmentCoordinator] = None,
    ):
        super().__init__(session)
        self.residents = ResidentDirectory(session)
        self.coordinator = coordinator or AssignmentCoordinator(
            session,
            dispatcher,
            residents=self.residents,
        )

    def enroll_resident(self, request: ResidentCreate, actor_id: str = SYSTEM_ACTOR) -> AllocationResult:
        """
        Create a resident, optionally assigning request.asset_id.

        Both happen in one transaction: if the asset is unavailable the
        resident is not created either.
        """
        data = request.model_dump(exclude_none=True, exclude={"asset_id"})

        def body(ctx) -> AllocationResult:
            resident = self.residents.enroll(data)
            if request.asset_id is None:
                return AllocationResult(resident=resident)
            return self.coordinator.assign_in(ctx, resident.id, request.asset_id, actor_id)

        return self.coordinator.run("enroll", request.asset_id, body)

    def get_resident(self, resident_id: str) -> Resident:
        return self.residents.get(resident_id)

    def get_by_external_code(self, code: str) -> Resident:
        return self.residents.get_by_external_code(code.strip().upper())

    def checkout_resident(self, resident_id: str, actor_id: str = SYSTEM_ACTOR) -> AllocationResult:
        """Release the resident's asset and mark them inactive."""

        def body(ctx) -> AllocationResult:
            result = self.coordinator.release_in(ctx, resident_id, actor_id, AllocationReason.CHECKOUT)
            result.resident = self.residents.mark_checked_out(resident_id)
            return result

        result = self.coordinator.run("checkout", None, body)
        self._logger.info(
            f"Resident checked out: {result.resident.external_resident_code}",
            extra={"resident_id": resident_id},
        )
        return result

    def remove_resident(self, resident_id: str, actor_id: str = SYSTEM_ACTOR) -> AllocationResult:
        """Release the resident's asset and delete the resident record."""

        def body(ctx) -> AllocationResult:
            result = self.coordinator.release_in(ctx, resident_id, actor_id, AllocationReason.REMOVAL)
            self.residents.remove(resident_id)
            return result

        result = self.coordinator.run("remove_resident", None, body)
        self._logger.info("Resident removed", extra={"resident_id": resident_id})
        return result
