"""
Assignment coordinator: the only component that changes a resident's
asset binding.

Each operation runs in one transaction. Asset and resident rows are
changed with conditional updates, so a concurrent writer makes the whole
operation roll back instead of leaving a half-applied binding. Side
effects are handed to the dispatcher only after the commit succeeded.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hostel_allocation.core.exceptions import (
    AssetUnavailableError,
    BaseAppException,
    ConflictError,
    StorageError,
    ValidationError,
)
from hostel_allocation.core.monitoring import record_operation
from hostel_allocation.models.base.enums import AllocationReason
from hostel_allocation.models.inventory.asset import Asset
from hostel_allocation.models.resident.resident import Resident
from hostel_allocation.repositories.inventory.asset_registry import AssetRegistry
from hostel_allocation.repositories.resident.resident_directory import ResidentDirectory
from hostel_allocation.schemas.allocation.allocation import AllocationChange
from hostel_allocation.services.allocation.side_effect_dispatcher import SideEffectDispatcher
from hostel_allocation.services.base.base_service import BaseService
from hostel_allocation.services.base.transaction_manager import TransactionContext

T = TypeVar("T")

SYSTEM_ACTOR = "system"


@dataclass
class AllocationResult:
    """Post-commit snapshot of one resident's binding."""

    resident: Resident
    asset: Optional[Asset] = None
    previous_asset: Optional[Asset] = None
    changes: List[AllocationChange] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


class AssignmentCoordinator(BaseService):
    """
    Coordinates AssetRegistry and ResidentDirectory with:
    - assign (first assignment or move), release, swap
    - Reserve-before-release ordering on moves
    - Lost races surfaced as AssetUnavailableError
    - Post-commit dispatch of AllocationChange records
    """

    def __init__(
        self,
        session: Session,
        dispatcher: SideEffectDispatcher,
        assets: Optional[AssetRegistry] = None,
        residents: Optional[ResidentDirectory] = None,
    ):
        super().__init__(session)
        self.dispatcher = dispatcher
        self.assets = assets or AssetRegistry(session)
        self.residents = residents or ResidentDirectory(session)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def assign(
        self,
        resident_id: str,
        asset_id: str,
        actor_id: str = SYSTEM_ACTOR,
    ) -> AllocationResult:
        """
        Bind resident_id to asset_id, moving them off any previous asset.

        Raises:
            ResidentNotFoundError / AssetNotFoundError: unknown id
            ValidationError: the resident has checked out
            AssetUnavailableError: asset_id is not Available, or another
                writer changed the binding first
            StorageError: the store failed; nothing was applied
        """
        return self.run(
            "assign",
            asset_id,
            lambda ctx: self.assign_in(ctx, resident_id, asset_id, actor_id),
        )

    def release(
        self,
        resident_id: str,
        actor_id: str = SYSTEM_ACTOR,
        reason: AllocationReason = AllocationReason.RELEASE,
    ) -> AllocationResult:
        """
        Free the resident's asset. A resident without an asset is a no-op.
        """
        return self.run(
            "release",
            None,
            lambda ctx: self.release_in(ctx, resident_id, actor_id, reason),
        )

    def swap(
        self,
        first_resident_id: str,
        second_resident_id: str,
        actor_id: str = SYSTEM_ACTOR,
    ) -> Tuple[AllocationResult, AllocationResult]:
        """Exchange the assets of two residents in one transaction."""
        return self.run(
            "swap",
            None,
            lambda ctx: self._swap(ctx, first_resident_id, second_resident_id, actor_id),
        )

    # -------------------------------------------------------------------------
    # Transaction bodies
    # -------------------------------------------------------------------------

    def assign_in(
        self,
        ctx: TransactionContext,
        resident_id: str,
        asset_id: str,
        actor_id: str,
    ) -> AllocationResult:
        resident = self.residents.get(resident_id)
        if not resident.is_active:
            raise ValidationError(
                f"Resident {resident_id} has checked out",
                details={"resident_id": resident_id},
            )

        previous_asset_id = resident.assigned_asset_id
        if previous_asset_id == asset_id:
            asset = self.assets.get(asset_id)
            return AllocationResult(resident=resident, asset=asset, previous_asset=asset)

        asset = self.assets.try_reserve(asset_id, resident.id)

        previous_asset = None
        if previous_asset_id is not None:
            previous_asset = self.assets.release(previous_asset_id, expected_occupant_id=resident.id)

        resident = self.residents.bind_asset(resident.id, previous_asset_id, asset_id)

        change = AllocationChange(
            resident_id=resident.id,
            previous_asset_id=previous_asset_id,
            new_asset_id=asset_id,
            actor_id=actor_id,
            reason=AllocationReason.MOVE if previous_asset_id else AllocationReason.ASSIGN,
        )
        self._dispatch_after_commit(ctx, [change])

        return AllocationResult(
            resident=resident,
            asset=asset,
            previous_asset=previous_asset,
            changes=[change],
        )

    def release_in(
        self,
        ctx: TransactionContext,
        resident_id: str,
        actor_id: str,
        reason: AllocationReason,
    ) -> AllocationResult:
        resident = self.residents.get(resident_id)
        asset_id = resident.assigned_asset_id
        if asset_id is None:
            return AllocationResult(resident=resident)

        released = self.assets.release(asset_id, expected_occupant_id=resident.id)
        resident = self.residents.bind_asset(resident.id, asset_id, None)

        change = AllocationChange(
            resident_id=resident.id,
            previous_asset_id=asset_id,
            new_asset_id=None,
            actor_id=actor_id,
            reason=reason,
        )
        self._dispatch_after_commit(ctx, [change])

        return AllocationResult(resident=resident, previous_asset=released, changes=[change])

    def _swap(
        self,
        ctx: TransactionContext,
        first_resident_id: str,
        second_resident_id: str,
        actor_id: str,
    ) -> Tuple[AllocationResult, AllocationResult]:
        first = self.residents.get(first_resident_id)
        if first_resident_id == second_resident_id:
            asset = self.assets.get(first.assigned_asset_id) if first.assigned_asset_id else None
            result = AllocationResult(resident=first, asset=asset, previous_asset=asset)
            return result, result

        second = self.residents.get(second_resident_id)
        first_asset_id = first.assigned_asset_id
        second_asset_id = second.assigned_asset_id
        if first_asset_id is None or second_asset_id is None:
            raise ValidationError(
                "Both residents must hold an asset to swap",
                details={
                    "first_resident_id": first.id,
                    "second_resident_id": second.id,
                },
            )

        previous_first = self.assets.release(first_asset_id, expected_occupant_id=first.id)
        previous_second = self.assets.release(second_asset_id, expected_occupant_id=second.id)
        self.residents.bind_asset(first.id, first_asset_id, None)
        self.residents.bind_asset(second.id, second_asset_id, None)

        new_first_asset = self.assets.try_reserve(second_asset_id, first.id)
        new_second_asset = self.assets.try_reserve(first_asset_id, second.id)
        first = self.residents.bind_asset(first.id, None, second_asset_id)
        second = self.residents.bind_asset(second.id, None, first_asset_id)

        first_change = AllocationChange(
            resident_id=first.id,
            previous_asset_id=first_asset_id,
            new_asset_id=second_asset_id,
            actor_id=actor_id,
            reason=AllocationReason.SWAP,
        )
        second_change = AllocationChange(
            resident_id=second.id,
            previous_asset_id=second_asset_id,
            new_asset_id=first_asset_id,
            actor_id=actor_id,
            reason=AllocationReason.SWAP,
        )
        self._dispatch_after_commit(ctx, [first_change, second_change])

        return (
            AllocationResult(
                resident=first,
                asset=new_first_asset,
                previous_asset=previous_first,
                changes=[first_change],
            ),
            AllocationResult(
                resident=second,
                asset=new_second_asset,
                previous_asset=previous_second,
                changes=[second_change],
            ),
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _dispatch_after_commit(
        self,
        ctx: TransactionContext,
        changes: List[AllocationChange],
    ) -> None:
        def dispatch() -> None:
            for change in changes:
                self.dispatcher.dispatch(change)

        ctx.after_commit(dispatch)

    def run(
        self,
        operation: str,
        asset_id: Optional[str],
        body: Callable[[TransactionContext], T],
    ) -> T:
        """
        Execute body in a fresh transaction and translate storage-level
        failures into the domain error taxonomy.
        """
        try:
            with self.transactions.start(operation) as ctx:
                result = body(ctx)
        except ConflictError as e:
            record_operation(operation, "unavailable")
            raise AssetUnavailableError.from_conflict(e) from e
        except IntegrityError as e:
            # A unique guard fired: another writer claimed the asset or resident first
            record_operation(operation, "unavailable")
            raise AssetUnavailableError(
                asset_id or "",
                message="Asset was claimed by a concurrent allocation",
            ) from e
        except SQLAlchemyError as e:
            record_operation(operation, "error")
            self._logger.error(f"{operation} failed in storage: {e}", exc_info=True)
            raise StorageError(
                "Allocation could not be stored",
                operation=operation,
                original_error=str(e),
            ) from e
        except BaseAppException as e:
            record_operation(operation, e.error_code.value.lower())
            raise

        record_operation(operation, "success" if self._has_changes(result) else "noop")
        self._logger.info(
            f"{operation} committed",
            extra={"operation": operation, "transaction_id": ctx.transaction_id},
        )
        return result

    @staticmethod
    def _has_changes(result) -> bool:
        if isinstance(result, tuple):
            return any(r.changed for r in result)
        return result.changed
