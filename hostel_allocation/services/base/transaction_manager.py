"""
Unit-of-work boundary for allocation changes.

Everything done inside ``TransactionManager.start()`` commits together or
not at all. Work that must only happen once the change is durable (audit,
notifications) is registered with ``ctx.after_commit`` and runs strictly
after a successful commit; a rollback discards it.
"""

import enum
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator, List, Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hostel_allocation.config.logging import get_logger
from hostel_allocation.models.base.base_model import utcnow


class TransactionStatus(str, enum.Enum):
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class TransactionContext:
    operation: str
    transaction_id: str = field(default_factory=lambda: str(uuid4()))
    started_at: datetime = field(default_factory=utcnow)
    finished_at: Optional[datetime] = None
    status: TransactionStatus = TransactionStatus.OPEN
    _pending: List[Callable[[], None]] = field(default_factory=list, repr=False)

    def after_commit(self, callback: Callable[[], None]) -> None:
        """Run callback once this transaction has committed. Dropped on rollback."""
        if self.status is not TransactionStatus.OPEN:
            raise RuntimeError(f"Transaction {self.transaction_id} is already {self.status.value}")
        self._pending.append(callback)

    @property
    def elapsed_ms(self) -> float:
        end = self.finished_at or utcnow()
        return (end - self.started_at).total_seconds() * 1000


class TransactionManager:

    def __init__(self, db_session: Session):
        self.db = db_session
        self._logger = get_logger(self.__class__.__name__)

    @contextmanager
    def start(self, operation: str = "transaction") -> Iterator[TransactionContext]:
        """
        Open a unit of work on the session.

        Example:
            with manager.start("assign") as ctx:
                registry.try_reserve(asset_id, resident_id)
                ctx.after_commit(lambda: dispatcher.dispatch(change))
        """
        ctx = TransactionContext(operation=operation)
        try:
            yield ctx
        except Exception as exc:
            self._rollback(ctx, exc)
            raise
        else:
            self._commit(ctx)
        finally:
            ctx.finished_at = utcnow()
            self._logger.debug(
                f"{operation} {ctx.status.value} in {ctx.elapsed_ms:.2f}ms",
                extra={
                    "transaction_id": ctx.transaction_id,
                    "operation": operation,
                    "status": ctx.status.value,
                },
            )

        self._run_pending(ctx)

    def _commit(self, ctx: TransactionContext) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self._logger.error(
                f"Commit of {ctx.operation} failed: {exc}",
                exc_info=True,
                extra={"transaction_id": ctx.transaction_id},
            )
            self._rollback(ctx, exc)
            raise
        ctx.status = TransactionStatus.COMMITTED

    def _rollback(self, ctx: TransactionContext, exc: Exception) -> None:
        ctx._pending.clear()
        try:
            self.db.rollback()
        except SQLAlchemyError as rollback_exc:
            # The caller sees the original error, not this one
            self._logger.error(
                f"Rollback of {ctx.operation} failed: {rollback_exc}",
                exc_info=True,
                extra={"transaction_id": ctx.transaction_id},
            )
        ctx.status = TransactionStatus.ROLLED_BACK
        self._logger.info(
            f"{ctx.operation} rolled back: {exc}",
            extra={"transaction_id": ctx.transaction_id, "error_type": type(exc).__name__},
        )

    def _run_pending(self, ctx: TransactionContext) -> None:
        # Committed state is final; a failing callback is logged, never raised
        callbacks, ctx._pending = ctx._pending, []
        for callback in callbacks:
            try:
                callback()
            except Exception as exc:
                self._logger.error(
                    f"After-commit callback for {ctx.operation} failed: {exc}",
                    exc_info=True,
                    extra={"transaction_id": ctx.transaction_id},
                )
