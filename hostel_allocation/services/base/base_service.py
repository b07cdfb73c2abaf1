"""
Base service class providing common functionality for all services.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hostel_allocation.config.logging import get_logger
from hostel_allocation.core.exceptions import StorageError
from hostel_allocation.services.base.transaction_manager import (
    TransactionContext,
    TransactionManager,
)


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Transaction scope with storage errors mapped to StorageError
    """

    def __init__(self, db_session: Session):
        self.db: Session = db_session
        self.transactions = TransactionManager(db_session)
        self._logger = get_logger(self.__class__.__name__)

    @contextmanager
    def transaction(self, operation: str) -> Iterator[TransactionContext]:
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction("retire_asset") as ctx:
                self.assets.delete_asset(asset_id)
                ctx.after_commit(lambda: ...)
        """
        try:
            with self.transactions.start(operation) as ctx:
                yield ctx
        except SQLAlchemyError as e:
            self._logger.error(f"{operation} failed in storage: {e}", exc_info=True)
            raise StorageError(
                f"Could not complete {operation}",
                operation=operation,
                original_error=str(e),
            ) from e
