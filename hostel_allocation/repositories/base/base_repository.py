"""
Shared repository plumbing.

Repositories never commit: the owning service decides the transaction
boundary so that several writes can land atomically. State transitions
are written as guarded UPDATE/DELETE statements whose matched row count
tells the caller whether the guard held.
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable

from hostel_allocation.core.exceptions import StorageError
from hostel_allocation.models.base.base_model import BaseModel

T = TypeVar('T', bound=BaseModel)


class BaseRepository(Generic[T]):

    def __init__(self, model: Type[T], session: Session):
        self.model = model
        self.session = session

    def create(self, data: Dict[str, Any]) -> T:
        """
        Insert a row and flush it so generated values are available.

        Raises:
            IntegrityError: a unique or check constraint fired
            StorageError: any other database failure
        """
        entity = self.model(**data)
        self.session.add(entity)
        try:
            self.session.flush()
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            raise StorageError(
                f"Failed to create {self.model.__name__}",
                operation="create",
                original_error=str(e),
            ) from e
        return entity

    def find_by_id(self, id: str) -> Optional[T]:
        return self.find_one_by({"id": id})

    def find_one_by(self, filters: Dict[str, Any]) -> Optional[T]:
        """
        First row matching all of filters (column == value, or IS NULL for None).

        Always re-reads the row, so a guarded update issued earlier in the
        same session is reflected in the returned object.
        """
        query = (
            select(self.model)
            .where(*self._conditions(filters))
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return self.session.execute(query).scalars().first()

    def exists(self, filters: Dict[str, Any]) -> bool:
        query = select(self.model.id).where(*self._conditions(filters)).limit(1)
        return self.session.execute(query).first() is not None

    def execute_guarded(self, stmt: Executable, operation: str) -> int:
        """
        Run a conditional UPDATE/DELETE and return the matched row count.

        IntegrityError passes through untouched so callers can treat a
        fired unique guard as a lost race.
        """
        try:
            return self.session.execute(stmt).rowcount
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            raise StorageError(
                f"{self.model.__name__} {operation} failed",
                operation=operation,
                original_error=str(e),
            ) from e

    def _conditions(self, filters: Dict[str, Any]) -> list:
        conditions = []
        for field, value in filters.items():
            column = getattr(self.model, field)
            if value is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == value)
        return conditions
