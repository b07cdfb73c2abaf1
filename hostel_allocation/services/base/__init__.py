from hostel_allocation.services.base.base_service import BaseService
from hostel_allocation.services.base.transaction_manager import (
    TransactionContext,
    TransactionManager,
)

__all__ = ["BaseService", "TransactionContext", "TransactionManager"]
