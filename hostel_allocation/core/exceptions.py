"""
Custom Exceptions for the Hostel Allocation Service

This module defines the exception classes raised by the allocation engine
and rendered by the API layer.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # Allocation errors
    ASSET_UNAVAILABLE = "ASSET_UNAVAILABLE"
    ASSET_OCCUPIED = "ASSET_OCCUPIED"
    CONFLICT = "CONFLICT"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if field_errors:
            details["field_errors"] = field_errors
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details, 422)


class NotFoundError(BaseAppException):
    """Exception raised when a requested resident or asset does not exist"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, 404)
        self.resource_type = resource_type
        self.resource_id = resource_id


class AssetNotFoundError(NotFoundError):
    def __init__(self, asset_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Asset", asset_id, message)


class ResidentNotFoundError(NotFoundError):
    def __init__(self, resident_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__("Resident", resident_id, message)


# ========================================
# Allocation Exceptions
# ========================================

class ConflictError(BaseAppException):
    """
    A compare-and-set lost the race: the asset was not in the expected
    state at the moment of the conditional update.

    Internal to the registry; the coordinator surfaces it as
    AssetUnavailableError.
    """

    def __init__(
        self,
        asset_id: str,
        expected_state: Optional[str] = None,
        message: Optional[str] = None,
    ):
        message = message or f"Asset {asset_id} is not in state {expected_state}"
        details = {"asset_id": asset_id, "expected_state": expected_state}
        super().__init__(message, ErrorCode.CONFLICT, details, 409)
        self.asset_id = asset_id
        self.expected_state = expected_state


class AssetUnavailableError(BaseAppException):
    """Target asset was not Available at claim time"""

    def __init__(
        self,
        asset_id: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        message = message or f"Asset {asset_id} is not available"
        merged = {"asset_id": asset_id}
        merged.update(details or {})
        super().__init__(message, ErrorCode.ASSET_UNAVAILABLE, merged, 409)
        self.asset_id = asset_id

    @classmethod
    def from_conflict(cls, conflict: ConflictError) -> "AssetUnavailableError":
        return cls(
            conflict.asset_id,
            details={"expected_state": conflict.expected_state},
        )


class AssetOccupiedError(BaseAppException):
    """Maintenance change or removal attempted on an occupied asset"""

    def __init__(
        self,
        asset_id: str,
        occupant_id: Optional[str] = None,
        message: Optional[str] = None,
    ):
        message = message or f"Asset {asset_id} is currently occupied"
        details = {"asset_id": asset_id, "occupant_id": occupant_id}
        super().__init__(message, ErrorCode.ASSET_OCCUPIED, details, 409)
        self.asset_id = asset_id
        self.occupant_id = occupant_id


# ========================================
# Database Exceptions
# ========================================

class StorageError(BaseAppException):
    """Transport or durability failure in the storage layer; fatal for the call"""

    def __init__(
        self,
        message: str = "Storage operation failed",
        operation: Optional[str] = None,
        original_error: Optional[str] = None,
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if original_error:
            details["original_error"] = original_error
        super().__init__(message, ErrorCode.DATABASE_ERROR, details, 503)


class DuplicateEntryError(BaseAppException):
    """Exception raised when attempting to create a duplicate entry"""

    def __init__(
        self,
        field: str,
        value: Any,
        message: Optional[str] = None
    ):
        message = message or f"Duplicate entry for {field}: {value}"
        details = {"field": field, "value": str(value)}
        super().__init__(message, ErrorCode.DUPLICATE_ENTRY, details, 409)
        self.field = field
