"""
Database models.

Importing this package registers every table on Base.metadata.
"""

from hostel_allocation.models.base import Base, BaseModel
from hostel_allocation.models.inventory import Asset
from hostel_allocation.models.resident import Resident
from hostel_allocation.models.audit import AuditLog
from hostel_allocation.models.notification import Notification

__all__ = ["Base", "BaseModel", "Asset", "Resident", "AuditLog", "Notification"]
