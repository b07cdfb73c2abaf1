"""
Data access layer.
"""

from hostel_allocation.repositories.base import BaseRepository
from hostel_allocation.repositories.inventory import AssetRegistry
from hostel_allocation.repositories.resident import ResidentDirectory
from hostel_allocation.repositories.audit import AuditLogRepository
from hostel_allocation.repositories.notification import NotificationRepository

__all__ = [
    "BaseRepository",
    "AssetRegistry",
    "ResidentDirectory",
    "AuditLogRepository",
    "NotificationRepository",
]
