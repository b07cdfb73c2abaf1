from hostel_allocation.repositories.notification.notification_repository import NotificationRepository

__all__ = ["NotificationRepository"]
