from hostel_allocation.models.notification.notification import Notification

__all__ = ["Notification"]
