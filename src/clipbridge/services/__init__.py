"""Service layer for clipbridge."""

from .notification_service import NotificationService
from .sync_service import SyncHandler

__all__ = ["NotificationService", "SyncHandler"]
