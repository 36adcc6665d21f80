from taskboard.domains.notifications.services.notification_service import (
    create_notification,
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_read,
)

__all__ = [
    "create_notification",
    "list_notifications",
    "mark_read",
    "mark_all_read",
    "delete_notification",
]
