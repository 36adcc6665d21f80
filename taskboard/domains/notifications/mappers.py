"""DTO mappers for notifications."""

from __future__ import annotations

from taskboard.domains.notifications.models.notification_models import Notification


def map_notification(notification: Notification) -> dict:
    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "related_task_id": notification.related_task_id,
        "related_project_id": notification.related_project_id,
        "created_by": notification.created_by,
        "is_read": notification.is_read,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
    }
