"""Notification service layer."""

from __future__ import annotations

from typing import List, Optional, Tuple

from taskboard.domains.notifications.models.notification_models import (
    NOTIFICATION_TYPES,
    Notification,
)
from taskboard.extensions import db


def create_notification(
    recipient_id: int,
    *,
    title: str,
    message: str,
    type: str = "info",
    related_task_id: Optional[int] = None,
    related_project_id: Optional[int] = None,
    created_by: Optional[int] = None,
    commit: bool = True,
) -> Notification:
    """Stage a notification; pass commit=False to share the caller's transaction."""
    if type not in NOTIFICATION_TYPES:
        raise ValueError("validation_error")
    notification = Notification(
        recipient_id=recipient_id,
        title=title,
        message=message,
        type=type,
        related_task_id=related_task_id,
        related_project_id=related_project_id,
        created_by=created_by,
    )
    db.session.add(notification)
    if commit:
        db.session.commit()
    return notification


def list_notifications(
    user_id: int, *, unread_only: bool = False, page: int = 1, per_page: int = 50
) -> Tuple[List[Notification], int]:
    query = Notification.query.filter_by(recipient_id=user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
    total = query.count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return items, total


def mark_read(user_id: int, notification_id: int) -> Notification | None:
    notification = Notification.query.filter_by(
        id=notification_id, recipient_id=user_id
    ).first()
    if not notification:
        return None
    notification.is_read = True
    db.session.commit()
    return notification


def mark_all_read(user_id: int) -> int:
    updated = Notification.query.filter_by(recipient_id=user_id, is_read=False).update(
        {"is_read": True}
    )
    db.session.commit()
    return updated


def delete_notification(user_id: int, notification_id: int) -> bool:
    notification = Notification.query.filter_by(
        id=notification_id, recipient_id=user_id
    ).first()
    if not notification:
        return False
    db.session.delete(notification)
    db.session.commit()
    return True
