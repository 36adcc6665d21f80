"""Notification models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from taskboard.extensions import db

NOTIFICATION_TYPES = ("info", "warning", "success")


class Notification(db.Model):
    __tablename__ = "notification"
    __table_args__ = (
        db.Index("ix_notification_recipient_created_at", "recipient_id", "created_at"),
        db.Index("ix_notification_recipient_is_read", "recipient_id", "is_read"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    recipient_id: Mapped[int] = mapped_column(
        db.ForeignKey("user.id"), index=True, nullable=False
    )
    type: Mapped[str] = mapped_column(db.String(16), default="info", nullable=False)
    title: Mapped[str] = mapped_column(db.String(255), nullable=False)
    message: Mapped[str] = mapped_column(db.Text, nullable=False)
    related_task_id: Mapped[int | None] = mapped_column(
        db.ForeignKey("task.id", ondelete="SET NULL")
    )
    related_project_id: Mapped[int | None] = mapped_column(
        db.ForeignKey("project.id", ondelete="SET NULL")
    )
    created_by: Mapped[int | None] = mapped_column(db.ForeignKey("user.id"))
    is_read: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, index=True)


__all__ = ["NOTIFICATION_TYPES", "Notification"]
