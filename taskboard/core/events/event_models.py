"""Persistent event models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from taskboard.extensions import db


class EventRecord(db.Model):
    __tablename__ = "event_record"
    __table_args__ = (
        db.Index("ix_event_record_project_created_at", "project_id", "created_at"),
        db.Index("ix_event_record_project_event_type", "project_id", "event_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(db.String(128), index=True, nullable=False)
    payload: Mapped[dict] = mapped_column(db.JSON, nullable=False, default=dict)
    user_id: Mapped[int | None] = mapped_column(db.ForeignKey("user.id"), index=True)
    project_id: Mapped[int | None] = mapped_column(
        db.ForeignKey("project.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, index=True)
