"""User and profile models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from taskboard.extensions import db


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)


class User(db.Model, TimestampMixin):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(db.String(255))
    photo_url: Mapped[str | None] = mapped_column(db.String(512))
    badges: Mapped[list] = mapped_column(db.JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(default=True)

    def has_badge(self, badge_name: str) -> bool:
        return badge_name in (self.badges or [])
