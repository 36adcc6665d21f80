"""User service layer."""

from __future__ import annotations

from typing import Optional

from taskboard.core.users.models import User
from taskboard.core.users.schemas import UserCreateRequest, UserUpdateRequest
from taskboard.extensions import db


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def create_user(payload: UserCreateRequest) -> User:
    if User.query.filter_by(email=payload.email.lower()).first():
        raise ValueError("duplicate")
    user = User(
        email=payload.email.lower(),
        full_name=payload.full_name,
        photo_url=payload.photo_url,
        badges=[],
    )
    db.session.add(user)
    db.session.commit()
    return user


def update_user(user: User, payload: UserUpdateRequest) -> User:
    if payload.full_name is not None:
        user.full_name = payload.full_name
    if payload.photo_url is not None:
        user.photo_url = payload.photo_url
    db.session.commit()
    return user


def add_badge(user: User, badge_name: str) -> bool:
    """Add a badge with set semantics. Returns False when already held.

    The caller owns the commit so badge awards share a transaction with the
    notification that announces them.
    """
    badges = list(user.badges or [])
    if badge_name in badges:
        return False
    # JSON columns are not mutation-tracked; assign a new list.
    user.badges = badges + [badge_name]
    return True
