"""Typed schemas for user IO."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from pydantic import BaseModel, EmailStr, Field

if TYPE_CHECKING:
    from taskboard.core.users.models import User


class UserCreateRequest(BaseModel):
    email: EmailStr
    full_name: Optional[str] = Field(default=None, max_length=255)
    photo_url: Optional[str] = Field(default=None, max_length=512)


class UserUpdateRequest(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=255)
    photo_url: Optional[str] = Field(default=None, max_length=512)


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: Optional[str]
    photo_url: Optional[str]
    badges: List[str]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}


def serialize_user(user: "User") -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        photo_url=user.photo_url,
        badges=list(user.badges or []),
        created_at=user.created_at,
    )
