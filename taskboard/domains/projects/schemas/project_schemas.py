"""Project schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=50, ge=1, le=200)


class StatusDefinition(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    color: Optional[str] = Field(default=None, max_length=16)


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=4096)
    statuses: Optional[List[StatusDefinition]] = Field(default=None, min_length=1)


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=4096)


class StatusesReplace(BaseModel):
    statuses: List[StatusDefinition] = Field(min_length=1)


class MemberAdd(BaseModel):
    user_id: int
    role: Literal["admin", "member"] = "member"


class ProjectListFilter(Pagination):
    pass


class EventListFilter(Pagination):
    event_type: Optional[str] = Field(default=None, max_length=128)


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=4096)
    status: Optional[str] = Field(default=None, max_length=64)
    priority: Optional[Literal["Low", "Medium", "High"]] = None
    due_date: Optional[dt.datetime] = None
    assignee_id: Optional[int] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=4096)
    status: Optional[str] = Field(default=None, max_length=64)
    priority: Optional[Literal["Low", "Medium", "High"]] = None
    due_date: Optional[dt.datetime] = None
    assignee_id: Optional[int] = None


class TaskListFilter(Pagination):
    per_page: int = Field(default=100, ge=1, le=200)
    status: Optional[str] = None
    assignee_id: Optional[int] = None


class CommentCreate(BaseModel):
    text: str = Field(min_length=1, max_length=4096)
