"""Projects domain event catalog."""

from __future__ import annotations

PROJECT_CREATED = "projects.project.created"
PROJECT_UPDATED = "projects.project.updated"
PROJECT_MEMBER_ADDED = "projects.member.added"
TASK_CREATED = "projects.task.created"
TASK_UPDATED = "projects.task.updated"
TASK_COMMENTED = "projects.task.commented"
TASK_DELETED = "projects.task.deleted"

EVENT_CATALOG = {
    PROJECT_CREATED: {
        "version": "v1",
        "payload": {
            "project_id": "int",
            "owner_id": "int",
            "name": "str",
            "statuses": "list[str]",
            "created_at": "datetime",
        },
    },
    PROJECT_UPDATED: {
        "version": "v1",
        "payload": {
            "project_id": "int",
            "fields": "dict",
            "updated_at": "datetime",
        },
    },
    PROJECT_MEMBER_ADDED: {
        "version": "v1",
        "payload": {
            "project_id": "int",
            "user_id": "int",
            "role": "str",
        },
    },
    TASK_CREATED: {
        "version": "v1",
        "payload": {
            "task_id": "int",
            "project_id": "int",
            "title": "str",
            "status": "str",
            "assignee_id": "int?",
            "due_date": "datetime?",
        },
    },
    TASK_UPDATED: {
        "version": "v1",
        "payload": {
            "task_id": "int",
            "project_id": "int",
            "fields": "dict",
            "updated_at": "datetime",
        },
    },
    TASK_COMMENTED: {
        "version": "v1",
        "payload": {
            "task_id": "int",
            "project_id": "int",
            "comment_id": "int",
        },
    },
    TASK_DELETED: {
        "version": "v1",
        "payload": {
            "task_id": "int",
            "project_id": "int",
        },
    },
}

__all__ = [
    "EVENT_CATALOG",
    "PROJECT_CREATED",
    "PROJECT_UPDATED",
    "PROJECT_MEMBER_ADDED",
    "TASK_CREATED",
    "TASK_UPDATED",
    "TASK_COMMENTED",
    "TASK_DELETED",
]
