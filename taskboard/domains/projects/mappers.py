"""DTO mappers for projects."""

from __future__ import annotations

from taskboard.core.events.event_models import EventRecord
from taskboard.domains.projects.models.project_models import (
    Project,
    ProjectMember,
    Task,
    TaskComment,
    TaskHistory,
)


def _iso(value):
    return value.isoformat() if value else None


def map_member(member: ProjectMember) -> dict:
    return {
        "user_id": member.user_id,
        "role": member.role,
        "added_at": _iso(member.added_at),
    }


def map_project(project: Project) -> dict:
    return {
        "id": project.id,
        "owner_id": project.owner_id,
        "name": project.name,
        "description": project.description,
        "statuses": [
            {"name": status.name, "color": status.color, "order": status.order}
            for status in project.statuses
        ],
        "members": [map_member(member) for member in project.members],
        "created_at": _iso(project.created_at),
        "updated_at": _iso(project.updated_at),
    }


def map_task(task: Task) -> dict:
    return {
        "id": task.id,
        "project_id": task.project_id,
        "reporter_id": task.reporter_id,
        "assignee_id": task.assignee_id,
        "title": task.title,
        "description": task.description,
        "status": task.status,
        "priority": task.priority,
        "due_date": _iso(task.due_date),
        "due_passed_at": _iso(task.due_passed_at),
        "created_at": _iso(task.created_at),
        "updated_at": _iso(task.updated_at),
    }


def map_history(entry: TaskHistory) -> dict:
    return {
        "id": entry.id,
        "task_id": entry.task_id,
        "field": entry.field,
        "old_value": entry.old_value,
        "new_value": entry.new_value,
        "changed_by": entry.changed_by,
        "changed_at": _iso(entry.changed_at),
    }


def map_comment(comment: TaskComment) -> dict:
    return {
        "id": comment.id,
        "task_id": comment.task_id,
        "user_id": comment.user_id,
        "text": comment.text,
        "created_at": _iso(comment.created_at),
    }


def map_event(record: EventRecord) -> dict:
    return {
        "id": record.id,
        "event_type": record.event_type,
        "payload": record.payload or {},
        "user_id": record.user_id,
        "created_at": _iso(record.created_at),
    }
