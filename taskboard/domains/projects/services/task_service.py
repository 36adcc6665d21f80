"""Task service."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from taskboard.core.events.event_service import log_event
from taskboard.domains.automations.outcomes import BatchReport
from taskboard.domains.automations.rules import TaskTransitionEvent, TriggerKind
from taskboard.domains.automations.services.engine import automation_engine
from taskboard.domains.notifications.models.notification_models import Notification
from taskboard.domains.notifications.services.notification_service import create_notification
from taskboard.domains.projects.events import (
    TASK_COMMENTED,
    TASK_CREATED,
    TASK_DELETED,
    TASK_UPDATED,
)
from taskboard.domains.projects.models.project_models import (
    TASK_PRIORITIES,
    Task,
    TaskComment,
    TaskHistory,
)
from taskboard.domains.projects.services.project_service import require_member
from taskboard.extensions import db

logger = logging.getLogger(__name__)

_ADMIN_ROLES = {"owner", "admin"}


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _validate_assignee(project, assignee_id: int | None) -> None:
    if assignee_id is not None and project.member_role(assignee_id) is None:
        raise ValueError("invalid_assignee")


def create_task(
    user_id: int,
    project_id: int,
    *,
    title: str,
    description: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    due_date: datetime | None = None,
    assignee_id: int | None = None,
) -> Task:
    project = require_member(user_id, project_id)
    statuses = project.status_names
    if status is None:
        status = statuses[0]
    elif status not in statuses:
        raise ValueError("invalid_status")
    if priority is not None and priority not in TASK_PRIORITIES:
        raise ValueError("validation_error")
    _validate_assignee(project, assignee_id)

    task = Task(
        project_id=project.id,
        reporter_id=user_id,
        assignee_id=assignee_id,
        title=title.strip(),
        description=(description or "").strip() or None,
        status=status,
        priority=priority or "Medium",
        due_date=due_date,
    )
    db.session.add(task)
    db.session.flush()
    if assignee_id is not None and assignee_id != user_id:
        create_notification(
            assignee_id,
            title="New Task Assigned",
            message=f'You have been assigned to "{task.title}" in {project.name}.',
            related_task_id=task.id,
            related_project_id=project.id,
            created_by=user_id,
            commit=False,
        )
    db.session.commit()
    log_event(
        TASK_CREATED,
        {
            "task_id": task.id,
            "project_id": project.id,
            "title": task.title,
            "status": task.status,
            "assignee_id": task.assignee_id,
            "due_date": _iso(task.due_date),
        },
        user_id=user_id,
        project_id=project.id,
    )
    return task


def get_task(user_id: int, task_id: int) -> Task | None:
    task = db.session.get(Task, task_id)
    if not task or task.project.member_role(user_id) is None:
        return None
    return task


def list_tasks(
    user_id: int,
    project_id: int,
    *,
    status: str | None = None,
    assignee_id: int | None = None,
    page: int = 1,
    per_page: int = 100,
) -> Tuple[List[Task], int]:
    require_member(user_id, project_id)
    query = Task.query.filter_by(project_id=project_id)
    if status:
        query = query.filter(Task.status == status)
    if assignee_id:
        query = query.filter(Task.assignee_id == assignee_id)
    query = query.order_by(Task.due_date.asc().nullslast(), Task.created_at.desc())
    total = query.count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return items, total


def _record(task: Task, field: str, old, new, user_id: int, changed_at: datetime) -> None:
    db.session.add(
        TaskHistory(
            task_id=task.id,
            field=field,
            old_value=None if old is None else str(old),
            new_value=None if new is None else str(new),
            changed_by=user_id,
            changed_at=changed_at,
        )
    )


def apply_task_update(
    user_id: int, task_id: int, **fields
) -> Optional[Tuple[Task, List[BatchReport]]]:
    """Apply a user edit, then run the automations its transitions trigger.

    `assignee_id` and `due_date` may be passed as None to clear them; other
    fields are ignored when None. Automations run after the edit is committed
    and their failures never undo it.
    """
    task = get_task(user_id, task_id)
    if not task:
        return None
    project = task.project
    # Validate up front; a rejected edit must leave nothing pending in the session.
    new_status = fields.get("status")
    if new_status is not None and new_status not in project.status_names:
        raise ValueError("invalid_status")
    if fields.get("priority") is not None and fields["priority"].strip() not in TASK_PRIORITIES:
        raise ValueError("validation_error")
    if "assignee_id" in fields:
        _validate_assignee(project, fields["assignee_id"])

    changed_at = datetime.utcnow()
    changed = {}

    for key in ("title", "description", "priority"):
        if fields.get(key) is None:
            continue
        val = fields[key].strip()
        if getattr(task, key) != val:
            if key == "title":
                _record(task, "title", task.title, val, user_id, changed_at)
            setattr(task, key, val)
            changed[key] = val

    old_status = task.status
    if new_status is not None and new_status != old_status:
        _record(task, "status", old_status, new_status, user_id, changed_at)
        task.status = new_status
        changed["status"] = new_status

    old_assignee = task.assignee_id
    assignee_changed = False
    if "assignee_id" in fields and fields["assignee_id"] != old_assignee:
        new_assignee = fields["assignee_id"]
        _record(task, "assignee", old_assignee, new_assignee, user_id, changed_at)
        task.assignee_id = new_assignee
        changed["assignee_id"] = new_assignee
        assignee_changed = True
        if new_assignee is not None and new_assignee != user_id:
            create_notification(
                new_assignee,
                title="Task Assigned",
                message=f'You have been assigned to "{task.title}".',
                related_task_id=task.id,
                related_project_id=project.id,
                created_by=user_id,
                commit=False,
            )

    if "due_date" in fields and fields["due_date"] != task.due_date:
        new_due = fields["due_date"]
        _record(task, "due_date", _iso(task.due_date), _iso(new_due), user_id, changed_at)
        task.due_date = new_due
        task.due_passed_at = None
        changed["due_date"] = _iso(new_due)

    db.session.commit()
    if not changed:
        return task, []

    log_event(
        TASK_UPDATED,
        {
            "task_id": task.id,
            "project_id": task.project_id,
            "fields": changed,
            "updated_at": changed_at.isoformat(),
        },
        user_id=user_id,
        project_id=task.project_id,
    )

    events: List[TaskTransitionEvent] = []
    if "status" in changed:
        events.append(
            TaskTransitionEvent(
                project_id=task.project_id,
                task_id=task.id,
                trigger_kind=TriggerKind.STATUS_CHANGE,
                from_value=old_status,
                to_value=new_status,
                acting_user_id=user_id,
                occurred_at=changed_at,
            )
        )
    if assignee_changed:
        events.append(
            TaskTransitionEvent(
                project_id=task.project_id,
                task_id=task.id,
                trigger_kind=TriggerKind.ASSIGNEE_CHANGE,
                from_value=None if old_assignee is None else str(old_assignee),
                to_value=None if task.assignee_id is None else str(task.assignee_id),
                acting_user_id=user_id,
                occurred_at=changed_at,
            )
        )
    reports = [automation_engine.on_task_transition(event) for event in events]
    for report in reports:
        if report.outcomes:
            logger.info("Task %s: %s", task.id, report.summary())
    if reports:
        # Automations may have changed the task in their own commits.
        db.session.refresh(task)
    return task, reports


def update_task(user_id: int, task_id: int, **fields) -> Task | None:
    result = apply_task_update(user_id, task_id, **fields)
    return result[0] if result else None


def add_comment(user_id: int, task_id: int, text: str) -> TaskComment:
    task = get_task(user_id, task_id)
    if not task:
        raise ValueError("not_found")
    text = (text or "").strip()
    if not text:
        raise ValueError("validation_error")
    comment = TaskComment(task_id=task.id, user_id=user_id, text=text)
    db.session.add(comment)
    db.session.flush()
    recipients = []
    for recipient in (task.assignee_id, task.reporter_id):
        if recipient is not None and recipient != user_id and recipient not in recipients:
            recipients.append(recipient)
    for recipient in recipients:
        create_notification(
            recipient,
            title="New Comment",
            message=f'New comment on "{task.title}".',
            related_task_id=task.id,
            related_project_id=task.project_id,
            created_by=user_id,
            commit=False,
        )
    db.session.commit()
    log_event(
        TASK_COMMENTED,
        {"task_id": task.id, "project_id": task.project_id, "comment_id": comment.id},
        user_id=user_id,
        project_id=task.project_id,
    )
    return comment


def list_comments(user_id: int, task_id: int) -> List[TaskComment]:
    task = get_task(user_id, task_id)
    if not task:
        raise ValueError("not_found")
    return (
        TaskComment.query.filter_by(task_id=task.id)
        .order_by(TaskComment.created_at.desc(), TaskComment.id.desc())
        .all()
    )


def list_history(user_id: int, task_id: int) -> List[TaskHistory]:
    task = get_task(user_id, task_id)
    if not task:
        raise ValueError("not_found")
    return (
        TaskHistory.query.filter_by(task_id=task.id)
        .order_by(TaskHistory.changed_at.asc(), TaskHistory.id.asc())
        .all()
    )


def delete_task(user_id: int, task_id: int) -> bool:
    task = get_task(user_id, task_id)
    if not task:
        return False
    if task.reporter_id != user_id and task.project.member_role(user_id) not in _ADMIN_ROLES:
        raise ValueError("forbidden")
    project_id = task.project_id
    Notification.query.filter_by(related_task_id=task.id).update({Notification.related_task_id: None})
    db.session.delete(task)
    db.session.commit()
    log_event(
        TASK_DELETED,
        {"task_id": task_id, "project_id": project_id},
        user_id=user_id,
        project_id=project_id,
    )
    return True
