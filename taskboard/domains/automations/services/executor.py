"""Action execution for matched automation rules.

Each call applies one rule's action to one task and commits it straight away.
Failures are turned into a failed outcome after rolling the session back, so a
broken rule cannot leave half-written state for the next rule to commit.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from taskboard.core.users.models import User
from taskboard.core.users.services import add_badge
from taskboard.domains.automations.errors import (
    AutomationError,
    ConfigurationError,
    LookupFailure,
    PersistenceFailure,
)
from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.automations.outcomes import ExecutionOutcome
from taskboard.domains.automations.rules import (
    AwardBadgeAction,
    ChangeStatusAction,
    SendNotificationAction,
    TaskTransitionEvent,
    TriggerKind,
)
from taskboard.domains.notifications.services.notification_service import create_notification
from taskboard.domains.projects.models.project_models import Project, Task, TaskHistory
from taskboard.extensions import db

logger = logging.getLogger(__name__)


def execute(rule: AutomationRule, task: Task, acting_user_id: Optional[int]) -> ExecutionOutcome:
    """Apply the rule's action to the task and return what happened."""
    try:
        action = rule.action
        if isinstance(action, ChangeStatusAction):
            outcome = _change_status(rule, action, task, acting_user_id)
        elif isinstance(action, AwardBadgeAction):
            outcome = _award_badge(rule, action, task, acting_user_id)
        elif isinstance(action, SendNotificationAction):
            outcome = _send_notification(rule, action, task, acting_user_id)
        else:
            raise ConfigurationError(f"unhandled action type: {type(action).__name__}")
    except AutomationError as exc:
        db.session.rollback()
        return ExecutionOutcome.failed(rule, exc)
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Automation %s failed to persist its action", rule.id)
        return ExecutionOutcome.failed(rule, PersistenceFailure(str(exc), rule_id=rule.id))
    return outcome


def _commit(rule: AutomationRule) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        raise PersistenceFailure(f"commit failed: {exc}", rule_id=rule.id) from exc


def _change_status(
    rule: AutomationRule, action: ChangeStatusAction, task: Task, acting_user_id: Optional[int]
) -> ExecutionOutcome:
    project = db.session.get(Project, task.project_id)
    if project is None:
        raise LookupFailure(f"project {task.project_id} not found", rule_id=rule.id)
    # The status list may have changed since the rule was saved.
    if action.status not in project.status_names:
        raise ConfigurationError(
            f"status '{action.status}' is no longer defined on project {project.id}",
            rule_id=rule.id,
        )
    if task.status == action.status:
        return ExecutionOutcome.skipped(rule, f"task already in status '{action.status}'")

    old_status = task.status
    changed_at = datetime.utcnow()
    task.status = action.status
    db.session.add(
        TaskHistory(
            task_id=task.id,
            field="status",
            old_value=old_status,
            new_value=action.status,
            changed_by=acting_user_id,
            changed_at=changed_at,
        )
    )
    _commit(rule)
    logger.info("Automation %s changed task %s status to %s", rule.id, task.id, action.status)
    follow_up = TaskTransitionEvent(
        project_id=task.project_id,
        task_id=task.id,
        trigger_kind=TriggerKind.STATUS_CHANGE,
        from_value=old_status,
        to_value=action.status,
        acting_user_id=acting_user_id,
        occurred_at=changed_at,
    )
    return ExecutionOutcome.applied(
        rule, detail=f"status {old_status} -> {action.status}", follow_up=follow_up
    )


def _assignee(rule: AutomationRule, task: Task) -> User:
    user = db.session.get(User, task.assignee_id)
    if user is None:
        raise LookupFailure(f"assignee {task.assignee_id} not found", rule_id=rule.id)
    return user


def _award_badge(
    rule: AutomationRule, action: AwardBadgeAction, task: Task, acting_user_id: Optional[int]
) -> ExecutionOutcome:
    if task.assignee_id is None:
        return ExecutionOutcome.skipped(rule, "task has no assignee")
    user = _assignee(rule, task)
    newly_awarded = add_badge(user, action.badge_name)
    create_notification(
        user.id,
        title="Badge Awarded",
        message=f'You earned the "{action.badge_name}" badge!',
        type="success",
        related_task_id=task.id,
        related_project_id=task.project_id,
        created_by=acting_user_id,
        commit=False,
    )
    _commit(rule)
    logger.info("Automation %s awarded badge %s to user %s", rule.id, action.badge_name, user.id)
    detail = "badge awarded" if newly_awarded else "badge already held"
    return ExecutionOutcome.applied(rule, detail=detail)


def _send_notification(
    rule: AutomationRule, action: SendNotificationAction, task: Task, acting_user_id: Optional[int]
) -> ExecutionOutcome:
    if task.assignee_id is None:
        return ExecutionOutcome.skipped(rule, "task has no assignee")
    user = _assignee(rule, task)
    create_notification(
        user.id,
        title="Task Notification",
        message=action.render(task.title),
        type=action.notification_type,
        related_task_id=task.id,
        related_project_id=task.project_id,
        created_by=acting_user_id,
        commit=False,
    )
    _commit(rule)
    logger.info("Automation %s sent a notification to user %s", rule.id, user.id)
    return ExecutionOutcome.applied(rule, detail="notification sent")


__all__ = ["execute"]
