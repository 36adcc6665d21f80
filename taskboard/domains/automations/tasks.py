"""Automation maintenance tasks: the due-date sweep."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Optional

from taskboard.domains.automations.rules import TaskTransitionEvent, TriggerKind
from taskboard.domains.automations.services.engine import automation_engine
from taskboard.domains.projects.models.project_models import Task
from taskboard.extensions import db

logger = logging.getLogger(__name__)


def sweep_overdue_tasks(now: Optional[datetime] = None, project_id: Optional[int] = None) -> Dict[str, int]:
    """
    Emit one due_date_passed transition for every task whose due date has passed.

    Call this periodically (e.g. every few minutes via cron). Each task fires
    at most once per due date: `due_passed_at` is stamped before the rules run
    and is only cleared when the due date changes. Tasks sitting in their
    project's last status are treated as finished and left alone.

    Returns:
        Dict with sweep stats
    """
    now = now or datetime.utcnow()
    query = Task.query.filter(
        Task.due_date.isnot(None),
        Task.due_date < now,
        Task.due_passed_at.is_(None),
    )
    if project_id is not None:
        query = query.filter(Task.project_id == project_id)
    tasks = query.order_by(Task.due_date.asc(), Task.id.asc()).all()

    stats = {"overdue": len(tasks), "fired": 0, "finished": 0, "applied": 0, "failed": 0}
    for task in tasks:
        statuses = task.project.status_names
        if statuses and task.status == statuses[-1]:
            stats["finished"] += 1
            continue
        task.due_passed_at = now
        db.session.commit()
        event = TaskTransitionEvent(
            project_id=task.project_id,
            task_id=task.id,
            trigger_kind=TriggerKind.DUE_DATE_PASSED,
            to_value=task.due_date.isoformat(),
            occurred_at=now,
        )
        report = automation_engine.on_task_transition(event)
        stats["fired"] += 1
        stats["applied"] += len(report.applied)
        stats["failed"] += len(report.failed)

    logger.info("Due-date sweep complete: %s", stats)
    return stats


__all__ = ["sweep_overdue_tasks"]
