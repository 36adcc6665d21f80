from datetime import datetime, timedelta

import pytest

from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.automations.services.rule_service import create_rule
from taskboard.domains.automations.tasks import sweep_overdue_tasks
from taskboard.domains.notifications.models.notification_models import Notification
from taskboard.domains.projects.services.task_service import create_task, update_task
from taskboard.extensions import db

pytestmark = pytest.mark.integration

NOW = datetime(2026, 3, 10, 12, 0, 0)


@pytest.fixture
def due_soon_rule(app, owner, project):
    return create_rule(
        owner.id,
        project.id,
        name="Due reminder",
        trigger_kind="due_date_passed",
        trigger_conditions={},
        action_kind="send_notification",
        action_params={"message": 'Task "${taskTitle}" is due soon.', "notification_type": "warning"},
    )


def _reminders(user_id):
    return Notification.query.filter_by(recipient_id=user_id, title="Task Notification").all()


def test_overdue_task_fires_once_with_rendered_message(app, owner, member, project, due_soon_rule):
    task = create_task(
        owner.id, project.id, title="Fix bug", assignee_id=member.id, due_date=NOW - timedelta(hours=1)
    )

    stats = sweep_overdue_tasks(now=NOW)
    again = sweep_overdue_tasks(now=NOW + timedelta(minutes=5))

    assert stats["fired"] == 1
    assert stats["applied"] == 1
    assert again["overdue"] == 0
    (note,) = _reminders(member.id)
    assert note.message == 'Task "Fix bug" is due soon.'
    assert note.type == "warning"
    assert note.related_task_id == task.id
    rule = db.session.get(AutomationRule, due_soon_rule.id)
    db.session.refresh(rule)
    assert rule.execution_count == 1


def test_future_and_undated_tasks_are_ignored(app, owner, member, project, due_soon_rule):
    create_task(owner.id, project.id, title="Later", assignee_id=member.id, due_date=NOW + timedelta(days=1))
    create_task(owner.id, project.id, title="Whenever", assignee_id=member.id)

    stats = sweep_overdue_tasks(now=NOW)

    assert stats["overdue"] == 0
    assert _reminders(member.id) == []


def test_tasks_in_final_status_are_not_fired(app, owner, member, project, due_soon_rule):
    create_task(
        owner.id, project.id, title="Shipped", status="Done", assignee_id=member.id, due_date=NOW - timedelta(days=1)
    )

    stats = sweep_overdue_tasks(now=NOW)

    assert stats["finished"] == 1
    assert stats["fired"] == 0
    assert _reminders(member.id) == []


def test_moving_the_due_date_rearms_the_trigger(app, owner, member, project, due_soon_rule):
    task = create_task(
        owner.id, project.id, title="Fix bug", assignee_id=member.id, due_date=NOW - timedelta(hours=2)
    )
    sweep_overdue_tasks(now=NOW)

    task = update_task(owner.id, task.id, due_date=NOW + timedelta(hours=1))
    assert task.due_passed_at is None
    sweep_overdue_tasks(now=NOW + timedelta(hours=2))

    assert len(_reminders(member.id)) == 2


def test_sweep_can_be_limited_to_one_project(app, owner, member, project, due_soon_rule):
    create_task(owner.id, project.id, title="Fix bug", assignee_id=member.id, due_date=NOW - timedelta(hours=1))

    assert sweep_overdue_tasks(now=NOW, project_id=project.id + 1)["overdue"] == 0
    assert sweep_overdue_tasks(now=NOW, project_id=project.id)["fired"] == 1


def test_cli_command_runs_the_sweep(app, owner, member, project, due_soon_rule):
    create_task(
        owner.id, project.id, title="Fix bug", assignee_id=member.id, due_date=datetime.utcnow() - timedelta(hours=1)
    )

    result = app.test_cli_runner().invoke(args=["sweep-due-tasks", "--project", str(project.id)])

    assert result.exit_code == 0, result.output
    assert "Fired: 1" in result.output
    assert len(_reminders(member.id)) == 1
