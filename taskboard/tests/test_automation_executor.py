"""Tests for applying a single rule's action to a task."""

import pytest

from taskboard.core.users.models import User
from taskboard.domains.automations.outcomes import OutcomeStatus
from taskboard.domains.automations.rules import TriggerKind
from taskboard.domains.automations.services import executor
from taskboard.domains.automations.services.rule_service import create_rule
from taskboard.domains.notifications.models.notification_models import Notification
from taskboard.domains.projects.models.project_models import TaskHistory
from taskboard.domains.projects.services.project_service import set_statuses
from taskboard.domains.projects.services.task_service import create_task
from taskboard.extensions import db

pytestmark = pytest.mark.integration


def _rule(owner, project, action_kind, params, trigger_kind="status_change", conditions=None):
    return create_rule(
        owner.id,
        project.id,
        name=f"{action_kind} rule",
        trigger_kind=trigger_kind,
        trigger_conditions=conditions or {},
        action_kind=action_kind,
        action_params=params,
    )


def _notifications(user_id, title):
    return Notification.query.filter_by(recipient_id=user_id, title=title).all()


class TestChangeStatus:
    def test_sets_status_and_writes_history(self, app, owner, member, project):
        task = create_task(owner.id, project.id, title="Fix bug", assignee_id=member.id)
        rule = _rule(owner, project, "change_status", {"status": "In Progress"})

        outcome = executor.execute(rule, task, member.id)

        assert outcome.status is OutcomeStatus.APPLIED
        assert task.status == "In Progress"
        history = TaskHistory.query.filter_by(task_id=task.id, field="status").all()
        assert [(h.old_value, h.new_value, h.changed_by) for h in history] == [
            ("To Do", "In Progress", member.id)
        ]
        assert outcome.follow_up.trigger_kind is TriggerKind.STATUS_CHANGE
        assert (outcome.follow_up.from_value, outcome.follow_up.to_value) == ("To Do", "In Progress")

    def test_same_status_is_skipped(self, app, owner, project):
        task = create_task(owner.id, project.id, title="Fix bug")
        rule = _rule(owner, project, "change_status", {"status": "To Do"})

        outcome = executor.execute(rule, task, owner.id)

        assert outcome.status is OutcomeStatus.SKIPPED
        assert TaskHistory.query.filter_by(task_id=task.id).count() == 0

    def test_status_removed_after_save_is_a_configuration_error(self, app, owner, project):
        task = create_task(owner.id, project.id, title="Fix bug")
        rule = _rule(owner, project, "change_status", {"status": "In Progress"})
        set_statuses(owner.id, project.id, [("To Do", None), ("Done", None)])

        outcome = executor.execute(rule, task, owner.id)

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.error.kind == "configuration_error"
        assert outcome.error.rule_id == rule.id
        assert db.session.get(type(task), task.id).status == "To Do"


class TestAwardBadge:
    def test_without_assignee_is_a_no_op(self, app, owner, project):
        task = create_task(owner.id, project.id, title="Fix bug")
        rule = _rule(owner, project, "award_badge", {"badge_name": "Finisher"})

        outcome = executor.execute(rule, task, owner.id)

        assert outcome.status is OutcomeStatus.SKIPPED
        assert Notification.query.filter_by(title="Badge Awarded").count() == 0

    def test_badge_set_is_idempotent(self, app, owner, member, project):
        task = create_task(owner.id, project.id, title="Fix bug", assignee_id=member.id)
        rule = _rule(owner, project, "award_badge", {"badge_name": "Finisher"})

        first = executor.execute(rule, task, owner.id)
        second = executor.execute(rule, task, owner.id)

        assert first.status is OutcomeStatus.APPLIED
        assert second.status is OutcomeStatus.APPLIED
        assert second.detail == "badge already held"
        assert db.session.get(User, member.id).badges == ["Finisher"]
        notifications = _notifications(member.id, "Badge Awarded")
        assert len(notifications) == 2
        assert notifications[0].type == "success"
        assert notifications[0].related_task_id == task.id

    def test_missing_assignee_is_a_lookup_failure(self, app, owner, project):
        task = create_task(owner.id, project.id, title="Fix bug")
        task.assignee_id = 9999
        db.session.commit()
        rule = _rule(owner, project, "award_badge", {"badge_name": "Finisher"})

        outcome = executor.execute(rule, task, owner.id)

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.error.kind == "lookup_failure"


class TestSendNotification:
    def test_renders_title_for_assignee(self, app, owner, member, project):
        task = create_task(owner.id, project.id, title="Fix bug", assignee_id=member.id)
        rule = _rule(
            owner,
            project,
            "send_notification",
            {"message": "{{taskTitle}} needs review", "notification_type": "warning"},
        )

        outcome = executor.execute(rule, task, owner.id)

        assert outcome.status is OutcomeStatus.APPLIED
        (notification,) = _notifications(member.id, "Task Notification")
        assert notification.message == "Fix bug needs review"
        assert notification.type == "warning"
        assert notification.related_project_id == project.id

    def test_without_assignee_is_a_no_op(self, app, owner, project):
        task = create_task(owner.id, project.id, title="Fix bug")
        rule = _rule(owner, project, "send_notification", {"message": "hello"})

        outcome = executor.execute(rule, task, owner.id)

        assert outcome.status is OutcomeStatus.SKIPPED
        assert Notification.query.filter_by(title="Task Notification").count() == 0
