"""Tests for automation rule CRUD and definition validation."""

import pytest

from taskboard.domains.automations.errors import ConfigurationError
from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.automations.rules import DueDatePassedTrigger, SendNotificationAction
from taskboard.domains.automations.services import rule_service
from taskboard.extensions import db

pytestmark = pytest.mark.integration


def _create(user, project, **overrides):
    fields = dict(
        name="Finisher badge",
        trigger_kind="status_change",
        trigger_conditions={"to_status": "Done"},
        action_kind="award_badge",
        action_params={"badge_name": "Finisher"},
    )
    fields.update(overrides)
    return rule_service.create_rule(user.id, project.id, **fields)


class TestCreateRule:
    def test_create_persists_definition(self, app, owner, project):
        rule = _create(owner, project)

        assert rule.id is not None
        assert rule.active is True
        assert rule.created_by == owner.id
        assert rule.execution_count == 0
        assert rule.last_executed_at is None
        assert rule.trigger_conditions == {"to_status": "Done"}

    def test_unknown_target_status_is_rejected(self, app, owner, project):
        with pytest.raises(ConfigurationError):
            _create(owner, project, action_kind="change_status", action_params={"status": "Archived"})
        assert AutomationRule.query.count() == 0

    def test_unknown_trigger_status_is_rejected(self, app, owner, project):
        with pytest.raises(ConfigurationError):
            _create(owner, project, trigger_conditions={"from_status": "Backlog"})

    def test_assignee_condition_must_be_a_member(self, app, owner, project, user_factory):
        outsider = user_factory("outsider@example.com")
        with pytest.raises(ConfigurationError):
            _create(owner, project, trigger_kind="assignee_change", trigger_conditions={"assignee_id": outsider.id})

    def test_blank_name_is_rejected(self, app, owner, project):
        with pytest.raises(ConfigurationError):
            _create(owner, project, name="   ")

    def test_plain_member_cannot_create(self, app, member, project):
        with pytest.raises(ValueError, match="forbidden"):
            _create(member, project)

    def test_unknown_project(self, app, owner):
        with pytest.raises(ValueError, match="not_found"):
            rule_service.create_rule(
                owner.id, 999, name="x", trigger_kind="due_date_passed",
                action_kind="award_badge", action_params={"badge_name": "x"},
            )


class TestReadRules:
    def test_members_can_list_and_get(self, app, owner, member, project):
        first = _create(owner, project)
        second = _create(owner, project, name="Second", active=False)

        assert [r.id for r in rule_service.list_rules(member.id, project.id)] == [first.id, second.id]
        assert [r.id for r in rule_service.list_rules(member.id, project.id, active=True)] == [first.id]
        assert rule_service.get_rule(member.id, first.id).id == first.id

    def test_outsiders_cannot_read(self, app, owner, project, user_factory):
        rule = _create(owner, project)
        outsider = user_factory("outsider@example.com")

        assert rule_service.get_rule(outsider.id, rule.id) is None
        with pytest.raises(ValueError, match="forbidden"):
            rule_service.list_rules(outsider.id, project.id)


class TestUpdateRule:
    def test_switching_kinds_resets_conditions(self, app, owner, project):
        rule = _create(owner, project)

        updated = rule_service.update_rule(
            owner.id,
            rule.id,
            trigger_kind="due_date_passed",
            action_kind="send_notification",
            action_params={"message": "${taskTitle} is late"},
        )

        assert updated.trigger == DueDatePassedTrigger()
        assert updated.trigger_conditions == {}
        assert updated.action == SendNotificationAction(message="${taskTitle} is late")

    def test_invalid_update_leaves_rule_untouched(self, app, owner, project):
        rule = _create(owner, project)

        with pytest.raises(ConfigurationError):
            rule_service.update_rule(owner.id, rule.id, name="Renamed", trigger_conditions={"to_status": "Nope"})

        db.session.refresh(rule)
        assert rule.name == "Finisher badge"
        assert rule.trigger_conditions == {"to_status": "Done"}

    def test_toggle_flips_and_sets(self, app, owner, project):
        rule = _create(owner, project)

        assert rule_service.toggle_rule(owner.id, rule.id).active is False
        assert rule_service.toggle_rule(owner.id, rule.id).active is True
        assert rule_service.toggle_rule(owner.id, rule.id, active=False).active is False

    def test_member_cannot_toggle(self, app, owner, member, project):
        rule = _create(owner, project)
        with pytest.raises(ValueError, match="forbidden"):
            rule_service.toggle_rule(member.id, rule.id)

    def test_delete(self, app, owner, project):
        rule = _create(owner, project)

        assert rule_service.delete_rule(owner.id, rule.id) is True
        assert rule_service.delete_rule(owner.id, rule.id) is False
        assert db.session.get(AutomationRule, rule.id) is None
