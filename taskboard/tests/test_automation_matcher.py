import pytest

from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.automations.rules import (
    AssigneeChangeTrigger,
    DueDatePassedTrigger,
    StatusChangeTrigger,
    TaskTransitionEvent,
    TriggerKind,
)
from taskboard.domains.automations.services import matcher
from taskboard.domains.automations.services.rule_service import create_rule, toggle_rule
from taskboard.extensions import db


def _status_event(from_value="To Do", to_value="Done", project_id=1):
    return TaskTransitionEvent(
        project_id=project_id,
        task_id=1,
        trigger_kind=TriggerKind.STATUS_CHANGE,
        from_value=from_value,
        to_value=to_value,
    )


@pytest.mark.unit
class TestTriggerMatches:
    def test_exact_status_transition(self):
        trigger = StatusChangeTrigger(from_status="To Do", to_status="Done")
        assert matcher.trigger_matches(trigger, _status_event("To Do", "Done"))
        assert not matcher.trigger_matches(trigger, _status_event("In Progress", "Done"))

    def test_unset_conditions_match_any_transition(self):
        assert matcher.trigger_matches(StatusChangeTrigger(), _status_event("In Progress", "To Do"))
        assert matcher.trigger_matches(StatusChangeTrigger(to_status="Done"), _status_event("In Progress", "Done"))
        assert matcher.trigger_matches(StatusChangeTrigger(from_status="To Do"), _status_event("To Do", "In Progress"))

    def test_assignee_compared_as_string(self):
        event = TaskTransitionEvent(
            project_id=1, task_id=1, trigger_kind=TriggerKind.ASSIGNEE_CHANGE, from_value=None, to_value="5"
        )
        assert matcher.trigger_matches(AssigneeChangeTrigger(assignee_id=5), event)
        assert not matcher.trigger_matches(AssigneeChangeTrigger(assignee_id=6), event)
        assert matcher.trigger_matches(AssigneeChangeTrigger(), event)

    def test_kind_mismatch_never_matches(self):
        assert not matcher.trigger_matches(DueDatePassedTrigger(), _status_event())

    def test_supplied_candidates_are_filtered(self):
        active = AutomationRule(
            id=1, project_id=1, name="a", active=True, trigger_kind="status_change",
            trigger_conditions={"to_status": "Done"}, action_kind="award_badge",
            action_params={"badge_name": "x"},
        )
        inactive = AutomationRule(
            id=2, project_id=1, name="b", active=False, trigger_kind="status_change",
            trigger_conditions={}, action_kind="award_badge", action_params={"badge_name": "x"},
        )
        other_project = AutomationRule(
            id=3, project_id=2, name="c", active=True, trigger_kind="status_change",
            trigger_conditions={}, action_kind="award_badge", action_params={"badge_name": "x"},
        )
        broken = AutomationRule(
            id=4, project_id=1, name="d", active=True, trigger_kind="status_change",
            trigger_conditions={"to_status": 12}, action_kind="award_badge",
            action_params={"badge_name": "x"},
        )
        rules = [active, inactive, other_project, broken]
        matched = matcher.match(1, TriggerKind.STATUS_CHANGE, _status_event(), rules=rules)
        assert matched == [active]


@pytest.mark.integration
class TestMatchAgainstStore:
    def _rule(self, owner, project, name, conditions):
        return create_rule(
            owner.id,
            project.id,
            name=name,
            trigger_kind="status_change",
            trigger_conditions=conditions,
            action_kind="award_badge",
            action_params={"badge_name": name},
        )

    def test_returns_all_matches_in_store_order(self, app, owner, project):
        first = self._rule(owner, project, "exact", {"from_status": "To Do", "to_status": "Done"})
        self._rule(owner, project, "other", {"to_status": "In Progress"})
        wildcard = self._rule(owner, project, "any", {})

        matched = matcher.match(project.id, TriggerKind.STATUS_CHANGE, _status_event(project_id=project.id))
        assert [r.id for r in matched] == [first.id, wildcard.id]

    def test_inactive_rules_never_match(self, app, owner, project):
        rule = self._rule(owner, project, "exact", {"to_status": "Done"})
        toggle_rule(owner.id, rule.id, active=False)

        matched = matcher.match(project.id, TriggerKind.STATUS_CHANGE, _status_event(project_id=project.id))
        assert matched == []
        assert db.session.get(AutomationRule, rule.id).active is False

    def test_no_rules_is_a_valid_result(self, app, project):
        assert matcher.match(project.id, TriggerKind.DUE_DATE_PASSED, _status_event(project_id=project.id)) == []
