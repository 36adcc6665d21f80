import pytest

from taskboard.domains.automations.errors import ConfigurationError
from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.automations.rules import (
    ActionKind,
    AssigneeChangeTrigger,
    AwardBadgeAction,
    ChangeStatusAction,
    DueDatePassedTrigger,
    SendNotificationAction,
    StatusChangeTrigger,
    TriggerKind,
    parse_action,
    parse_trigger,
)

pytestmark = pytest.mark.unit


def test_parse_status_change_trigger_with_both_conditions():
    trigger = parse_trigger("status_change", {"from_status": "To Do", "to_status": "Done"})
    assert trigger == StatusChangeTrigger(from_status="To Do", to_status="Done")
    assert trigger.kind is TriggerKind.STATUS_CHANGE


def test_empty_conditions_are_wildcards():
    trigger = parse_trigger("status_change", {"from_status": "", "to_status": "  "})
    assert trigger == StatusChangeTrigger()
    assert trigger.conditions() == {}


def test_parse_assignee_trigger_coerces_id():
    assert parse_trigger("assignee_change", {"assignee_id": "7"}) == AssigneeChangeTrigger(assignee_id=7)
    assert parse_trigger("assignee_change", {}) == AssigneeChangeTrigger()


def test_parse_assignee_trigger_rejects_garbage():
    with pytest.raises(ConfigurationError):
        parse_trigger("assignee_change", {"assignee_id": "someone"})


def test_due_date_trigger_has_no_conditions():
    assert parse_trigger(TriggerKind.DUE_DATE_PASSED, None) == DueDatePassedTrigger()


def test_unknown_kinds_raise_configuration_error():
    with pytest.raises(ConfigurationError):
        parse_trigger("priority_change", {})
    with pytest.raises(ConfigurationError):
        parse_action("delete_task", {})


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        parse_action("change_status", {})


def test_parse_actions():
    assert parse_action("change_status", {"status": "Done"}) == ChangeStatusAction(status="Done")
    assert parse_action("award_badge", {"badge_name": "Finisher"}) == AwardBadgeAction(badge_name="Finisher")
    action = parse_action("send_notification", {"message": "hi"})
    assert action == SendNotificationAction(message="hi", notification_type="info")


def test_send_notification_rejects_unknown_type():
    with pytest.raises(ConfigurationError):
        parse_action("send_notification", {"message": "hi", "notification_type": "urgent"})


def test_render_substitutes_task_title():
    action = SendNotificationAction(message='Task "${taskTitle}" is due soon.')
    assert action.render("Fix bug") == 'Task "Fix bug" is due soon.'


def test_render_accepts_legacy_placeholder_and_leaves_other_text():
    action = SendNotificationAction(message="{{taskTitle}} / ${taskTitle} / ${other}")
    assert action.render("Ship") == "Ship / Ship / ${other}"


def test_rule_model_round_trips_typed_definitions():
    rule = AutomationRule(name="Finish", project_id=1)
    rule.trigger = StatusChangeTrigger(to_status="Done")
    rule.action = AwardBadgeAction(badge_name="Finisher")

    assert rule.trigger_kind == "status_change"
    assert rule.trigger_conditions == {"to_status": "Done"}
    assert rule.action_kind == ActionKind.AWARD_BADGE.value
    assert rule.action_params == {"badge_name": "Finisher"}
    assert rule.trigger == StatusChangeTrigger(to_status="Done")
    assert rule.action == AwardBadgeAction(badge_name="Finisher")
