"""Typed trigger/action definitions and the transition event they react to.

Rules are stored as a kind string plus a JSON payload. Everything past the
model boundary works with the dataclasses below instead, so that matching and
execution dispatch over a closed set of types rather than on raw strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Union

from taskboard.domains.automations.errors import ConfigurationError
from taskboard.domains.notifications.models.notification_models import NOTIFICATION_TYPES

TASK_TITLE_PLACEHOLDERS = ("${taskTitle}", "{{taskTitle}}")


class TriggerKind(str, Enum):
    STATUS_CHANGE = "status_change"
    ASSIGNEE_CHANGE = "assignee_change"
    DUE_DATE_PASSED = "due_date_passed"


class ActionKind(str, Enum):
    CHANGE_STATUS = "change_status"
    AWARD_BADGE = "award_badge"
    SEND_NOTIFICATION = "send_notification"


@dataclass(frozen=True)
class StatusChangeTrigger:
    from_status: Optional[str] = None
    to_status: Optional[str] = None

    kind = TriggerKind.STATUS_CHANGE

    def conditions(self) -> dict:
        return _drop_none({"from_status": self.from_status, "to_status": self.to_status})


@dataclass(frozen=True)
class AssigneeChangeTrigger:
    assignee_id: Optional[int] = None

    kind = TriggerKind.ASSIGNEE_CHANGE

    def conditions(self) -> dict:
        return _drop_none({"assignee_id": self.assignee_id})


@dataclass(frozen=True)
class DueDatePassedTrigger:
    kind = TriggerKind.DUE_DATE_PASSED

    def conditions(self) -> dict:
        return {}


@dataclass(frozen=True)
class ChangeStatusAction:
    status: str

    kind = ActionKind.CHANGE_STATUS

    def params(self) -> dict:
        return {"status": self.status}


@dataclass(frozen=True)
class AwardBadgeAction:
    badge_name: str

    kind = ActionKind.AWARD_BADGE

    def params(self) -> dict:
        return {"badge_name": self.badge_name}


@dataclass(frozen=True)
class SendNotificationAction:
    message: str
    notification_type: str = "info"

    kind = ActionKind.SEND_NOTIFICATION

    def params(self) -> dict:
        return {"message": self.message, "notification_type": self.notification_type}

    def render(self, task_title: str) -> str:
        """Substitute the task title placeholder; no other templating is done."""
        rendered = self.message
        for placeholder in TASK_TITLE_PLACEHOLDERS:
            rendered = rendered.replace(placeholder, task_title)
        return rendered


Trigger = Union[StatusChangeTrigger, AssigneeChangeTrigger, DueDatePassedTrigger]
Action = Union[ChangeStatusAction, AwardBadgeAction, SendNotificationAction]


@dataclass(frozen=True)
class TaskTransitionEvent:
    """A single tracked-field change on a task. Consumed once, never stored."""

    project_id: int
    task_id: int
    trigger_kind: TriggerKind
    from_value: Optional[str] = None
    to_value: Optional[str] = None
    acting_user_id: Optional[int] = None
    occurred_at: datetime = field(default_factory=datetime.utcnow)
    # How many automation hops produced this event; 0 for user mutations.
    depth: int = 0

    def to_dict(self) -> dict:
        return {
            "project_id": self.project_id,
            "task_id": self.task_id,
            "trigger_kind": self.trigger_kind.value,
            "from_value": self.from_value,
            "to_value": self.to_value,
            "acting_user_id": self.acting_user_id,
            "occurred_at": self.occurred_at.isoformat(),
            "depth": self.depth,
        }


def _drop_none(values: dict) -> dict:
    return {k: v for k, v in values.items() if v is not None}


def _optional_str(conditions: Mapping[str, Any], key: str) -> Optional[str]:
    value = conditions.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{key} must be a string")
    value = value.strip()
    # An empty condition means "any", same as leaving it out.
    return value or None


def _required_str(params: Mapping[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"{key} is required")
    return value.strip()


def parse_trigger_kind(kind: str | TriggerKind) -> TriggerKind:
    try:
        return TriggerKind(kind)
    except ValueError:
        raise ConfigurationError(f"unknown trigger kind: {kind}") from None


def parse_action_kind(kind: str | ActionKind) -> ActionKind:
    try:
        return ActionKind(kind)
    except ValueError:
        raise ConfigurationError(f"unknown action kind: {kind}") from None


def parse_trigger(kind: str | TriggerKind, conditions: Mapping[str, Any] | None = None) -> Trigger:
    trigger_kind = parse_trigger_kind(kind)
    conditions = conditions or {}
    if trigger_kind is TriggerKind.STATUS_CHANGE:
        return StatusChangeTrigger(
            from_status=_optional_str(conditions, "from_status"),
            to_status=_optional_str(conditions, "to_status"),
        )
    if trigger_kind is TriggerKind.ASSIGNEE_CHANGE:
        assignee_id = conditions.get("assignee_id")
        if assignee_id in (None, ""):
            return AssigneeChangeTrigger()
        try:
            return AssigneeChangeTrigger(assignee_id=int(assignee_id))
        except (TypeError, ValueError):
            raise ConfigurationError("assignee_id must be a user id") from None
    if trigger_kind is TriggerKind.DUE_DATE_PASSED:
        return DueDatePassedTrigger()
    raise ConfigurationError(f"unhandled trigger kind: {trigger_kind}")


def parse_action(kind: str | ActionKind, params: Mapping[str, Any] | None = None) -> Action:
    action_kind = parse_action_kind(kind)
    params = params or {}
    if action_kind is ActionKind.CHANGE_STATUS:
        return ChangeStatusAction(status=_required_str(params, "status"))
    if action_kind is ActionKind.AWARD_BADGE:
        return AwardBadgeAction(badge_name=_required_str(params, "badge_name"))
    if action_kind is ActionKind.SEND_NOTIFICATION:
        notification_type = params.get("notification_type") or "info"
        if notification_type not in NOTIFICATION_TYPES:
            raise ConfigurationError(f"unknown notification type: {notification_type}")
        return SendNotificationAction(
            message=_required_str(params, "message"),
            notification_type=notification_type,
        )
    raise ConfigurationError(f"unhandled action kind: {action_kind}")


__all__ = [
    "Action",
    "ActionKind",
    "AssigneeChangeTrigger",
    "AwardBadgeAction",
    "ChangeStatusAction",
    "DueDatePassedTrigger",
    "SendNotificationAction",
    "StatusChangeTrigger",
    "TaskTransitionEvent",
    "Trigger",
    "TriggerKind",
    "parse_action",
    "parse_action_kind",
    "parse_trigger",
    "parse_trigger_kind",
]
