"""Rule matching: which stored rules apply to a task transition."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from taskboard.domains.automations.errors import ConfigurationError
from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.automations.rules import (
    AssigneeChangeTrigger,
    DueDatePassedTrigger,
    StatusChangeTrigger,
    TaskTransitionEvent,
    Trigger,
    TriggerKind,
)
from taskboard.domains.automations.services import rule_store

logger = logging.getLogger(__name__)


def trigger_matches(trigger: Trigger, event: TaskTransitionEvent) -> bool:
    """Whether a trigger's conditions accept the event. Unset conditions match anything."""
    if trigger.kind is not event.trigger_kind:
        return False
    if isinstance(trigger, StatusChangeTrigger):
        if trigger.from_status is not None and trigger.from_status != event.from_value:
            return False
        if trigger.to_status is not None and trigger.to_status != event.to_value:
            return False
        return True
    if isinstance(trigger, AssigneeChangeTrigger):
        if trigger.assignee_id is None:
            return True
        return str(trigger.assignee_id) == event.to_value
    if isinstance(trigger, DueDatePassedTrigger):
        return True
    raise TypeError(f"unhandled trigger type: {type(trigger).__name__}")


def match(
    project_id: int,
    trigger_kind: TriggerKind,
    event: TaskTransitionEvent,
    rules: Optional[Iterable[AutomationRule]] = None,
) -> List[AutomationRule]:
    """Return every active rule of the project whose trigger accepts the event.

    Store order is preserved and no rule is preferred over another. `rules`
    can be supplied to match against an already-loaded candidate list.
    """
    candidates = rules if rules is not None else rule_store.list_active_rules(project_id, trigger_kind)
    matched: List[AutomationRule] = []
    for rule in candidates:
        if not rule.active or rule.project_id != project_id:
            continue
        if rule.trigger_kind != trigger_kind.value:
            continue
        try:
            trigger = rule.trigger
        except ConfigurationError as exc:
            logger.warning("Skipping automation %s with unreadable trigger: %s", rule.id, exc)
            continue
        if trigger_matches(trigger, event):
            matched.append(rule)
    return matched
