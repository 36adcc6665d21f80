"""Automation rule CRUD.

Definitions are validated against the owning project when saved: statuses
named by a status_change trigger or a change_status action must exist on the
project, and an assignee condition must name a project member. Later status
edits are not propagated; the executor reports such rules as configuration
errors when they fire.
"""

from __future__ import annotations

import dataclasses
from typing import Any, List, Mapping, Optional

from taskboard.domains.automations.errors import ConfigurationError
from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.automations.rules import (
    Action,
    AssigneeChangeTrigger,
    ChangeStatusAction,
    StatusChangeTrigger,
    Trigger,
    parse_action,
    parse_trigger,
)
from taskboard.domains.automations.telemetry import AutomationTelemetrySnapshot, automation_telemetry
from taskboard.domains.projects.models.project_models import Project
from taskboard.domains.projects.services.project_service import require_admin, require_member
from taskboard.extensions import db


def _validate_definition(project: Project, trigger: Trigger, action: Action) -> None:
    statuses = project.status_names
    if isinstance(trigger, StatusChangeTrigger):
        for status in (trigger.from_status, trigger.to_status):
            if status is not None and status not in statuses:
                raise ConfigurationError(f"unknown status '{status}' for project {project.id}")
    if isinstance(trigger, AssigneeChangeTrigger) and trigger.assignee_id is not None:
        if project.member_role(trigger.assignee_id) is None:
            raise ConfigurationError(f"user {trigger.assignee_id} is not a member of project {project.id}")
    if isinstance(action, ChangeStatusAction) and action.status not in statuses:
        raise ConfigurationError(f"unknown status '{action.status}' for project {project.id}")


def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ConfigurationError("name is required")
    return name


def create_rule(
    user_id: int,
    project_id: int,
    *,
    name: str,
    trigger_kind: str,
    trigger_conditions: Optional[Mapping[str, Any]] = None,
    action_kind: str,
    action_params: Optional[Mapping[str, Any]] = None,
    active: bool = True,
) -> AutomationRule:
    project = require_admin(user_id, project_id)
    trigger = parse_trigger(trigger_kind, trigger_conditions)
    action = parse_action(action_kind, action_params)
    _validate_definition(project, trigger, action)
    rule = AutomationRule(
        project_id=project.id,
        created_by=user_id,
        name=_clean_name(name),
        active=active,
    )
    rule.trigger = trigger
    rule.action = action
    db.session.add(rule)
    db.session.commit()
    return rule


def get_rule(user_id: int, rule_id: int) -> AutomationRule | None:
    rule = db.session.get(AutomationRule, rule_id)
    if not rule:
        return None
    project = db.session.get(Project, rule.project_id)
    if not project or project.member_role(user_id) is None:
        return None
    return rule


def list_rules(user_id: int, project_id: int, *, active: bool | None = None) -> List[AutomationRule]:
    require_member(user_id, project_id)
    query = AutomationRule.query.filter_by(project_id=project_id)
    if active is not None:
        query = query.filter(AutomationRule.active == active)
    return query.order_by(AutomationRule.id.asc()).all()


def _admin_rule(user_id: int, rule_id: int) -> tuple[AutomationRule, Project]:
    rule = db.session.get(AutomationRule, rule_id)
    if not rule:
        raise ValueError("not_found")
    return rule, require_admin(user_id, rule.project_id)


def update_rule(user_id: int, rule_id: int, **fields) -> AutomationRule:
    """Partially update a rule. Changing a kind without new conditions/params resets them."""
    rule, project = _admin_rule(user_id, rule_id)

    trigger_kind = fields.get("trigger_kind") or rule.trigger_kind
    if fields.get("trigger_conditions") is not None:
        conditions = fields["trigger_conditions"]
    elif trigger_kind != rule.trigger_kind:
        conditions = {}
    else:
        conditions = rule.trigger_conditions

    action_kind = fields.get("action_kind") or rule.action_kind
    if fields.get("action_params") is not None:
        params = fields["action_params"]
    elif action_kind != rule.action_kind:
        params = {}
    else:
        params = rule.action_params

    trigger = parse_trigger(trigger_kind, conditions)
    action = parse_action(action_kind, params)
    _validate_definition(project, trigger, action)

    if fields.get("name") is not None:
        rule.name = _clean_name(fields["name"])
    if fields.get("active") is not None:
        rule.active = bool(fields["active"])
    rule.trigger = trigger
    rule.action = action
    db.session.commit()
    return rule


def toggle_rule(user_id: int, rule_id: int, active: bool | None = None) -> AutomationRule:
    rule, _ = _admin_rule(user_id, rule_id)
    rule.active = (not rule.active) if active is None else active
    db.session.commit()
    return rule


def delete_rule(user_id: int, rule_id: int) -> bool:
    rule = db.session.get(AutomationRule, rule_id)
    if not rule:
        return False
    require_admin(user_id, rule.project_id)
    db.session.delete(rule)
    db.session.commit()
    return True


def project_telemetry(user_id: int, project_id: int) -> AutomationTelemetrySnapshot:
    """Telemetry snapshot with per-rule figures limited to the project's rules."""
    require_admin(user_id, project_id)
    rule_ids = {
        str(rule_id)
        for (rule_id,) in db.session.query(AutomationRule.id).filter_by(project_id=project_id)
    }
    snapshot = automation_telemetry.snapshot()
    return dataclasses.replace(
        snapshot,
        per_rule_counts={k: v for k, v in snapshot.per_rule_counts.items() if k in rule_ids},
        per_rule_avg_latency_ms={
            k: v for k, v in snapshot.per_rule_avg_latency_ms.items() if k in rule_ids
        },
    )


__all__ = [
    "create_rule",
    "delete_rule",
    "get_rule",
    "list_rules",
    "project_telemetry",
    "toggle_rule",
    "update_rule",
]
