"""DTO mappers for automation rules."""

from __future__ import annotations

from taskboard.domains.automations.models.automation_models import AutomationRule


def map_rule(rule: AutomationRule) -> dict:
    return {
        "id": rule.id,
        "project_id": rule.project_id,
        "created_by": rule.created_by,
        "name": rule.name,
        "active": rule.active,
        "trigger": {"kind": rule.trigger_kind, **(rule.trigger_conditions or {})},
        "action": {"kind": rule.action_kind, **(rule.action_params or {})},
        "execution_count": rule.execution_count,
        "last_executed_at": rule.last_executed_at.isoformat() if rule.last_executed_at else None,
        "created_at": rule.created_at.isoformat() if rule.created_at else None,
        "updated_at": rule.updated_at.isoformat() if rule.updated_at else None,
    }
