"""Automations domain event catalog."""

from __future__ import annotations

# Broadcast to project subscribers after a rule's action was applied.
AUTOMATION_TRIGGERED = "automations.rule.triggered"

EVENT_CATALOG = {
    AUTOMATION_TRIGGERED: {
        "version": "v1",
        "payload": {
            "task_id": "int",
            "automation_id": "int",
            "automation_name": "str",
            "project_id": "int",
        },
    },
}

__all__ = ["AUTOMATION_TRIGGERED", "EVENT_CATALOG"]
