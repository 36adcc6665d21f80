"""Read access and execution bookkeeping for stored automation rules."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.automations.rules import TriggerKind
from taskboard.extensions import db


def list_active_rules(project_id: int, trigger_kind: TriggerKind) -> List[AutomationRule]:
    """Active rules of one trigger kind, in store order (insertion order)."""
    return (
        AutomationRule.query.filter_by(
            project_id=project_id, active=True, trigger_kind=trigger_kind.value
        )
        .order_by(AutomationRule.id.asc())
        .all()
    )


def record_execution(rule_id: int, executed_at: Optional[datetime] = None) -> int:
    """Bump execution_count and stamp last_executed_at in a single UPDATE.

    The increment happens in SQL so concurrent executions of the same rule
    never overwrite each other's count.
    """
    executed_at = executed_at or datetime.utcnow()
    updated = AutomationRule.query.filter_by(id=rule_id).update(
        {
            AutomationRule.execution_count: AutomationRule.execution_count + 1,
            AutomationRule.last_executed_at: executed_at,
        },
        synchronize_session="fetch",
    )
    db.session.commit()
    return updated
