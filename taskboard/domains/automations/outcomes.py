"""Per-rule execution results and the batch report collected per event."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from taskboard.domains.automations.errors import AutomationError
from taskboard.domains.automations.rules import TaskTransitionEvent


class OutcomeStatus(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ExecutionOutcome:
    rule_id: int
    rule_name: str
    action_kind: str
    status: OutcomeStatus
    detail: Optional[str] = None
    error: Optional[AutomationError] = None
    # Transition caused by the action itself (change_status only).
    follow_up: Optional[TaskTransitionEvent] = None
    bookkeeping_error: Optional[str] = None
    latency_ms: float = 0.0

    @classmethod
    def applied(cls, rule, detail: str | None = None, follow_up: TaskTransitionEvent | None = None) -> "ExecutionOutcome":
        return cls(rule.id, rule.name, rule.action_kind, OutcomeStatus.APPLIED, detail=detail, follow_up=follow_up)

    @classmethod
    def skipped(cls, rule, detail: str) -> "ExecutionOutcome":
        return cls(rule.id, rule.name, rule.action_kind, OutcomeStatus.SKIPPED, detail=detail)

    @classmethod
    def failed(cls, rule, error: AutomationError) -> "ExecutionOutcome":
        error.rule_id = error.rule_id or rule.id
        return cls(
            rule.id, rule.name, rule.action_kind, OutcomeStatus.FAILED, detail=error.message, error=error
        )

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED

    def to_dict(self) -> dict:
        return {
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "action_kind": self.action_kind,
            "status": self.status.value,
            "detail": self.detail,
            "error": self.error.to_dict() if self.error else None,
            "bookkeeping_error": self.bookkeeping_error,
        }


@dataclass
class BatchReport:
    """All rule outcomes produced by one transition event, in execution order."""

    event: TaskTransitionEvent
    outcomes: List[ExecutionOutcome] = field(default_factory=list)
    follow_ups: List["BatchReport"] = field(default_factory=list)

    def _with_status(self, status: OutcomeStatus) -> List[ExecutionOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def applied(self) -> List[ExecutionOutcome]:
        return self._with_status(OutcomeStatus.APPLIED)

    @property
    def skipped(self) -> List[ExecutionOutcome]:
        return self._with_status(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> List[ExecutionOutcome]:
        return self._with_status(OutcomeStatus.FAILED)

    @property
    def matched_rule_ids(self) -> List[int]:
        return [o.rule_id for o in self.outcomes]

    def all_outcomes(self) -> List[ExecutionOutcome]:
        """Outcomes of this event followed by those of any chained events."""
        collected = list(self.outcomes)
        for child in self.follow_ups:
            collected.extend(child.all_outcomes())
        return collected

    def summary(self) -> dict:
        return {
            "trigger_kind": self.event.trigger_kind.value,
            "matched": len(self.outcomes),
            "applied": len(self.applied),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }

    def to_dict(self) -> dict:
        return {
            "event": self.event.to_dict(),
            "outcomes": [o.to_dict() for o in self.outcomes],
            "follow_ups": [child.to_dict() for child in self.follow_ups],
        }


__all__ = ["BatchReport", "ExecutionOutcome", "OutcomeStatus"]
