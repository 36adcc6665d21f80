"""Outcome reporting: execution bookkeeping, telemetry and the triggered broadcast."""

from __future__ import annotations

import logging
from typing import Optional

from flask import current_app

from taskboard.core.events.event_service import log_event
from taskboard.domains.automations.events import AUTOMATION_TRIGGERED
from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.automations.outcomes import ExecutionOutcome, OutcomeStatus
from taskboard.domains.automations.rules import TaskTransitionEvent
from taskboard.domains.automations.services import rule_store
from taskboard.domains.automations.telemetry import AutomationTelemetry, automation_telemetry
from taskboard.extensions import db

logger = logging.getLogger(__name__)


class OutcomeReporter:
    def __init__(self, telemetry: Optional[AutomationTelemetry] = None) -> None:
        self.telemetry = telemetry or automation_telemetry

    def report(self, rule: AutomationRule, event: TaskTransitionEvent, outcome: ExecutionOutcome) -> None:
        error_kind = outcome.error.kind if outcome.error else None
        self.telemetry.record_rule(outcome.rule_id, outcome.status.value, outcome.latency_ms, error_kind)

        if outcome.status is OutcomeStatus.FAILED:
            logger.warning(
                "Automation %s (%s) failed on task %s: %s",
                outcome.rule_id,
                error_kind,
                event.task_id,
                outcome.detail,
            )
            return
        if outcome.status is OutcomeStatus.SKIPPED:
            logger.debug("Automation %s skipped on task %s: %s", outcome.rule_id, event.task_id, outcome.detail)
            return

        self._record_execution(outcome)
        self._broadcast(rule, event, outcome)

    def _record_execution(self, outcome: ExecutionOutcome) -> None:
        # Independent of the action: the action already committed.
        try:
            rule_store.record_execution(outcome.rule_id)
        except Exception as exc:
            db.session.rollback()
            logger.exception("Failed to record execution of automation %s", outcome.rule_id)
            outcome.bookkeeping_error = str(exc)
            self.telemetry.record_bookkeeping_failure()

    def _broadcast(self, rule: AutomationRule, event: TaskTransitionEvent, outcome: ExecutionOutcome) -> None:
        if not current_app.config.get("AUTOMATION_BROADCAST_ENABLED", True):
            return
        payload = {
            "task_id": event.task_id,
            "automation_id": outcome.rule_id,
            "automation_name": outcome.rule_name,
            "project_id": event.project_id,
        }
        try:
            log_event(
                AUTOMATION_TRIGGERED,
                payload,
                user_id=event.acting_user_id,
                project_id=event.project_id,
            )
        except Exception:
            db.session.rollback()
            logger.exception("Broadcast of automation %s failed", outcome.rule_id)
            self.telemetry.record_broadcast_failure()


__all__ = ["OutcomeReporter"]
