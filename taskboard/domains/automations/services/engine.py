"""Automation engine: runs matched rules for each task transition."""

from __future__ import annotations

import dataclasses
import logging
from time import perf_counter
from typing import Optional, Set

from flask import current_app

from taskboard.domains.automations.errors import AutomationError, LookupFailure
from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.automations.outcomes import BatchReport, ExecutionOutcome
from taskboard.domains.automations.rules import TaskTransitionEvent
from taskboard.domains.automations.services import executor, matcher
from taskboard.domains.automations.services.reporter import OutcomeReporter
from taskboard.domains.automations.telemetry import AutomationTelemetry, automation_telemetry
from taskboard.domains.projects.models.project_models import Task
from taskboard.extensions import db

logger = logging.getLogger(__name__)


class AutomationEngine:
    def __init__(
        self,
        reporter: Optional[OutcomeReporter] = None,
        telemetry: Optional[AutomationTelemetry] = None,
    ) -> None:
        self.telemetry = telemetry or automation_telemetry
        self.reporter = reporter or OutcomeReporter(self.telemetry)

    def on_task_transition(self, event: TaskTransitionEvent) -> BatchReport:
        """Evaluate every matching rule for the event. Never raises."""
        if not current_app.config.get("AUTOMATION_ENABLED", True):
            return BatchReport(event)
        return self._process(event, fired=set())

    def _process(self, event: TaskTransitionEvent, fired: Set[int]) -> BatchReport:
        report = BatchReport(event)
        started = perf_counter()
        try:
            rules = matcher.match(event.project_id, event.trigger_kind, event)
        except Exception:
            db.session.rollback()
            logger.exception("Automation matching failed for task %s", event.task_id)
            rules = []

        for rule in rules:
            # A rule runs at most once per chain of automation-caused transitions.
            if rule.id in fired:
                continue
            fired.add(rule.id)
            report.outcomes.append(self._run_rule(rule, event))

        self.telemetry.record_event(
            event.trigger_kind.value, len(report.outcomes), (perf_counter() - started) * 1000
        )

        max_depth = int(current_app.config.get("AUTOMATION_MAX_CHAIN_DEPTH", 0))
        if event.depth < max_depth:
            for outcome in list(report.outcomes):
                if outcome.follow_up is None:
                    continue
                child = dataclasses.replace(outcome.follow_up, depth=event.depth + 1)
                report.follow_ups.append(self._process(child, fired))
        return report

    def _run_rule(self, rule: AutomationRule, event: TaskTransitionEvent) -> ExecutionOutcome:
        started = perf_counter()
        try:
            task = db.session.get(Task, event.task_id)
            if task is None or task.project_id != rule.project_id:
                outcome = ExecutionOutcome.failed(
                    rule, LookupFailure(f"task {event.task_id} not found", rule_id=rule.id)
                )
            else:
                outcome = executor.execute(rule, task, event.acting_user_id)
        except Exception as exc:
            db.session.rollback()
            logger.exception("Unexpected error running automation %s", rule.id)
            outcome = ExecutionOutcome.failed(rule, AutomationError(str(exc), rule_id=rule.id))
        outcome.latency_ms = (perf_counter() - started) * 1000

        try:
            self.reporter.report(rule, event, outcome)
        except Exception:
            db.session.rollback()
            logger.exception("Reporting automation %s outcome failed", outcome.rule_id)
        return outcome


# Global singleton
automation_engine = AutomationEngine()


def on_task_transition(event: TaskTransitionEvent) -> BatchReport:
    return automation_engine.on_task_transition(event)


__all__ = ["AutomationEngine", "automation_engine", "on_task_transition"]
