"""Lightweight telemetry counters for automation evaluation."""

from __future__ import annotations

from collections import Counter, defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List


@dataclass
class AutomationTelemetrySnapshot:
    events_processed: int
    events_with_matches: int
    rules_executed: int
    per_status_counts: Dict[str, int]
    per_rule_counts: Dict[str, int]
    per_error_counts: Dict[str, int]
    per_trigger_counts: Dict[str, int]
    avg_latency_ms: float
    per_rule_avg_latency_ms: Dict[str, float]
    bookkeeping_failures: int
    broadcast_failures: int
    recent_events: List[dict]


class AutomationTelemetry:
    """In-memory telemetry recorder, safe to share across request threads."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._reset_state()

    def _reset_state(self) -> None:
        self.events_processed = 0
        self.events_with_matches = 0
        self.rules_executed = 0
        self.bookkeeping_failures = 0
        self.broadcast_failures = 0
        self.per_status_counts: Counter[str] = Counter()
        self.per_rule_counts: Counter[str] = Counter()
        self.per_error_counts: Counter[str] = Counter()
        self.per_trigger_counts: Counter[str] = Counter()
        # Running (total, count) pairs; samples are not kept.
        self.per_rule_latency_ms: defaultdict[str, List[float]] = defaultdict(lambda: [0.0, 0])
        self.event_latency_total_ms = 0.0
        self.recent_events = deque(maxlen=50)

    def reset(self) -> None:
        """Clear all counters (useful in tests)."""
        with self._lock:
            self._reset_state()

    def record_rule(
        self,
        rule_id: int,
        status: str,
        latency_ms: float,
        error_kind: str | None = None,
    ) -> None:
        """Record a single rule execution."""
        key = str(rule_id)
        with self._lock:
            self.rules_executed += 1
            self.per_status_counts[status] += 1
            self.per_rule_counts[key] += 1
            totals = self.per_rule_latency_ms[key]
            totals[0] += latency_ms
            totals[1] += 1
            if error_kind:
                self.per_error_counts[error_kind] += 1

    def record_bookkeeping_failure(self) -> None:
        with self._lock:
            self.bookkeeping_failures += 1

    def record_broadcast_failure(self) -> None:
        with self._lock:
            self.broadcast_failures += 1

    def record_event(self, trigger_kind: str, matched: int, latency_ms: float) -> None:
        """Record one transition event after all of its rules ran."""
        with self._lock:
            self.events_processed += 1
            if matched:
                self.events_with_matches += 1
            self.per_trigger_counts[trigger_kind] += 1
            self.event_latency_total_ms += latency_ms
            self.recent_events.append(
                {
                    "trigger_kind": trigger_kind,
                    "matched": matched,
                    "latency_ms": latency_ms,
                    "at": datetime.now(timezone.utc).isoformat(),
                }
            )

    def snapshot(self) -> AutomationTelemetrySnapshot:
        """Return a read-only snapshot of telemetry counters."""
        with self._lock:
            avg_latency_ms = (
                self.event_latency_total_ms / self.events_processed if self.events_processed else 0.0
            )
            per_rule_avg_latency_ms = {
                rule: (total / count) if count else 0.0
                for rule, (total, count) in self.per_rule_latency_ms.items()
            }
            return AutomationTelemetrySnapshot(
                events_processed=self.events_processed,
                events_with_matches=self.events_with_matches,
                rules_executed=self.rules_executed,
                per_status_counts=dict(self.per_status_counts),
                per_rule_counts=dict(self.per_rule_counts),
                per_error_counts=dict(self.per_error_counts),
                per_trigger_counts=dict(self.per_trigger_counts),
                avg_latency_ms=avg_latency_ms,
                per_rule_avg_latency_ms=per_rule_avg_latency_ms,
                bookkeeping_failures=self.bookkeeping_failures,
                broadcast_failures=self.broadcast_failures,
                recent_events=list(self.recent_events),
            )


automation_telemetry = AutomationTelemetry()

__all__ = ["AutomationTelemetry", "AutomationTelemetrySnapshot", "automation_telemetry"]
