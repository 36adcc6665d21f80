"""Automation error taxonomy.

Every failure raised while evaluating a rule is one of these. The engine
catches them at the rule boundary and records them on the rule's outcome, so
none of them ever reaches the task-mutation request that emitted the event.
"""

from __future__ import annotations


class AutomationError(Exception):
    """Base class for automation failures."""

    kind = "automation_error"

    def __init__(self, message: str, *, rule_id: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.rule_id = rule_id

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "rule_id": self.rule_id}


class ConfigurationError(AutomationError, ValueError):
    """A rule definition is invalid for its project (e.g. unknown status)."""

    kind = "configuration_error"


class LookupFailure(AutomationError):
    """A task, project or user referenced during execution no longer exists."""

    kind = "lookup_failure"


class PersistenceFailure(AutomationError):
    """The write performed by an action could not be committed."""

    kind = "persistence_failure"


__all__ = [
    "AutomationError",
    "ConfigurationError",
    "LookupFailure",
    "PersistenceFailure",
]
