"""Automation rule model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from taskboard.domains.automations.rules import Action, Trigger, parse_action, parse_trigger
from taskboard.extensions import db


class AutomationRule(db.Model):
    __tablename__ = "automation_rule"
    __table_args__ = (
        db.Index(
            "ix_automation_rule_project_active_trigger",
            "project_id",
            "active",
            "trigger_kind",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        db.ForeignKey("project.id", ondelete="CASCADE"), index=True, nullable=False
    )
    created_by: Mapped[int | None] = mapped_column(db.ForeignKey("user.id"))
    name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    active: Mapped[bool] = mapped_column(default=True, nullable=False)
    trigger_kind: Mapped[str] = mapped_column(db.String(32), nullable=False)
    trigger_conditions: Mapped[dict] = mapped_column(db.JSON, nullable=False, default=dict)
    action_kind: Mapped[str] = mapped_column(db.String(32), nullable=False)
    action_params: Mapped[dict] = mapped_column(db.JSON, nullable=False, default=dict)
    execution_count: Mapped[int] = mapped_column(default=0, nullable=False)
    last_executed_at: Mapped[datetime | None] = mapped_column()
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def trigger(self) -> Trigger:
        return parse_trigger(self.trigger_kind, self.trigger_conditions)

    @trigger.setter
    def trigger(self, value: Trigger) -> None:
        self.trigger_kind = value.kind.value
        self.trigger_conditions = value.conditions()

    @property
    def action(self) -> Action:
        return parse_action(self.action_kind, self.action_params)

    @action.setter
    def action(self, value: Action) -> None:
        self.action_kind = value.kind.value
        self.action_params = value.params()


__all__ = ["AutomationRule"]
