"""Automation rule schemas."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class StatusChangeTriggerIn(BaseModel):
    kind: Literal["status_change"]
    from_status: Optional[str] = Field(default=None, max_length=64)
    to_status: Optional[str] = Field(default=None, max_length=64)


class AssigneeChangeTriggerIn(BaseModel):
    kind: Literal["assignee_change"]
    assignee_id: Optional[int] = None


class DueDatePassedTriggerIn(BaseModel):
    kind: Literal["due_date_passed"]


class ChangeStatusActionIn(BaseModel):
    kind: Literal["change_status"]
    status: str = Field(min_length=1, max_length=64)


class AwardBadgeActionIn(BaseModel):
    kind: Literal["award_badge"]
    badge_name: str = Field(min_length=1, max_length=64)


class SendNotificationActionIn(BaseModel):
    kind: Literal["send_notification"]
    message: str = Field(min_length=1, max_length=4096)
    notification_type: Literal["info", "warning", "success"] = "info"


TriggerIn = Annotated[
    Union[StatusChangeTriggerIn, AssigneeChangeTriggerIn, DueDatePassedTriggerIn],
    Field(discriminator="kind"),
]
ActionIn = Annotated[
    Union[ChangeStatusActionIn, AwardBadgeActionIn, SendNotificationActionIn],
    Field(discriminator="kind"),
]


def split_kind(model: BaseModel) -> tuple[str, dict]:
    """Return the kind and the remaining fields of a trigger or action payload."""
    return model.kind, model.model_dump(exclude={"kind"}, exclude_none=True)


class RuleCreate(BaseModel):
    project_id: int
    name: str = Field(min_length=1, max_length=255)
    active: bool = True
    trigger: TriggerIn
    action: ActionIn


class RuleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    active: Optional[bool] = None
    trigger: Optional[TriggerIn] = None
    action: Optional[ActionIn] = None


class RuleListFilter(BaseModel):
    project_id: int
    active: Optional[bool] = None


class TelemetryFilter(BaseModel):
    project_id: int


class RuleToggle(BaseModel):
    active: Optional[bool] = None
