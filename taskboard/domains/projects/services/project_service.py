"""Project service layer."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Sequence, Tuple

from taskboard.core.events.event_models import EventRecord
from taskboard.core.events.event_service import log_event
from taskboard.core.users.models import User
from taskboard.domains.automations.models.automation_models import AutomationRule
from taskboard.domains.notifications.models.notification_models import Notification
from taskboard.domains.projects.events import (
    PROJECT_CREATED,
    PROJECT_MEMBER_ADDED,
    PROJECT_UPDATED,
)
from taskboard.domains.projects.models.project_models import (
    DEFAULT_STATUSES,
    MEMBER_ROLES,
    Project,
    ProjectMember,
    ProjectStatus,
    Task,
)
from taskboard.extensions import db

_ADMIN_ROLES = {"owner", "admin"}


def _clean_statuses(statuses: Iterable[Tuple[str, str | None]]) -> List[Tuple[str, str | None]]:
    cleaned: List[Tuple[str, str | None]] = []
    seen = set()
    for name, color in statuses:
        name = (name or "").strip()
        if not name or name in seen:
            raise ValueError("validation_error")
        seen.add(name)
        cleaned.append((name, color))
    if not cleaned:
        raise ValueError("validation_error")
    return cleaned


def _build_statuses(
    statuses: Iterable[Tuple[str, str | None]], existing: Iterable[ProjectStatus] = ()
) -> List[ProjectStatus]:
    # Rows are reused by name; re-inserting a kept name would hit the unique constraint.
    by_name = {status.name: status for status in existing}
    built: List[ProjectStatus] = []
    for order, (name, color) in enumerate(_clean_statuses(statuses)):
        status = by_name.pop(name, None) or ProjectStatus(name=name)
        status.color = color or status.color or "#4A90E2"
        status.order = order
        built.append(status)
    return built


def create_project(
    user_id: int,
    *,
    name: str,
    description: str | None = None,
    statuses: Sequence[Tuple[str, str | None]] | None = None,
) -> Project:
    name = name.strip()
    existing = Project.query.filter_by(owner_id=user_id, name=name).first()
    if existing:
        raise ValueError("duplicate")
    project = Project(
        owner_id=user_id,
        name=name,
        description=(description or "").strip() or None,
    )
    project.statuses = _build_statuses(statuses or DEFAULT_STATUSES)
    project.members = [ProjectMember(user_id=user_id, role="owner")]
    db.session.add(project)
    db.session.commit()
    log_event(
        PROJECT_CREATED,
        {
            "project_id": project.id,
            "owner_id": user_id,
            "name": project.name,
            "statuses": project.status_names,
            "created_at": project.created_at.isoformat(),
        },
        user_id=user_id,
        project_id=project.id,
    )
    return project


def get_project(user_id: int, project_id: int) -> Project | None:
    project = db.session.get(Project, project_id)
    if not project or project.member_role(user_id) is None:
        return None
    return project


def require_member(user_id: int, project_id: int) -> Project:
    project = db.session.get(Project, project_id)
    if not project:
        raise ValueError("not_found")
    if project.member_role(user_id) is None:
        raise ValueError("forbidden")
    return project


def require_admin(user_id: int, project_id: int) -> Project:
    project = require_member(user_id, project_id)
    if project.member_role(user_id) not in _ADMIN_ROLES:
        raise ValueError("forbidden")
    return project


def project_status_names(project_id: int) -> List[str]:
    rows = (
        ProjectStatus.query.filter_by(project_id=project_id)
        .order_by(ProjectStatus.order.asc())
        .all()
    )
    return [row.name for row in rows]


def list_projects(user_id: int, *, page: int = 1, per_page: int = 50) -> Tuple[List[Project], int]:
    query = (
        Project.query.join(ProjectMember, ProjectMember.project_id == Project.id)
        .filter(ProjectMember.user_id == user_id)
        .order_by(Project.created_at.desc(), Project.id.desc())
    )
    total = query.count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return items, total


def update_project(user_id: int, project_id: int, **fields) -> Project:
    project = require_admin(user_id, project_id)
    changed = {}
    for key in ("name", "description"):
        if key in fields and fields[key] is not None:
            val = fields[key].strip()
            setattr(project, key, val)
            changed[key] = val
    db.session.commit()
    if changed:
        log_event(
            PROJECT_UPDATED,
            {
                "project_id": project.id,
                "fields": changed,
                "updated_at": (project.updated_at or datetime.utcnow()).isoformat(),
            },
            user_id=user_id,
            project_id=project.id,
        )
    return project


def set_statuses(user_id: int, project_id: int, statuses: Sequence[Tuple[str, str | None]]) -> Project:
    """Replace the project's status columns.

    Automation rules that name a removed status are left as they are; the
    executor reports them as configuration errors when they next fire.
    """
    project = require_admin(user_id, project_id)
    new_names = {name for name, _ in _clean_statuses(statuses)}
    in_use = (
        Task.query.filter(Task.project_id == project.id, Task.status.notin_(new_names))
        .limit(1)
        .first()
    )
    if in_use:
        raise ValueError("status_in_use")
    project.statuses = _build_statuses(statuses, project.statuses)
    db.session.commit()
    log_event(
        PROJECT_UPDATED,
        {
            "project_id": project.id,
            "fields": {"statuses": project.status_names},
            "updated_at": datetime.utcnow().isoformat(),
        },
        user_id=user_id,
        project_id=project.id,
    )
    return project


def add_member(user_id: int, project_id: int, member_user_id: int, role: str = "member") -> ProjectMember:
    project = require_admin(user_id, project_id)
    if role not in MEMBER_ROLES or role == "owner":
        raise ValueError("validation_error")
    if not db.session.get(User, member_user_id):
        raise ValueError("not_found")
    if project.member_role(member_user_id) is not None:
        raise ValueError("duplicate")
    member = ProjectMember(user_id=member_user_id, role=role)
    # Through the collection so loaded projects see the new member.
    project.members.append(member)
    db.session.commit()
    log_event(
        PROJECT_MEMBER_ADDED,
        {"project_id": project.id, "user_id": member_user_id, "role": role},
        user_id=user_id,
        project_id=project.id,
    )
    return member


def remove_member(user_id: int, project_id: int, member_user_id: int) -> bool:
    project = require_admin(user_id, project_id)
    member = ProjectMember.query.filter_by(project_id=project.id, user_id=member_user_id).first()
    if not member:
        return False
    if member.role == "owner":
        raise ValueError("forbidden")
    project.members.remove(member)
    db.session.commit()
    return True


def _detach_project_rows(project: Project) -> None:
    # Rows outside the ORM cascade; SQLite ignores ON DELETE unless foreign keys are enabled.
    task_ids = db.select(Task.id).where(Task.project_id == project.id)
    AutomationRule.query.filter_by(project_id=project.id).delete()
    EventRecord.query.filter_by(project_id=project.id).delete()
    Notification.query.filter(Notification.related_task_id.in_(task_ids)).update(
        {Notification.related_task_id: None}, synchronize_session="fetch"
    )
    Notification.query.filter_by(related_project_id=project.id).update(
        {Notification.related_project_id: None}
    )


def delete_project(user_id: int, project_id: int) -> bool:
    project = db.session.get(Project, project_id)
    if not project or project.member_role(user_id) is None:
        return False
    if project.owner_id != user_id:
        raise ValueError("forbidden")
    _detach_project_rows(project)
    db.session.delete(project)
    db.session.commit()
    return True
