"""Project domain models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard.extensions import db

DEFAULT_STATUSES = (
    ("To Do", "#FF5630"),
    ("In Progress", "#FFAB00"),
    ("Done", "#36B37E"),
)
MEMBER_ROLES = ("owner", "admin", "member")
TASK_PRIORITIES = ("Low", "Medium", "High")


class Project(db.Model):
    __tablename__ = "project"
    __table_args__ = (db.Index("ix_project_owner_name", "owner_id", "name"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        db.ForeignKey("user.id"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow, onupdate=datetime.utcnow
    )

    statuses: Mapped[list["ProjectStatus"]] = relationship(
        "ProjectStatus",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectStatus.order",
    )
    members: Mapped[list["ProjectMember"]] = relationship(
        "ProjectMember", back_populates="project", cascade="all, delete-orphan"
    )
    tasks: Mapped[list["Task"]] = relationship(
        "Task", back_populates="project", cascade="all, delete-orphan"
    )

    @property
    def status_names(self) -> list[str]:
        return [status.name for status in self.statuses]

    def member_role(self, user_id: int) -> str | None:
        for member in self.members:
            if member.user_id == user_id:
                return member.role
        return None


class ProjectStatus(db.Model):
    __tablename__ = "project_status"
    __table_args__ = (
        db.UniqueConstraint("project_id", "name", name="uq_project_status_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        db.ForeignKey("project.id", ondelete="CASCADE"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(db.String(64), nullable=False)
    color: Mapped[str] = mapped_column(db.String(16), default="#4A90E2", nullable=False)
    order: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)

    project: Mapped[Project] = relationship(Project, back_populates="statuses")


class ProjectMember(db.Model):
    __tablename__ = "project_member"
    __table_args__ = (
        db.UniqueConstraint("project_id", "user_id", name="uq_project_member_user"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        db.ForeignKey("project.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        db.ForeignKey("user.id"), index=True, nullable=False
    )
    role: Mapped[str] = mapped_column(db.String(16), default="member", nullable=False)
    added_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    project: Mapped[Project] = relationship(Project, back_populates="members")


class Task(db.Model):
    __tablename__ = "task"
    __table_args__ = (
        db.Index("ix_task_project_status", "project_id", "status"),
        db.Index("ix_task_project_due_date", "project_id", "due_date"),
        db.Index("ix_task_assignee", "assignee_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        db.ForeignKey("project.id", ondelete="CASCADE"), index=True, nullable=False
    )
    reporter_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), nullable=False)
    assignee_id: Mapped[int | None] = mapped_column(db.ForeignKey("user.id"))
    title: Mapped[str] = mapped_column(db.String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text)
    status: Mapped[str] = mapped_column(db.String(64), nullable=False)
    priority: Mapped[str] = mapped_column(db.String(16), default="Medium", nullable=False)
    due_date: Mapped[datetime | None] = mapped_column()
    # Set once the due date has fired its automations; cleared when the due date moves.
    due_passed_at: Mapped[datetime | None] = mapped_column()
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow, onupdate=datetime.utcnow
    )

    project: Mapped[Project] = relationship(Project, back_populates="tasks")
    history: Mapped[list["TaskHistory"]] = relationship(
        "TaskHistory",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskHistory.id",
    )
    comments: Mapped[list["TaskComment"]] = relationship(
        "TaskComment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskComment.created_at.desc()",
    )


class TaskHistory(db.Model):
    __tablename__ = "task_history"
    __table_args__ = (
        db.Index("ix_task_history_task_changed_at", "task_id", "changed_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    task_id: Mapped[int] = mapped_column(
        db.ForeignKey("task.id", ondelete="CASCADE"), index=True, nullable=False
    )
    field: Mapped[str] = mapped_column(db.String(32), nullable=False)
    old_value: Mapped[str | None] = mapped_column(db.String(255))
    new_value: Mapped[str | None] = mapped_column(db.String(255))
    # Null when the change was made by the system (e.g. the due-date sweep).
    changed_by: Mapped[int | None] = mapped_column(db.ForeignKey("user.id"))
    changed_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    task: Mapped[Task] = relationship(Task, back_populates="history")


class TaskComment(db.Model):
    __tablename__ = "task_comment"

    id: Mapped[int] = mapped_column(primary_key=True)
    task_id: Mapped[int] = mapped_column(
        db.ForeignKey("task.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), nullable=False)
    text: Mapped[str] = mapped_column(db.Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    task: Mapped[Task] = relationship(Task, back_populates="comments")


__all__ = [
    "DEFAULT_STATUSES",
    "MEMBER_ROLES",
    "TASK_PRIORITIES",
    "Project",
    "ProjectMember",
    "ProjectStatus",
    "Task",
    "TaskComment",
    "TaskHistory",
]
