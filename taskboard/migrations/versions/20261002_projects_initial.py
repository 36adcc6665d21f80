"""Projects domain initial schema: projects, statuses, members, tasks (additive-safe)."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = "20261002_projects_initial"
down_revision = "20261001_core_initial"
branch_labels = None
depends_on = None


def upgrade():
    conn = op.get_bind()
    inspector = inspect(conn)

    def _has_table(name: str) -> bool:
        return name in inspector.get_table_names()

    def _has_column(table: str, name: str) -> bool:
        return name in {col["name"] for col in inspector.get_columns(table)}

    if not _has_table("project"):
        op.create_table(
            "project",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("owner_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False, index=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_project_owner_name", "project", ["owner_id", "name"])

    if not _has_table("project_status"):
        op.create_table(
            "project_status",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "project_id",
                sa.Integer(),
                sa.ForeignKey("project.id", ondelete="CASCADE"),
                nullable=False,
                index=True,
            ),
            sa.Column("name", sa.String(length=64), nullable=False),
            sa.Column("color", sa.String(length=16), nullable=False, server_default="#4A90E2"),
            sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
            sa.UniqueConstraint("project_id", "name", name="uq_project_status_name"),
        )

    if not _has_table("project_member"):
        op.create_table(
            "project_member",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "project_id",
                sa.Integer(),
                sa.ForeignKey("project.id", ondelete="CASCADE"),
                nullable=False,
                index=True,
            ),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False, index=True),
            sa.Column("role", sa.String(length=16), nullable=False, server_default="member"),
            sa.Column("added_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.UniqueConstraint("project_id", "user_id", name="uq_project_member_user"),
        )

    if not _has_table("task"):
        op.create_table(
            "task",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "project_id",
                sa.Integer(),
                sa.ForeignKey("project.id", ondelete="CASCADE"),
                nullable=False,
                index=True,
            ),
            sa.Column("reporter_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
            sa.Column("assignee_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("status", sa.String(length=64), nullable=False),
            sa.Column("priority", sa.String(length=16), nullable=False, server_default="Medium"),
            sa.Column("due_date", sa.DateTime(), nullable=True),
            sa.Column("due_passed_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_task_project_status", "task", ["project_id", "status"])
        op.create_index("ix_task_project_due_date", "task", ["project_id", "due_date"])
        op.create_index("ix_task_assignee", "task", ["assignee_id"])
    elif not _has_column("task", "due_passed_at"):
        op.add_column("task", sa.Column("due_passed_at", sa.DateTime(), nullable=True))

    if not _has_table("task_history"):
        op.create_table(
            "task_history",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "task_id",
                sa.Integer(),
                sa.ForeignKey("task.id", ondelete="CASCADE"),
                nullable=False,
                index=True,
            ),
            sa.Column("field", sa.String(length=32), nullable=False),
            sa.Column("old_value", sa.String(length=255), nullable=True),
            sa.Column("new_value", sa.String(length=255), nullable=True),
            sa.Column("changed_by", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
            sa.Column("changed_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_task_history_task_changed_at", "task_history", ["task_id", "changed_at"])

    if not _has_table("task_comment"):
        op.create_table(
            "task_comment",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "task_id",
                sa.Integer(),
                sa.ForeignKey("task.id", ondelete="CASCADE"),
                nullable=False,
                index=True,
            ),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
            sa.Column("text", sa.Text(), nullable=False),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )


def downgrade():
    op.drop_table("task_comment")
    op.drop_index("ix_task_history_task_changed_at", table_name="task_history")
    op.drop_table("task_history")
    op.drop_index("ix_task_assignee", table_name="task")
    op.drop_index("ix_task_project_due_date", table_name="task")
    op.drop_index("ix_task_project_status", table_name="task")
    op.drop_table("task")
    op.drop_table("project_member")
    op.drop_table("project_status")
    op.drop_index("ix_project_owner_name", table_name="project")
    op.drop_table("project")
