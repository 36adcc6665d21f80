"""Notifications and persisted event log (additive-safe)."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = "20261003_notifications_events"
down_revision = "20261002_projects_initial"
branch_labels = None
depends_on = None


def upgrade():
    conn = op.get_bind()
    inspector = inspect(conn)
    tables = inspector.get_table_names()

    if "notification" not in tables:
        op.create_table(
            "notification",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("recipient_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False, index=True),
            sa.Column("type", sa.String(length=16), nullable=False, server_default="info"),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("message", sa.Text(), nullable=False),
            sa.Column(
                "related_task_id",
                sa.Integer(),
                sa.ForeignKey("task.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column(
                "related_project_id",
                sa.Integer(),
                sa.ForeignKey("project.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("created_by", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
            sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False, index=True),
        )
        op.create_index(
            "ix_notification_recipient_created_at", "notification", ["recipient_id", "created_at"]
        )
        op.create_index("ix_notification_recipient_is_read", "notification", ["recipient_id", "is_read"])

    if "event_record" not in tables:
        op.create_table(
            "event_record",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("event_type", sa.String(length=128), nullable=False, index=True),
            sa.Column("payload", sa.JSON(), nullable=False),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True, index=True),
            sa.Column(
                "project_id",
                sa.Integer(),
                sa.ForeignKey("project.id", ondelete="CASCADE"),
                nullable=True,
                index=True,
            ),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False, index=True),
        )
        op.create_index(
            "ix_event_record_project_created_at", "event_record", ["project_id", "created_at"]
        )
        op.create_index(
            "ix_event_record_project_event_type", "event_record", ["project_id", "event_type"]
        )


def downgrade():
    op.drop_index("ix_event_record_project_event_type", table_name="event_record")
    op.drop_index("ix_event_record_project_created_at", table_name="event_record")
    op.drop_table("event_record")
    op.drop_index("ix_notification_recipient_is_read", table_name="notification")
    op.drop_index("ix_notification_recipient_created_at", table_name="notification")
    op.drop_table("notification")
