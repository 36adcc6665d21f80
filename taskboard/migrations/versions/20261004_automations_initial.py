"""Automation rules (additive-safe)."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = "20261004_automations_initial"
down_revision = "20261003_notifications_events"
branch_labels = None
depends_on = None


def upgrade():
    conn = op.get_bind()
    inspector = inspect(conn)

    def _has_index(table: str, name: str) -> bool:
        return any(ix["name"] == name for ix in inspector.get_indexes(table))

    if "automation_rule" not in inspector.get_table_names():
        op.create_table(
            "automation_rule",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "project_id",
                sa.Integer(),
                sa.ForeignKey("project.id", ondelete="CASCADE"),
                nullable=False,
                index=True,
            ),
            sa.Column("created_by", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("trigger_kind", sa.String(length=32), nullable=False),
            sa.Column("trigger_conditions", sa.JSON(), nullable=False),
            sa.Column("action_kind", sa.String(length=32), nullable=False),
            sa.Column("action_params", sa.JSON(), nullable=False),
            sa.Column("execution_count", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("last_executed_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
    if not _has_index("automation_rule", "ix_automation_rule_project_active_trigger"):
        op.create_index(
            "ix_automation_rule_project_active_trigger",
            "automation_rule",
            ["project_id", "active", "trigger_kind"],
        )


def downgrade():
    op.drop_index("ix_automation_rule_project_active_trigger", table_name="automation_rule")
    op.drop_table("automation_rule")
