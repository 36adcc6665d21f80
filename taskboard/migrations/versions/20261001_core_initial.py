"""Core initial schema: users (additive-safe)."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = "20261001_core_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    conn = op.get_bind()
    inspector = inspect(conn)

    def _has_column(table: str, name: str) -> bool:
        return name in {col["name"] for col in inspector.get_columns(table)}

    if "user" not in inspector.get_table_names():
        op.create_table(
            "user",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("full_name", sa.String(length=255), nullable=True),
            sa.Column("photo_url", sa.String(length=512), nullable=True),
            sa.Column("badges", sa.JSON(), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index("ix_user_email", "user", ["email"], unique=True)
    elif not _has_column("user", "badges"):
        op.add_column("user", sa.Column("badges", sa.JSON(), nullable=True))


def downgrade():
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
