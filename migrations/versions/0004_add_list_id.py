"""add task list reference"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0004_add_list_id"
down_revision = "0003_add_position"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "tasks",
        sa.Column("list_id", sa.String(length=64), nullable=False, server_default=""),
    )
    op.create_index("ix_tasks_list_id", "tasks", ["list_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_tasks_list_id", table_name="tasks")
    op.drop_column("tasks", "list_id")
