"""add sibling position"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0003_add_position"
down_revision = "0002_add_recurrence"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "tasks",
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )


def downgrade() -> None:
    op.drop_column("tasks", "position")
