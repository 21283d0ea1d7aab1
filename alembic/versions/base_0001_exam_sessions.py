"""exam sessions

Revision ID: base_0001
Revises:
Create Date: 2026-10-17 10:12:41.318204

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "base_0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "exam_sessions",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("exam_package_id", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("snapshot", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_heartbeat_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_exam_sessions_last_heartbeat_at", "exam_sessions", ["last_heartbeat_at"])


def downgrade() -> None:
    op.drop_index("ix_exam_sessions_last_heartbeat_at", table_name="exam_sessions")
    op.drop_table("exam_sessions")
