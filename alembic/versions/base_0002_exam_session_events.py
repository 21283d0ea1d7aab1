"""exam session events

Revision ID: base_0002
Revises: base_0001
Create Date: 2026-10-17 14:03:27.905117

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "base_0002"
down_revision: Union[str, Sequence[str], None] = "base_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "exam_session_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("session_id", sa.String(length=64), nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["session_id"],
            ["exam_sessions.id"],
            name="fk_exam_session_events_session_id_exam_sessions",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_exam_session_events_session_id", "exam_session_events", ["session_id"])
    op.create_index("ix_exam_session_events_event_type", "exam_session_events", ["event_type"])


def downgrade() -> None:
    op.drop_index("ix_exam_session_events_event_type", table_name="exam_session_events")
    op.drop_index("ix_exam_session_events_session_id", table_name="exam_session_events")
    op.drop_table("exam_session_events")
