"""create user streaks

Revision ID: 20261018_0001
Revises: 
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261018_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_streaks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("chat_id", sa.BigInteger(), nullable=False),
        sa.Column("last_drink_at", sa.DateTime(), nullable=False),
        sa.Column("streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("streak >= 0", name="ck_user_streaks_streak_non_negative"),
    )
    op.create_index("ix_user_streaks_id", "user_streaks", ["id"], unique=False)
    op.create_index("ix_user_streaks_chat_id", "user_streaks", ["chat_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_user_streaks_chat_id", table_name="user_streaks")
    op.drop_index("ix_user_streaks_id", table_name="user_streaks")
    op.drop_table("user_streaks")
