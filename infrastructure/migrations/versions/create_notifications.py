"""Create notifications table

Revision ID: 8b4e6d21c5a3
Revises: 3f1c2a9d7b10
Create Date: 2025-10-01 10:05:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import mysql

# revision identifiers, used by Alembic.
revision: str = "8b4e6d21c5a3"
down_revision: Union[str, None] = "3f1c2a9d7b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("message", sa.Text, nullable=False, comment="Текст уведомления"),
        sa.Column(
            "departments",
            sa.JSON,
            nullable=False,
            comment="Департаменты, которым адресовано уведомление",
        ),
        sa.Column(
            "created_by",
            sa.String(36),
            sa.ForeignKey("telegram_users.id"),
            nullable=True,
            comment="Автор уведомления",
        ),
        sa.Column(
            "created_at",
            mysql.DATETIME(fsp=6),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP(6)"),
        ),
    )
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_notifications_created_at", table_name="notifications")
    op.drop_table("notifications")
