"""Create telegram_users table

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2025-10-01 10:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "telegram_users",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column(
            "telegram_id",
            sa.BIGINT,
            nullable=False,
            unique=True,
            comment="Идентификатор пользователя Telegram",
        ),
        sa.Column("username", sa.Unicode(255), nullable=True),
        sa.Column("first_name", sa.Unicode(255), nullable=True),
        sa.Column("last_name", sa.Unicode(255), nullable=True),
        sa.Column(
            "department",
            sa.Unicode(255),
            nullable=True,
            comment="Департамент пользователя, пуст до выбора",
        ),
        sa.Column(
            "is_admin",
            sa.Boolean,
            nullable=False,
            server_default=sa.false(),
            comment="Права администратора, определяются департаментом",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP,
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    )
    op.create_index("ix_telegram_users_department", "telegram_users", ["department"])


def downgrade() -> None:
    op.drop_index("ix_telegram_users_department", table_name="telegram_users")
    op.drop_table("telegram_users")
