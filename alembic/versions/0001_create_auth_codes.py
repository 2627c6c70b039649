"""create auth_codes

Revision ID: 0001_create_auth_codes
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_create_auth_codes"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "auth_codes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("auth_code", sa.String(length=19), nullable=False),
        sa.Column("device_id", sa.String(length=255), nullable=True),
        sa.Column("is_used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("activated_at", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.UniqueConstraint("auth_code"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_auth_codes_created_at", "auth_codes", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_auth_codes_created_at", table_name="auth_codes")
    op.drop_table("auth_codes")
