"""create pastes table

Revision ID: 5b1f0c2d9a41
Revises:
Create Date: 2026-10-19 09:12:44.518302

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1f0c2d9a41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the pastes table."""
    op.create_table(
        "pastes",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("ct", sa.Text(), nullable=False),
        sa.Column("iv", sa.Text(), nullable=False),
        sa.Column("expire_ts", sa.BigInteger(), nullable=False),
        sa.Column("views_allowed", sa.Integer(), nullable=True),
        sa.Column("views_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("single_view", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("mime", sa.String(length=128), nullable=True),
        sa.Column("delete_token_hash", sa.String(length=128), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pastes_expire_ts", "pastes", ["expire_ts"])


def downgrade() -> None:
    """Drop the pastes table."""
    op.drop_index("ix_pastes_expire_ts", table_name="pastes")
    op.drop_table("pastes")
