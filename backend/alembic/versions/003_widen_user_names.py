"""Widen user first_name and last_name to 100 characters.

Revision ID: 003
Revises: 002
Create Date: 2026-10-20

WHAT: Raises the user name columns from 50 to 100 characters, the limit the
registration, join and profile forms accept.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "003"
down_revision = "002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Widen user name columns."""
    for column in ("first_name", "last_name"):
        op.alter_column(
            "users",
            column,
            existing_type=sa.String(length=50),
            type_=sa.String(length=100),
            existing_nullable=False,
        )


def downgrade() -> None:
    """Restore the 50 character limit."""
    for column in ("first_name", "last_name"):
        op.alter_column(
            "users",
            column,
            existing_type=sa.String(length=100),
            type_=sa.String(length=50),
            existing_nullable=False,
        )
