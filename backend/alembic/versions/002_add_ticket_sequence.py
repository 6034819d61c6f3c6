"""Add ticket_sequence column to organizations table.

Revision ID: 002
Revises: 001
Create Date: 2026-10-20

WHAT: Adds the per-organization counter ticket numbers are drawn from.

WHY: Numbering from the highest remaining ticket handed a deleted ticket's
number to the next one. The counter only grows, so keys are never reused.
Existing organizations start from their highest stored number.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Add ticket_sequence and seed it from existing tickets."""
    op.add_column(
        "organizations",
        sa.Column(
            "ticket_sequence",
            sa.Integer(),
            nullable=False,
            server_default="0",
            comment="Last ticket number handed out in the organization",
        ),
    )
    op.execute(
        """
        UPDATE organizations
        SET ticket_sequence = COALESCE(
            (SELECT MAX(tickets.number) FROM tickets WHERE tickets.org_id = organizations.id),
            0
        )
        """
    )


def downgrade() -> None:
    """Remove ticket_sequence from organizations table."""
    op.drop_column("organizations", "ticket_sequence")
