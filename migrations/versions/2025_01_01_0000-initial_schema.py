"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the links table.

    The unique index on code is what makes concurrent allocation safe:
    the second insert of a code fails instead of creating a duplicate.
    """
    op.create_table(
        'links',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(length=8), nullable=False),
        sa.Column('destination', sa.Text(), nullable=False),
        sa.Column('visit_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_visited_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_index(
        'ix_links_code',
        'links',
        ['code'],
        unique=True
    )

    op.create_index(
        'ix_links_created_at',
        'links',
        ['created_at']
    )


def downgrade() -> None:
    op.drop_index('ix_links_created_at', table_name='links')
    op.drop_index('ix_links_code', table_name='links')
    op.drop_table('links')
