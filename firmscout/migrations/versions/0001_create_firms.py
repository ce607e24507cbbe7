"""create firms table

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:12:04.118320

Base columns for AI-generated and uploaded firm records. Enrichment
columns arrive in 0002, contacts_source in 0003.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'firms',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('website', sa.Text(), nullable=True),
        sa.Column('dedupe_key', sa.Text(), nullable=False),
        sa.Column('firm_name', sa.Text()),
        sa.Column('entity_type', sa.Text()),
        sa.Column('sub_type', sa.Text()),
        sa.Column('sector', sa.Text()),
        sa.Column('sector_details', sa.Text()),
        sa.Column('stage', sa.Text()),
        sa.Column('address', sa.Text()),
        sa.Column('country', sa.Text()),
        sa.Column('company_linkedin', sa.Text()),
        sa.Column('about', sa.Text()),
        sa.Column('investment_strategy', sa.Text()),
        sa.Column('source', sa.String(length=20)),
        sa.Column('validated', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('contacts_json', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('website', name='uq_firms_website'),
        sa.UniqueConstraint('dedupe_key', name='uq_firms_dedupe_key'),
    )


def downgrade() -> None:
    op.drop_table('firms')
