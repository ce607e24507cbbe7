"""firm enrichment columns

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19 09:14:41.502611

Sparse columns written by POST /enrich.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

COLUMNS = ('philosophy', 'aum', 'check_size', 'news_json')


def upgrade() -> None:
    for name in COLUMNS:
        op.add_column('firms', sa.Column(name, sa.Text(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table('firms') as batch_op:
        for name in reversed(COLUMNS):
            batch_op.drop_column(name)
