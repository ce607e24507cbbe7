"""contacts source column

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-19 09:16:27.930144

Records who produced the contact list (set to 'Gemini' by contact discovery).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0003'
down_revision: Union[str, None] = '0002'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('firms', sa.Column('contacts_source', sa.String(length=20), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table('firms') as batch_op:
        batch_op.drop_column('contacts_source')
