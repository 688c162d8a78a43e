"""Add dismissal flag to alerts

Revision ID: 0002_alert_dismissal
Revises: 0001_baseline
Create Date: 2026-10-18

Dismissed alerts stay in the table but drop out of the alert list.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002_alert_dismissal'
down_revision: Union[str, Sequence[str], None] = '0001_baseline'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('alerts', sa.Column(
        'is_dismissed',
        sa.Boolean(),
        server_default=sa.false(),
        nullable=False,
    ))


def downgrade() -> None:
    with op.batch_alter_table('alerts') as batch_op:
        batch_op.drop_column('is_dismissed')
