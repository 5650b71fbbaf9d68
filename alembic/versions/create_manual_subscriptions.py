"""Create manual_subscriptions table

Revision ID: manual_subscriptions_001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'manual_subscriptions_001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('manual_subscriptions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('package', sa.String(length=50), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('expiry_date', sa.DateTime(), nullable=True),
        sa.Column('approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('invoice_url', sa.String(length=255), nullable=False, server_default=''),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_manual_subscriptions_id'), 'manual_subscriptions', ['id'], unique=False)
    op.create_index(op.f('ix_manual_subscriptions_user_id'), 'manual_subscriptions', ['user_id'], unique=False)
    op.create_index(op.f('ix_manual_subscriptions_approved'), 'manual_subscriptions', ['approved'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_manual_subscriptions_approved'), table_name='manual_subscriptions')
    op.drop_index(op.f('ix_manual_subscriptions_user_id'), table_name='manual_subscriptions')
    op.drop_index(op.f('ix_manual_subscriptions_id'), table_name='manual_subscriptions')
    op.drop_table('manual_subscriptions')
