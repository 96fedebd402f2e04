"""Create affiliate ledger schema.

Revision ID: 20261018_000001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261018_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create participants, balances, sales, commissions, network and activity."""

    op.create_table(
        'participants',
        sa.Column('id', sa.String(128), nullable=False, comment='Identity provider uid'),
        sa.Column('email', sa.String(255), nullable=False, server_default=''),
        sa.Column('full_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('tier', sa.String(16), nullable=False, server_default='basic'),
        sa.Column('referral_code', sa.String(20), nullable=False),
        sa.Column('referrer_id', sa.String(128), nullable=True, comment='Set once at signup'),
        sa.Column('disabled', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['referrer_id'], ['participants.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_participants_referral_code', 'participants', ['referral_code'], unique=True)
    op.create_index('ix_participants_referrer_id', 'participants', ['referrer_id'])
    op.create_index('idx_participants_created', 'participants', ['created_at', 'id'])

    op.create_table(
        'balance_records',
        sa.Column('participant_id', sa.String(128), nullable=False),
        sa.Column('total_earnings', sa.DECIMAL(18, 8), nullable=False, server_default='0'),
        sa.Column('pending_balance', sa.DECIMAL(18, 8), nullable=False, server_default='0'),
        sa.Column('available_balance', sa.DECIMAL(18, 8), nullable=False, server_default='0'),
        sa.Column('tier', sa.String(16), nullable=False, server_default='basic', comment='Tier snapshot'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint('total_earnings >= 0', name='check_balance_total_earnings_non_negative'),
        sa.CheckConstraint('pending_balance >= 0', name='check_balance_pending_non_negative'),
        sa.CheckConstraint('available_balance >= 0', name='check_balance_available_non_negative'),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('participant_id')
    )

    op.create_table(
        'sales',
        sa.Column('id', sa.String(128), nullable=False, comment='Idempotency key'),
        sa.Column('buyer_ref', sa.String(255), nullable=False),
        sa.Column('gross_amount', sa.DECIMAL(18, 8), nullable=False, comment='Amount in source currency'),
        sa.Column('settlement_amount', sa.DECIMAL(18, 8), nullable=False, comment='Amount in settlement currency'),
        sa.Column('referral_code', sa.String(20), nullable=True),
        sa.Column('referrer_id', sa.String(128), nullable=True),
        sa.Column('status', sa.String(16), nullable=False, server_default='paid'),
        sa.Column('source', sa.String(64), nullable=False, server_default='manual'),
        sa.Column('hold_until', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_sales_referrer', 'sales', ['referrer_id'])

    op.create_table(
        'commission_entries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('sale_id', sa.String(128), nullable=False),
        sa.Column('beneficiary_id', sa.String(128), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('percent', sa.DECIMAL(5, 2), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 8), nullable=False),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('hold_until', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('released_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('level >= 1 AND level <= 4', name='check_commission_level_range'),
        sa.CheckConstraint('amount >= 0', name='check_commission_amount_non_negative'),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['beneficiary_id'], ['participants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sale_id', 'level', name='uq_commission_sale_level')
    )
    op.create_index('ix_commission_entries_sale_id', 'commission_entries', ['sale_id'])
    op.create_index(
        'idx_commission_beneficiary_status_hold',
        'commission_entries',
        ['beneficiary_id', 'status', 'hold_until']
    )

    op.create_table(
        'network_edges',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.String(128), nullable=False, comment='Ancestor'),
        sa.Column('member_id', sa.String(128), nullable=False, comment='Recruit'),
        sa.Column('member_name', sa.String(255), nullable=False),
        sa.Column('member_tier', sa.String(16), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['owner_id'], ['participants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['member_id'], ['participants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'member_id', name='uq_network_edge')
    )
    op.create_index('ix_network_edges_owner_id', 'network_edges', ['owner_id'])
    op.create_index('ix_network_edges_member_id', 'network_edges', ['member_id'])

    op.create_table(
        'activity_notes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.String(128), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('action', sa.String(255), nullable=False),
        sa.Column('label', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'idx_activity_participant_created',
        'activity_notes',
        ['participant_id', 'created_at']
    )


def downgrade() -> None:
    """Drop the affiliate ledger schema."""

    op.drop_index('idx_activity_participant_created', 'activity_notes')
    op.drop_table('activity_notes')

    op.drop_index('ix_network_edges_member_id', 'network_edges')
    op.drop_index('ix_network_edges_owner_id', 'network_edges')
    op.drop_table('network_edges')

    op.drop_index('idx_commission_beneficiary_status_hold', 'commission_entries')
    op.drop_index('ix_commission_entries_sale_id', 'commission_entries')
    op.drop_table('commission_entries')

    op.drop_index('idx_sales_referrer', 'sales')
    op.drop_table('sales')

    op.drop_table('balance_records')

    op.drop_index('idx_participants_created', 'participants')
    op.drop_index('ix_participants_referrer_id', 'participants')
    op.drop_index('ix_participants_referral_code', 'participants')
    op.drop_table('participants')
