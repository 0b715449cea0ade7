"""Create fuel ledger tables.

Revision ID: 20261017_000001
Revises:
Create Date: 2026-10-17

Balances, the append-only transaction log, admission gates (completion
markers, window counts, referrals) and the reconciliation audit trail.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261017_000001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create ledger tables."""
    op.create_table(
        'user_balances',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('ephemeral_pool', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('permanent_pool', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column(
            'last_window_reset_period',
            sa.String(length=7),
            nullable=True,
            comment='YYYY-MM of the last monthly window rollover'
        ),
        sa.Column(
            'last_refill_date',
            sa.String(length=10),
            nullable=True,
            comment='YYYY-MM-DD of the last ephemeral refill'
        ),
        sa.Column('referral_code', sa.String(length=32), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('disabled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'ephemeral_pool >= 0', name='ck_user_balances_ephemeral_non_negative'
        ),
        sa.CheckConstraint(
            'permanent_pool >= 0', name='ck_user_balances_permanent_non_negative'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_user_balances'),
        sa.UniqueConstraint('user_id', name='uq_user_balances_user_id'),
        sa.UniqueConstraint('referral_code', name='uq_user_balances_referral_code'),
    )

    op.create_table(
        'credit_transactions',
        sa.Column(
            'id',
            sa.BigInteger().with_variant(sa.Integer(), 'sqlite'),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('pool', sa.String(length=16), nullable=False),
        sa.Column('action_type', sa.String(length=64), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_credit_transactions'),
    )
    op.create_index(
        'idx_credit_transactions_user_created',
        'credit_transactions',
        ['user_id', 'created_at'],
    )
    op.create_index(
        'idx_credit_transactions_user_pool',
        'credit_transactions',
        ['user_id', 'pool'],
    )

    op.create_table(
        'completion_markers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('action_id', sa.String(length=128), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_completion_markers'),
        sa.UniqueConstraint(
            'user_id', 'action_id', name='uq_completion_markers_user_action'
        ),
    )

    op.create_table(
        'window_counts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('action_id', sa.String(length=64), nullable=False),
        sa.Column('period_kind', sa.String(length=16), nullable=False),
        sa.Column('period_key', sa.String(length=10), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_window_counts'),
        sa.UniqueConstraint(
            'user_id', 'action_id', 'period_key',
            name='uq_window_counts_user_action_period',
        ),
    )
    op.create_index(
        'idx_window_counts_user_kind',
        'window_counts',
        ['user_id', 'period_kind'],
    )

    op.create_table(
        'referrals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('referrer_id', sa.String(length=64), nullable=False),
        sa.Column('referred_id', sa.String(length=64), nullable=False),
        sa.Column('referrer_rewarded', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('referred_rewarded', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_referrals'),
        sa.UniqueConstraint('referred_id', name='uq_referrals_referred_id'),
    )
    op.create_index('ix_referrals_referrer_id', 'referrals', ['referrer_id'])

    op.create_table(
        'balance_corrections',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('pool', sa.String(length=16), nullable=False),
        sa.Column('cached_before', sa.BigInteger(), nullable=False),
        sa.Column('ledger_sum', sa.BigInteger(), nullable=False),
        sa.Column('delta', sa.BigInteger(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_balance_corrections'),
    )
    op.create_index(
        'ix_balance_corrections_user_id', 'balance_corrections', ['user_id']
    )


def downgrade() -> None:
    """Drop ledger tables."""
    op.drop_index('ix_balance_corrections_user_id', table_name='balance_corrections')
    op.drop_table('balance_corrections')
    op.drop_index('ix_referrals_referrer_id', table_name='referrals')
    op.drop_table('referrals')
    op.drop_index('idx_window_counts_user_kind', table_name='window_counts')
    op.drop_table('window_counts')
    op.drop_table('completion_markers')
    op.drop_index('idx_credit_transactions_user_pool', table_name='credit_transactions')
    op.drop_index('idx_credit_transactions_user_created', table_name='credit_transactions')
    op.drop_table('credit_transactions')
    op.drop_table('user_balances')
