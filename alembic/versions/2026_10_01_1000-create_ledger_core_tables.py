"""create_ledger_core_tables

Revision ID: create_ledger_core_20261001
Revises:
Create Date: 2026-10-01 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'create_ledger_core_20261001'
down_revision = None
branch_labels = None
depends_on = None

# Enum columns store member names
kyc_status = sa.Enum('UNVERIFIED', 'PENDING', 'VERIFIED', name='kyc_status')
user_role = sa.Enum('USER', 'ADMIN', name='user_role')
asset_type = sa.Enum('STOCK', 'CRYPTO', 'FOREX', name='asset_type')
trader_status = sa.Enum('ACTIVE', 'INACTIVE', name='trader_status')
copy_status = sa.Enum('ACTIVE', 'PAUSED', 'STOPPED', name='copy_status')
trade_type = sa.Enum('BUY', 'SELL', name='trade_type')
trade_status = sa.Enum('PENDING', 'EXECUTED', 'FAILED', name='trade_status')
plan_status = sa.Enum('ACTIVE', 'INACTIVE', name='plan_status')
investment_status = sa.Enum('ACTIVE', 'COMPLETED', name='investment_status')
transaction_type = sa.Enum('DEPOSIT', 'WITHDRAWAL', 'INVESTMENT', 'INVESTMENT_RETURN', name='transaction_type')
transaction_status = sa.Enum('PENDING', 'COMPLETED', 'FAILED', name='transaction_status')


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('balance', sa.Numeric(24, 8), nullable=False, server_default='0'),
        sa.Column('kyc_status', kyc_status, nullable=False, server_default='UNVERIFIED'),
        sa.Column('role', user_role, nullable=False, server_default='USER'),
        sa.Column('suspended', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('balance >= 0', name='check_users_balance_non_negative'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'assets',
        *_base_columns(),
        sa.Column('symbol', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', asset_type, nullable=False),
        sa.Column('price', sa.Numeric(24, 8), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_assets_id'), 'assets', ['id'], unique=False)
    op.create_index(op.f('ix_assets_symbol'), 'assets', ['symbol'], unique=True)
    op.create_index(op.f('ix_assets_type'), 'assets', ['type'], unique=False)

    op.create_table(
        'traders',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('win_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('profit_30d', sa.Numeric(8, 2), nullable=False, server_default='0'),
        sa.Column('followers', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('rating', sa.Numeric(3, 1), nullable=False, server_default='0'),
        sa.Column('status', trader_status, nullable=False, server_default='ACTIVE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_traders_user_id'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_traders_id'), 'traders', ['id'], unique=False)
    op.create_index(op.f('ix_traders_user_id'), 'traders', ['user_id'], unique=True)

    op.create_table(
        'copy_relationships',
        *_base_columns(),
        sa.Column('follower_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('trader_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('allocation_percentage', sa.Numeric(5, 2), nullable=False, server_default='100'),
        sa.Column('status', copy_status, nullable=False, server_default='ACTIVE'),
        sa.ForeignKeyConstraint(['follower_id'], ['users.id'], name='fk_copy_relationships_follower_id'),
        sa.ForeignKeyConstraint(['trader_id'], ['traders.id'], name='fk_copy_relationships_trader_id'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            'allocation_percentage >= 1 AND allocation_percentage <= 100',
            name='check_copy_relationships_allocation_range',
        ),
    )
    op.create_index(op.f('ix_copy_relationships_id'), 'copy_relationships', ['id'], unique=False)
    op.create_index(op.f('ix_copy_relationships_follower_id'), 'copy_relationships', ['follower_id'], unique=False)
    op.create_index(op.f('ix_copy_relationships_trader_id'), 'copy_relationships', ['trader_id'], unique=False)
    op.create_index(op.f('ix_copy_relationships_status'), 'copy_relationships', ['status'], unique=False)
    op.create_index('ix_copy_relationships_trader_status', 'copy_relationships', ['trader_id', 'status'], unique=False)

    op.create_table(
        'trades',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('asset_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('type', trade_type, nullable=False),
        sa.Column('amount', sa.Numeric(24, 8), nullable=False),
        sa.Column('price', sa.Numeric(24, 8), nullable=False),
        sa.Column('status', trade_status, nullable=False, server_default='PENDING'),
        sa.Column('executed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('copied_from_trade_id', sa.Uuid(as_uuid=True), nullable=True),
        sa.Column('failure_reason', sa.String(length=50), nullable=True),
        sa.Column('failed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_trades_user_id'),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id'], name='fk_trades_asset_id'),
        sa.ForeignKeyConstraint(['copied_from_trade_id'], ['trades.id'], name='fk_trades_copied_from_trade_id'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='check_trades_amount_positive'),
    )
    op.create_index(op.f('ix_trades_id'), 'trades', ['id'], unique=False)
    op.create_index(op.f('ix_trades_user_id'), 'trades', ['user_id'], unique=False)
    op.create_index(op.f('ix_trades_asset_id'), 'trades', ['asset_id'], unique=False)
    op.create_index(op.f('ix_trades_status'), 'trades', ['status'], unique=False)
    op.create_index(op.f('ix_trades_copied_from_trade_id'), 'trades', ['copied_from_trade_id'], unique=False)
    op.create_index('ix_trades_status_created_at', 'trades', ['status', 'created_at'], unique=False)

    op.create_table(
        'investment_plans',
        *_base_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('min_amount', sa.Numeric(24, 8), nullable=False),
        sa.Column('max_amount', sa.Numeric(24, 8), nullable=True),
        sa.Column('roi_percentage', sa.Numeric(7, 2), nullable=False),
        sa.Column('lock_period_days', sa.Integer(), nullable=False),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('status', plan_status, nullable=False, server_default='ACTIVE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('min_amount >= 0', name='check_investment_plans_min_amount'),
        sa.CheckConstraint('lock_period_days > 0', name='check_investment_plans_lock_period'),
    )
    op.create_index(op.f('ix_investment_plans_id'), 'investment_plans', ['id'], unique=False)
    op.create_index(op.f('ix_investment_plans_status'), 'investment_plans', ['status'], unique=False)

    op.create_table(
        'investments',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('plan_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('amount', sa.Numeric(24, 8), nullable=False),
        sa.Column('roi_percentage', sa.Numeric(7, 2), nullable=False),
        sa.Column('lock_period_days', sa.Integer(), nullable=False),
        sa.Column('status', investment_status, nullable=False, server_default='ACTIVE'),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('profit', sa.Numeric(24, 8), nullable=True),
        sa.Column('total_return', sa.Numeric(24, 8), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_investments_user_id'),
        sa.ForeignKeyConstraint(['plan_id'], ['investment_plans.id'], name='fk_investments_plan_id'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='check_investments_amount_positive'),
    )
    op.create_index(op.f('ix_investments_id'), 'investments', ['id'], unique=False)
    op.create_index(op.f('ix_investments_user_id'), 'investments', ['user_id'], unique=False)
    op.create_index(op.f('ix_investments_plan_id'), 'investments', ['plan_id'], unique=False)
    op.create_index(op.f('ix_investments_status'), 'investments', ['status'], unique=False)
    op.create_index('ix_investments_status_end_date', 'investments', ['status', 'end_date'], unique=False)

    op.create_table(
        'transactions',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('type', transaction_type, nullable=False),
        sa.Column('amount', sa.Numeric(24, 8), nullable=False),
        sa.Column('status', transaction_status, nullable=False, server_default='PENDING'),
        sa.Column('method', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('transaction_ref', sa.String(length=255), nullable=True),
        sa.Column('payment_proof_url', sa.String(length=1024), nullable=True),
        sa.Column('withdrawal_address', sa.String(length=255), nullable=True),
        sa.Column('withdrawal_details', sa.JSON(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.Uuid(as_uuid=True), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('investment_id', sa.Uuid(as_uuid=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_transactions_user_id'),
        sa.ForeignKeyConstraint(['reviewed_by'], ['users.id'], name='fk_transactions_reviewed_by'),
        sa.ForeignKeyConstraint(['investment_id'], ['investments.id'], name='fk_transactions_investment_id'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='check_transactions_amount_positive'),
        sa.UniqueConstraint('investment_id', 'type', name='uq_transactions_investment_type'),
    )
    op.create_index(op.f('ix_transactions_id'), 'transactions', ['id'], unique=False)
    op.create_index(op.f('ix_transactions_user_id'), 'transactions', ['user_id'], unique=False)
    op.create_index(op.f('ix_transactions_type'), 'transactions', ['type'], unique=False)
    op.create_index(op.f('ix_transactions_status'), 'transactions', ['status'], unique=False)
    op.create_index(op.f('ix_transactions_investment_id'), 'transactions', ['investment_id'], unique=False)
    op.create_index('ix_transactions_status_created_at', 'transactions', ['status', 'created_at'], unique=False)


def downgrade() -> None:
    # Drop tables in reverse dependency order (indexes go with them)
    op.drop_table('transactions')
    op.drop_table('investments')
    op.drop_table('investment_plans')
    op.drop_table('trades')
    op.drop_table('copy_relationships')
    op.drop_table('traders')
    op.drop_table('assets')
    op.drop_table('users')

    # Drop enum types
    bind = op.get_bind()
    for enum_type in (
        transaction_status, transaction_type, investment_status, plan_status,
        trade_status, trade_type, copy_status, trader_status, asset_type,
        user_role, kyc_status,
    ):
        enum_type.drop(bind, checkfirst=True)
