"""create wallet ledger tables

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from storefront.models.user import system_user_row

revision: str = 'a1c2e3f4b5d6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('user', 'admin', 'system', name='userrole')
discord_role = sa.Enum('admin', 'support', 'worker', 'customer', name='discordrole')
order_status = sa.Enum('PENDING', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', 'DISPUTED', name='orderstatus')
wallet_type = sa.Enum('CUSTOMER', 'WORKER', 'SUPPORT', name='wallettype')
transaction_type = sa.Enum(
    'DEPOSIT', 'WITHDRAWAL', 'PAYMENT', 'REFUND', 'EARNING', 'COMMISSION',
    'SYSTEM_FEE', 'ADJUSTMENT', 'RELEASE', 'WORKER_DEPOSIT',
    name='wallettransactiontype',
)
transaction_status = sa.Enum('PENDING', 'COMPLETED', 'FAILED', 'REVERSED', name='wallettransactionstatus')


def upgrade() -> None:
    users = op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('fullname', sa.String(length=191), nullable=False),
        sa.Column('username', sa.String(length=191), nullable=True, unique=True),
        sa.Column('email', sa.String(length=191), nullable=False, unique=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('discord_id', sa.String(length=64), nullable=True),
        sa.Column('discord_username', sa.String(length=191), nullable=True),
        sa.Column('discord_display_name', sa.String(length=191), nullable=True),
        sa.Column('discord_role', discord_role, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_discord_id', 'users', ['discord_id'], unique=True)

    # ledger postings without an acting user are attributed to this account
    op.bulk_insert(users, [system_user_row()])
    if op.get_context().dialect.name == 'postgresql':
        op.execute("SELECT setval(pg_get_serial_sequence('users', 'id'), (SELECT MAX(id) FROM users))")

    op.create_table(
        'orders',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('order_number', sa.Integer(), nullable=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('worker_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('status', order_status, nullable=False),
        sa.Column('order_value', sa.Numeric(precision=18, scale=8), nullable=False, server_default='0'),
        sa.Column('system_payout', sa.Numeric(precision=18, scale=8), nullable=False, server_default='0'),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    op.create_table(
        'wallets',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('wallet_type', wallet_type, nullable=False),
        sa.Column('balance', sa.Numeric(precision=18, scale=8), nullable=False, server_default='0'),
        sa.Column('pending_balance', sa.Numeric(precision=18, scale=8), nullable=False, server_default='0'),
        sa.Column('deposit', sa.Numeric(precision=18, scale=8), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(length=10), nullable=False, server_default='USD'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_wallets_user_id', 'wallets', ['user_id'], unique=True)
    op.create_index('ix_wallets_wallet_type', 'wallets', ['wallet_type'])

    op.create_table(
        'wallet_transactions',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('wallet_id', sa.String(length=36), sa.ForeignKey('wallets.id'), nullable=False),
        sa.Column('order_id', sa.String(length=36), nullable=True),
        sa.Column('type', transaction_type, nullable=False),
        sa.Column('amount', sa.Numeric(precision=18, scale=8), nullable=False),
        sa.Column('balance_before', sa.Numeric(precision=18, scale=8), nullable=False),
        sa.Column('balance_after', sa.Numeric(precision=18, scale=8), nullable=False),
        sa.Column('deposit_before', sa.Numeric(precision=18, scale=8), nullable=True),
        sa.Column('deposit_after', sa.Numeric(precision=18, scale=8), nullable=True),
        sa.Column('currency', sa.String(length=10), nullable=False, server_default='USD'),
        sa.Column('status', transaction_status, nullable=False),
        sa.Column('payment_method_id', sa.String(length=64), nullable=True),
        sa.Column('reference', sa.String(length=191), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_wallet_transactions_wallet_id', 'wallet_transactions', ['wallet_id'])
    op.create_index('ix_wallet_transactions_order_id', 'wallet_transactions', ['order_id'])
    op.create_index('ix_wallet_transactions_type', 'wallet_transactions', ['type'])
    op.create_index('ix_wallet_transactions_status', 'wallet_transactions', ['status'])
    op.create_index('ix_wallet_transactions_created_at', 'wallet_transactions', ['created_at'])
    op.create_index('ix_wallet_transactions_wallet_created', 'wallet_transactions', ['wallet_id', 'created_at'])


def downgrade() -> None:
    op.drop_table('wallet_transactions')
    op.drop_table('wallets')
    op.drop_table('orders')
    op.drop_table('users')
    for enum_type in (transaction_status, transaction_type, wallet_type, order_status, discord_role, user_role):
        enum_type.drop(op.get_bind(), checkfirst=True)
