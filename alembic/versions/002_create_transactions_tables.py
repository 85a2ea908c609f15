"""Create transactions and transaction_lines tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-01 00:00:01.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'transactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('customer_name', sa.String(256), nullable=True),
        sa.Column(
            'status',
            sa.Enum(
                'open', 'closed', 'cancelled',
                name='transaction_status',
                native_enum=False,
                create_constraint=True,
                length=16,
            ),
            nullable=False,
        ),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
        sa.Column('paid_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('change_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('closed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "(status = 'open' AND paid_amount IS NULL AND change_amount IS NULL"
            " AND closed_at IS NULL)"
            " OR (status = 'closed' AND paid_amount IS NOT NULL"
            " AND change_amount IS NOT NULL AND closed_at IS NOT NULL)"
            " OR (status = 'cancelled' AND paid_amount IS NULL"
            " AND change_amount IS NULL AND closed_at IS NOT NULL)",
            name='ck_transactions_settlement',
        ),
        sa.CheckConstraint('total >= 0', name='ck_transactions_total_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_transactions_status'), 'transactions', ['status'], unique=False)
    op.create_index(op.f('ix_transactions_customer_name'), 'transactions', ['customer_name'], unique=False)
    op.create_index(op.f('ix_transactions_closed_at'), 'transactions', ['closed_at'], unique=False)

    op.create_table(
        'transaction_lines',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('transaction_id', sa.Uuid(), nullable=False),
        sa.Column('item_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('quantity >= 1', name='ck_transaction_lines_quantity_positive'),
        sa.ForeignKeyConstraint(['transaction_id'], ['transactions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        op.f('ix_transaction_lines_transaction_id'),
        'transaction_lines',
        ['transaction_id'],
        unique=False
    )
    op.create_index(
        op.f('ix_transaction_lines_item_id'),
        'transaction_lines',
        ['item_id'],
        unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f('ix_transaction_lines_item_id'), table_name='transaction_lines')
    op.drop_index(op.f('ix_transaction_lines_transaction_id'), table_name='transaction_lines')
    op.drop_table('transaction_lines')
    op.drop_index(op.f('ix_transactions_closed_at'), table_name='transactions')
    op.drop_index(op.f('ix_transactions_customer_name'), table_name='transactions')
    op.drop_index(op.f('ix_transactions_status'), table_name='transactions')
    op.drop_table('transactions')
