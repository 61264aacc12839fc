"""initial reconciler tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from reconciler.database.types import EvmAddressType, EvmHashType, TokenAmountType

revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'polling_state',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('last_block', sa.BigInteger(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('last_block >= 0', name='ck_polling_state_last_block_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'contract_events',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('address', EvmAddressType(), nullable=False),
        sa.Column('block_number', sa.BigInteger(), nullable=False),
        sa.Column('transaction_hash', EvmHashType(), nullable=False),
        sa.Column('log_index', sa.Integer(), nullable=False),
        sa.Column('data', sa.Text(), nullable=False),
        sa.Column('topics', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('transaction_hash', 'log_index', name='uq_contract_events_tx_log'),
    )
    op.create_index('ix_contract_events_address', 'contract_events', ['address'])
    op.create_index('ix_contract_events_block_number', 'contract_events', ['block_number'])
    op.create_index('idx_contract_events_block_log', 'contract_events', ['block_number', 'log_index'])

    op.create_table(
        'validator_rewards',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('operator_address', EvmAddressType(), nullable=False),
        sa.Column('epoch', sa.Integer(), nullable=False),
        sa.Column('reward_amount', TokenAmountType(), nullable=False),
        sa.Column('claimed', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('epoch >= 1', name='ck_validator_rewards_epoch_positive'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('operator_address', 'epoch', name='uq_validator_rewards_operator_epoch'),
    )
    op.create_index('idx_validator_rewards_operator_claimed', 'validator_rewards', ['operator_address', 'claimed'])

    op.create_table(
        'reward_actions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('action_type', sa.Enum('RESTAKING', 'SELL', name='rewardactiontype', native_enum=False, length=20), nullable=False),
        sa.Column('amount', TokenAmountType(), nullable=False),
        sa.Column('average_price', sa.Float(), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_reward_actions_action_type', 'reward_actions', ['action_type'])


def downgrade() -> None:
    op.drop_index('ix_reward_actions_action_type', table_name='reward_actions')
    op.drop_table('reward_actions')
    op.drop_index('idx_validator_rewards_operator_claimed', table_name='validator_rewards')
    op.drop_table('validator_rewards')
    op.drop_index('idx_contract_events_block_log', table_name='contract_events')
    op.drop_index('ix_contract_events_block_number', table_name='contract_events')
    op.drop_index('ix_contract_events_address', table_name='contract_events')
    op.drop_table('contract_events')
    op.drop_table('polling_state')
