# reconciler/database/tables/validator_reward.py

from sqlalchemy import Column, Integer, Boolean, UniqueConstraint, Index, CheckConstraint

from ..base import DBBaseModel
from ..types import EvmAddressType, TokenAmountType


class DBValidatorReward(DBBaseModel):
    __tablename__ = 'validator_rewards'

    operator_address = Column(EvmAddressType(), nullable=False)
    epoch = Column(Integer, nullable=False)
    reward_amount = Column(TokenAmountType(), nullable=False)
    claimed = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint('operator_address', 'epoch', name='uq_validator_rewards_operator_epoch'),
        Index('idx_validator_rewards_operator_claimed', 'operator_address', 'claimed'),
        CheckConstraint('epoch >= 1', name='ck_validator_rewards_epoch_positive'),
    )

    def __repr__(self) -> str:
        return f"<ValidatorReward(operator={self.operator_address[:10]}..., epoch={self.epoch}, amount={self.reward_amount}, claimed={self.claimed})>"
