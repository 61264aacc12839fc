# reconciler/database/tables/reward_action.py

import enum

from sqlalchemy import Column, Enum, Float, Text

from ..base import DBBaseModel
from ..types import TokenAmountType


class RewardActionType(enum.Enum):
    RESTAKING = "RESTAKING"
    SELL = "SELL"


class DBRewardAction(DBBaseModel):
    """Operator-recorded restake or sale of claimed rewards. Written by the application, read here."""

    __tablename__ = 'reward_actions'

    action_type = Column(Enum(RewardActionType, native_enum=False, length=20), nullable=False, index=True)
    amount = Column(TokenAmountType(), nullable=False)
    average_price = Column(Float, nullable=True)
    note = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<RewardAction(type={self.action_type.value}, amount={self.amount})>"
