# reconciler/database/repositories/reward_action_repository.py

from typing import Dict

from msgspec import Struct
from sqlalchemy.orm import Session

from ..base_repository import BaseRepository
from ..tables.reward_action import DBRewardAction, RewardActionType


class RewardBalance(Struct, frozen=True):
    total_claimed: int
    total_restaked: int
    total_sold: int

    @property
    def available(self) -> int:
        return self.total_claimed - self.total_restaked - self.total_sold


class RewardActionRepository(BaseRepository[DBRewardAction]):
    """Read-only view of the manually recorded restake / sell ledger"""

    def __init__(self, db_manager):
        super().__init__(db_manager, DBRewardAction)

    def totals(self, session: Session) -> Dict[RewardActionType, int]:
        totals = {action_type: 0 for action_type in RewardActionType}
        for action_type, amount in session.query(DBRewardAction.action_type, DBRewardAction.amount):
            totals[action_type] += amount
        return totals


def compute_balance(total_claimed: int, action_totals: Dict[RewardActionType, int]) -> RewardBalance:
    return RewardBalance(
        total_claimed=total_claimed,
        total_restaked=action_totals.get(RewardActionType.RESTAKING, 0),
        total_sold=action_totals.get(RewardActionType.SELL, 0),
    )
