# reconciler/database/tables/__init__.py

from .polling import DBPollingState
from .contract_event import DBContractEvent
from .validator_reward import DBValidatorReward
from .reward_action import DBRewardAction, RewardActionType

__all__ = [
    'DBPollingState',
    'DBContractEvent',
    'DBValidatorReward',
    'DBRewardAction',
    'RewardActionType',
]
