# reconciler/database/__init__.py

from .connection import DatabaseManager
from .base import ModelBase
from .tables import (
    DBPollingState,
    DBContractEvent,
    DBValidatorReward,
    DBRewardAction,
    RewardActionType,
)
