# reconciler/database/repositories/__init__.py

from .polling_state_repository import PollingStateRepository
from .contract_event_repository import ContractEventRepository
from .validator_reward_repository import ValidatorRewardRepository
from .reward_action_repository import RewardActionRepository, RewardBalance, compute_balance
