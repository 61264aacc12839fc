# reconciler/services/__init__.py

from .reward_calculator import (
    EpochRewardInputs,
    EpochRewardBreakdown,
    compute_operator_reward,
    MAX_COMMISSION_RATE,
)
from .scheduler import ReconciliationScheduler, SchedulerState
from .event_syncer import EventLogSyncer
from .reward_reconciler import RewardReconciler
from .runtime import ReconcilerRuntime
