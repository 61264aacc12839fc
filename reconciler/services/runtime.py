# reconciler/services/runtime.py

from typing import Any, Dict, List, Optional

from ..core.logging import LoggingMixin
from ..database.connection import DatabaseManager
from ..database.repositories import compute_balance
from ..types import EventSyncResult, ReconcilerConfig, RewardResult
from .event_syncer import EventLogSyncer
from .reward_reconciler import RewardReconciler
from .scheduler import ReconciliationScheduler


class ReconcilerRuntime(LoggingMixin):
    """
    Owns the database, the enabled reconciliation jobs and their schedules.

    The event syncer and reward reconciler run on independent schedulers
    with separate single-flight guards.
    """

    def __init__(self, config: ReconcilerConfig, db_manager: DatabaseManager,
                 event_syncer: Optional[EventLogSyncer] = None,
                 reward_reconciler: Optional[RewardReconciler] = None):
        self.config = config
        self.db_manager = db_manager
        self.event_syncer = event_syncer
        self.reward_reconciler = reward_reconciler

        self.event_scheduler = None
        if event_syncer is not None:
            self.event_scheduler = ReconciliationScheduler(
                event_syncer, config.events.poll_interval_seconds)

        self.reward_scheduler = None
        if reward_reconciler is not None:
            self.reward_scheduler = ReconciliationScheduler(
                reward_reconciler, config.rewards.poll_interval_seconds)

    @property
    def schedulers(self) -> List[ReconciliationScheduler]:
        return [s for s in (self.event_scheduler, self.reward_scheduler) if s is not None]

    def start(self) -> None:
        started = []
        try:
            for scheduler in self.schedulers:
                scheduler.start()
                started.append(scheduler)
        except Exception:
            for scheduler in started:
                scheduler.stop()
            raise

        self.log_info("Reconciler started", count=len(started))

    def stop(self, wait: bool = True, timeout: Optional[float] = 30.0) -> None:
        for scheduler in self.schedulers:
            scheduler.stop(wait=wait, timeout=timeout)
        self.db_manager.shutdown()
        self.log_info("Reconciler stopped")

    def refresh_rewards(self) -> RewardResult:
        if self.reward_scheduler is None:
            raise RuntimeError("Reward reconciler is not configured")
        return self.reward_scheduler.refresh()

    def refresh_events(self) -> EventSyncResult:
        if self.event_scheduler is None:
            raise RuntimeError("Event syncer is not configured")
        return self.event_scheduler.refresh()

    def status(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {
            'database_connected': self.db_manager.health_check(),
            'schedulers': {
                s.job.name: {
                    'state': s.state.value,
                    'busy': s.is_busy,
                    'failures': s.failure_count,
                    'last_status': s.last_result.status if s.last_result else None,
                }
                for s in self.schedulers
            },
        }

        with self.db_manager.get_session() as session:
            if self.config.events is not None:
                cursor = self.db_manager.get_polling_state_repo().get(session, self.config.events.cursor_id)
                summary['events'] = {
                    'contract_address': self.config.events.contract_address,
                    'cursor': cursor.last_block if cursor else None,
                    'stored_events': self.db_manager.get_contract_event_repo().count(session),
                }

            if self.config.rewards is not None:
                operator = self.config.rewards.operator_address
                reward_repo = self.db_manager.get_validator_reward_repo()
                latest = reward_repo.get_latest(session, operator)
                balance = compute_balance(
                    reward_repo.total_claimed(session, operator),
                    self.db_manager.get_reward_action_repo().totals(session),
                )
                summary['rewards'] = {
                    'operator_address': operator,
                    'strategy': self.config.rewards.strategy,
                    'epochs': reward_repo.count_for_operator(session, operator),
                    'latest_epoch': latest.epoch if latest else None,
                    'unclaimed': str(reward_repo.sum_unclaimed(session, operator)),
                    'claimed': str(balance.total_claimed),
                    'restaked': str(balance.total_restaked),
                    'sold': str(balance.total_sold),
                    'available': str(balance.available),
                }

        return summary
