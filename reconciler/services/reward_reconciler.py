# reconciler/services/reward_reconciler.py

"""
Validator operator reward reconciliation.

Every pass first flips ``claimed`` for epochs at or below the on-chain
claim watermark, then looks for newly accrued reward using the configured
strategy:

- ``epoch``: walk finalized epochs after the last stored one and compute
  each epoch's operator reward from contribution weights and emission.
- ``aggregate``: diff the on-chain claimable total against the stored
  unclaimed sum and record any positive delta as the next epoch past both
  the last stored one and the claim watermark. An empty ledger is left to
  the bootstrap step.

The two strategies number epochs differently and must not be mixed on
one dataset.
"""

from typing import List, Optional, Tuple

from ..clients.interfaces import RewardChainReaderInterface
from ..core.errors import InvariantViolation
from ..core.logging import LoggingMixin
from ..database.connection import DatabaseManager
from ..types import (
    RewardConfig,
    RewardResult,
    Skipped,
    NoChange,
    NewReward,
    Initialized,
)
from .reward_calculator import EpochRewardInputs, EpochRewardBreakdown, compute_operator_reward


class RewardReconciler(LoggingMixin):
    name = "rewards"

    def __init__(self, db_manager: DatabaseManager, chain: RewardChainReaderInterface,
                 config: RewardConfig):
        if config.strategy not in ("epoch", "aggregate"):
            raise ValueError(f"Unknown reward strategy: {config.strategy}")

        self.db_manager = db_manager
        self.chain = chain
        self.config = config
        self.operator = config.operator_address
        self.reward_repo = db_manager.get_validator_reward_repo()

    def skipped_result(self) -> RewardResult:
        return Skipped()

    def run(self) -> RewardResult:
        self.log_info("Polling for validator rewards",
                      operator=self.operator, strategy=self.config.strategy)

        watermark, claimed_updated = self.update_claimed_status()

        if self.config.strategy == "aggregate":
            result = self._accrue_from_claimable_total(watermark, claimed_updated)
        else:
            result = self._accrue_from_epochs(watermark, claimed_updated)

        if result is None:
            result = self._bootstrap_if_empty(watermark, claimed_updated)

        if result is None:
            self.log_info("No new rewards detected", operator=self.operator)
            result = NoChange(claimed_updated=claimed_updated)

        return result

    # === Claimed status ===

    def update_claimed_status(self) -> Tuple[int, int]:
        """Returns ``(watermark, rows_flipped)``."""
        watermark = self.chain.last_claimed_operator_rewards_epoch(self.operator)
        if watermark <= 0:
            return watermark, 0

        with self.db_manager.get_transaction() as session:
            updated = self.reward_repo.mark_claimed_through(session, self.operator, watermark)

        if updated:
            self.log_info("Updated claimed status for rewards",
                          operator=self.operator, count=updated, epoch=watermark)
        return watermark, updated

    # === Aggregate-diff strategy ===

    def _accrue_from_claimable_total(self, watermark: int, claimed_updated: int) -> Optional[RewardResult]:
        claimable = self.chain.claimable_operator_rewards(self.operator)

        with self.db_manager.get_transaction() as session:
            latest = self.reward_repo.get_latest(session, self.operator)
            if latest is None:
                # Empty ledger is seeded by the bootstrap path
                return None

            unclaimed_stored = self.reward_repo.sum_unclaimed(session, self.operator)
            new_amount = claimable - unclaimed_stored
            if new_amount <= 0:
                self.log_debug("Claimable total already accounted for",
                               operator=self.operator,
                               claimable=str(claimable),
                               unclaimed=str(unclaimed_stored))
                return None

            # Epochs at or below the watermark are already claimed on chain
            epoch = max(latest.epoch + 1, watermark + 1)

            self.log_info("Found new reward to persist",
                          operator=self.operator, epoch=epoch, amount=str(new_amount))
            self.reward_repo.append(session, self.operator, epoch, new_amount, claimed=False)

        return NewReward(epoch=epoch, amount=new_amount, claimed_updated=claimed_updated)

    # === Per-epoch strategy ===

    def _first_unprocessed_epoch(self, watermark: int) -> int:
        with self.db_manager.get_session() as session:
            latest = self.reward_repo.get_latest(session, self.operator)

        if latest is not None:
            return latest.epoch + 1
        return max(watermark + 1, self.config.start_epoch or 1)

    def compute_epoch_reward(self, epoch: int) -> EpochRewardBreakdown:
        contribution = self.chain.operator_contribution(epoch, self.operator)
        if contribution is None:
            return EpochRewardBreakdown(epoch=epoch, total_reward=0, staker_reward=0,
                                        commission=0, operator_reward=0)

        inputs = EpochRewardInputs(
            epoch=epoch,
            validator_emission=self.chain.validator_emission(epoch),
            operator_weight=contribution.weight,
            total_weight=self.chain.total_weight(epoch),
            collateral_share=contribution.collateral_share,
            delegation_share=contribution.delegation_share,
            commission_rate=self.chain.commission_rate(epoch, self.operator),
            max_commission_rate=self.config.max_commission_rate,
        )
        return compute_operator_reward(inputs)

    def _accrue_from_epochs(self, watermark: int, claimed_updated: int) -> Optional[RewardResult]:
        current_epoch = self.chain.current_epoch()
        first_epoch = self._first_unprocessed_epoch(watermark)

        appended: List[EpochRewardBreakdown] = []
        for epoch in range(first_epoch, current_epoch):
            if not self.chain.contribution_available(epoch):
                self.log_info("Contribution data not finalized, stopping",
                              operator=self.operator, epoch=epoch)
                break

            breakdown = self.compute_epoch_reward(epoch)

            with self.db_manager.get_transaction() as session:
                self.reward_repo.upsert_epoch_reward(
                    session, self.operator, epoch,
                    breakdown.operator_reward,
                    claimed=epoch <= watermark,
                )
            appended.append(breakdown)

            self.log_info("Epoch reward recorded",
                          operator=self.operator, epoch=epoch,
                          amount=str(breakdown.operator_reward),
                          total_reward=str(breakdown.total_reward),
                          commission=str(breakdown.commission))

        if not appended:
            return None

        return NewReward(
            epoch=appended[-1].epoch,
            amount=sum(item.operator_reward for item in appended),
            epoch_count=len(appended),
            claimed_updated=claimed_updated,
        )

    # === Empty ledger bootstrap ===

    def _bootstrap_if_empty(self, watermark: int, claimed_updated: int) -> Optional[RewardResult]:
        with self.db_manager.get_transaction() as session:
            if self.reward_repo.count_for_operator(session, self.operator) > 0:
                return None

            claimable = self.chain.claimable_operator_rewards(self.operator)
            if claimable < 0:
                raise InvariantViolation("Claimable reward is negative",
                                         operator=self.operator, amount=claimable)
            if claimable == 0:
                self.log_debug("Ledger empty and nothing claimable yet", operator=self.operator)
                return None

            epoch = watermark + 1 if watermark > 0 else 1
            self.reward_repo.append(session, self.operator, epoch, claimable, claimed=False)

        self.log_info("Initialized validator rewards dataset",
                      operator=self.operator, epoch=epoch, amount=str(claimable))
        return Initialized(epoch=epoch, amount=claimable, claimed_updated=claimed_updated)
