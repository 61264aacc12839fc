# reconciler/database/repositories/validator_reward_repository.py

from typing import List, Optional, Tuple

from sqlalchemy import and_
from sqlalchemy.orm import Session

from ..base_repository import BaseRepository
from ..tables.validator_reward import DBValidatorReward
from ...core.errors import InvariantViolation
from ...core.logging import log_with_context, INFO, DEBUG, ERROR
from ...types import EvmAddress


class ValidatorRewardRepository(BaseRepository[DBValidatorReward]):
    """Per-epoch operator rewards. Rows are never deleted and ``claimed`` never reverts."""

    def __init__(self, db_manager):
        super().__init__(db_manager, DBValidatorReward)

    def get_latest(self, session: Session, operator: EvmAddress) -> Optional[DBValidatorReward]:
        try:
            return session.query(DBValidatorReward).filter(
                DBValidatorReward.operator_address == operator
            ).order_by(DBValidatorReward.epoch.desc()).first()
        except Exception as e:
            log_with_context(self.logger, ERROR, "Error getting latest reward",
                             operator=operator, error=str(e))
            raise

    def get_by_epoch(self, session: Session, operator: EvmAddress, epoch: int) -> Optional[DBValidatorReward]:
        return session.query(DBValidatorReward).filter(
            and_(
                DBValidatorReward.operator_address == operator,
                DBValidatorReward.epoch == epoch
            )
        ).one_or_none()

    def count_for_operator(self, session: Session, operator: EvmAddress) -> int:
        return session.query(DBValidatorReward).filter(
            DBValidatorReward.operator_address == operator
        ).count()

    def list_for_operator(self, session: Session, operator: EvmAddress) -> List[DBValidatorReward]:
        return session.query(DBValidatorReward).filter(
            DBValidatorReward.operator_address == operator
        ).order_by(DBValidatorReward.epoch.desc()).all()

    def _sum_amounts(self, session: Session, operator: EvmAddress, claimed: bool) -> int:
        # Summed in Python: amounts exceed what portable SQL SUM over strings can hold exactly
        rows = session.query(DBValidatorReward.reward_amount).filter(
            and_(
                DBValidatorReward.operator_address == operator,
                DBValidatorReward.claimed.is_(claimed)
            )
        ).all()
        return sum((amount for (amount,) in rows), 0)

    def sum_unclaimed(self, session: Session, operator: EvmAddress) -> int:
        return self._sum_amounts(session, operator, claimed=False)

    def total_claimed(self, session: Session, operator: EvmAddress) -> int:
        return self._sum_amounts(session, operator, claimed=True)

    def mark_claimed_through(self, session: Session, operator: EvmAddress, epoch: int) -> int:
        """Set claimed=true for every unclaimed row with epoch <= ``epoch``. Returns rows changed."""
        try:
            updated = session.query(DBValidatorReward).filter(
                and_(
                    DBValidatorReward.operator_address == operator,
                    DBValidatorReward.epoch <= epoch,
                    DBValidatorReward.claimed.is_(False)
                )
            ).update({DBValidatorReward.claimed: True}, synchronize_session=False)
            session.flush()
            return updated
        except Exception as e:
            log_with_context(self.logger, ERROR, "Error updating claimed status",
                             operator=operator, epoch=epoch, error=str(e))
            raise

    def append(self, session: Session, operator: EvmAddress, epoch: int,
               amount: int, claimed: bool = False) -> DBValidatorReward:
        """Create the row for a new epoch; refuses to write at or below the latest stored epoch."""
        latest = self.get_latest(session, operator)
        if latest is not None and epoch <= latest.epoch:
            raise InvariantViolation("Reward epoch must follow the latest stored epoch",
                                     operator=operator, epoch=epoch, latest_epoch=latest.epoch)
        if amount < 0:
            raise InvariantViolation("Reward amount may not be negative",
                                     operator=operator, epoch=epoch, amount=amount)

        reward = self.create(session,
                             operator_address=operator,
                             epoch=epoch,
                             reward_amount=amount,
                             claimed=claimed)

        log_with_context(self.logger, INFO, "Validator reward stored",
                         operator=operator, epoch=epoch, amount=str(amount), claimed=claimed)
        return reward

    def upsert_epoch_reward(self, session: Session, operator: EvmAddress, epoch: int,
                            amount: int, claimed: bool) -> Tuple[DBValidatorReward, bool]:
        """
        Insert or correct the reward for ``(operator, epoch)``.

        An existing row keeps ``claimed=True`` once set; only the amount and a
        false->true claimed transition are applied. Returns ``(row, created)``.
        """
        if amount < 0:
            raise InvariantViolation("Reward amount may not be negative",
                                     operator=operator, epoch=epoch, amount=amount)

        existing = self.get_by_epoch(session, operator, epoch)
        if existing is None:
            return self.append(session, operator, epoch, amount, claimed=claimed), True

        changed = False
        if existing.reward_amount != amount:
            log_with_context(self.logger, INFO, "Correcting stored reward amount",
                             operator=operator, epoch=epoch,
                             previous=str(existing.reward_amount), amount=str(amount))
            existing.reward_amount = amount
            changed = True
        if claimed and not existing.claimed:
            existing.claimed = True
            changed = True

        if changed:
            session.flush()
        else:
            log_with_context(self.logger, DEBUG, "Reward already up to date",
                             operator=operator, epoch=epoch)
        return existing, False
