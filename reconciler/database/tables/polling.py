# reconciler/database/tables/polling.py

from sqlalchemy import Column, Integer, BigInteger, CheckConstraint

from ..base import ModelBase, TimestampMixin


class DBPollingState(ModelBase, TimestampMixin):
    """Last block whose logs are fully persisted. One row per event syncer."""

    __tablename__ = 'polling_state'

    id = Column(Integer, primary_key=True, autoincrement=False)
    last_block = Column(BigInteger, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint('last_block >= 0', name='ck_polling_state_last_block_non_negative'),
    )

    def __repr__(self) -> str:
        return f"<PollingState(id={self.id}, last_block={self.last_block})>"
