# reconciler/database/tables/contract_event.py

from sqlalchemy import Column, Integer, BigInteger, Text, JSON, UniqueConstraint, Index
from sqlalchemy.dialects.postgresql import JSONB

from ..base import DBBaseModel
from ..types import EvmAddressType, EvmHashType
from ...types import ChainLog


class DBContractEvent(DBBaseModel):
    """Raw log as emitted on-chain. Immutable once written; created_at is the ingestion time."""

    __tablename__ = 'contract_events'

    address = Column(EvmAddressType(), nullable=False, index=True)
    block_number = Column(BigInteger, nullable=False, index=True)
    transaction_hash = Column(EvmHashType(), nullable=False)
    log_index = Column(Integer, nullable=False)
    data = Column(Text, nullable=False)
    topics = Column(JSON().with_variant(JSONB(), 'postgresql'), nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint('transaction_hash', 'log_index', name='uq_contract_events_tx_log'),
        Index('idx_contract_events_block_log', 'block_number', 'log_index'),
    )

    @classmethod
    def mapping_from_log(cls, log: ChainLog) -> dict:
        return {
            'address': log.address,
            'block_number': log.block_number,
            'transaction_hash': log.transaction_hash,
            'log_index': log.log_index,
            'data': log.data,
            'topics': list(log.topics),
        }

    def __repr__(self) -> str:
        return f"<ContractEvent(block={self.block_number}, tx={self.transaction_hash[:10]}..., log_index={self.log_index})>"
