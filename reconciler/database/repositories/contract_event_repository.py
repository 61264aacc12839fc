# reconciler/database/repositories/contract_event_repository.py

from typing import Iterable, List, Optional

from sqlalchemy import and_, tuple_
from sqlalchemy.orm import Session

from ..base_repository import BaseRepository
from ..tables.contract_event import DBContractEvent
from ...core.logging import log_with_context, DEBUG, ERROR
from ...types import ChainLog

# Keeps the (tx_hash, log_index) IN clause below common bind-parameter limits
LOOKUP_CHUNK_SIZE = 500


class ContractEventRepository(BaseRepository[DBContractEvent]):

    def __init__(self, db_manager):
        super().__init__(db_manager, DBContractEvent)

    def bulk_create_skip_existing(self, session: Session, logs: Iterable[ChainLog]) -> int:
        """
        Insert logs not already stored, keyed on (transaction_hash, log_index).

        Existing rows are left untouched. Returns the number of rows inserted.
        """
        unique_logs = {}
        for log in logs:
            key = (log.transaction_hash.lower(), log.log_index)
            unique_logs.setdefault(key, log)

        if not unique_logs:
            return 0

        try:
            keys = list(unique_logs.keys())
            existing_keys = set()
            for start in range(0, len(keys), LOOKUP_CHUNK_SIZE):
                chunk = keys[start:start + LOOKUP_CHUNK_SIZE]
                rows = session.query(
                    DBContractEvent.transaction_hash, DBContractEvent.log_index
                ).filter(
                    tuple_(DBContractEvent.transaction_hash, DBContractEvent.log_index).in_(chunk)
                ).all()
                existing_keys.update((str(tx_hash), log_index) for tx_hash, log_index in rows)

            new_items = [
                DBContractEvent.mapping_from_log(log)
                for key, log in unique_logs.items()
                if key not in existing_keys
            ]

            if new_items:
                session.bulk_insert_mappings(DBContractEvent, new_items)
                session.flush()

            log_with_context(self.logger, DEBUG, "Bulk stored contract events",
                             count=len(new_items),
                             skipped=len(unique_logs) - len(new_items))
            return len(new_items)

        except Exception as e:
            log_with_context(self.logger, ERROR, "Error bulk storing contract events",
                             error=str(e), exception_type=type(e).__name__)
            raise

    def get_by_block_range(self, session: Session, start_block: int, end_block: int) -> List[DBContractEvent]:
        return session.query(DBContractEvent).filter(
            and_(
                DBContractEvent.block_number >= start_block,
                DBContractEvent.block_number <= end_block
            )
        ).order_by(DBContractEvent.block_number, DBContractEvent.log_index).all()

    def get_latest(self, session: Session) -> Optional[DBContractEvent]:
        return session.query(DBContractEvent).order_by(
            DBContractEvent.block_number.desc(), DBContractEvent.log_index.desc()
        ).first()
