# reconciler/services/event_syncer.py

from typing import Optional

from ..clients.interfaces import RPCClientInterface
from ..core.errors import InvariantViolation
from ..core.logging import LoggingMixin
from ..database.connection import DatabaseManager
from ..types import (
    EventSyncConfig,
    EventSyncResult,
    EventsSkipped,
    EventsUpToDate,
    EventsSynced,
)


class EventLogSyncer(LoggingMixin):
    """
    Copies one contract's logs into ``contract_events`` behind a block cursor.

    Each pass scans ``[cursor + 1, head]`` in a single eth_getLogs call, stores
    new logs, and advances the cursor to ``head`` in the same transaction,
    so a failed pass leaves the cursor where it was and the next pass
    re-reads the range. Logs the node flags as ``removed`` are not stored.
    """

    name = "events"

    def __init__(self, db_manager: DatabaseManager, rpc_client: RPCClientInterface,
                 config: EventSyncConfig):
        self.db_manager = db_manager
        self.rpc = rpc_client
        self.config = config
        self.cursor_repo = db_manager.get_polling_state_repo()
        self.event_repo = db_manager.get_contract_event_repo()

    @property
    def topics(self) -> Optional[list]:
        return [self.config.topic] if self.config.topic else None

    def skipped_result(self) -> EventSyncResult:
        return EventsSkipped()

    def ensure_initial_state(self) -> int:
        with self.db_manager.get_transaction() as session:
            state = self.cursor_repo.ensure(session, self.config.cursor_id, self.config.start_block)
            return state.last_block

    def run(self) -> EventSyncResult:
        last_processed = self.ensure_initial_state()

        head = self.rpc.get_latest_block_number()
        if head < 0:
            raise InvariantViolation("Node reported a negative block number", block_number=head)

        from_block = last_processed + 1
        to_block = head

        if from_block > to_block:
            self.log_debug("No new blocks to process", from_block=from_block, to_block=to_block)
            return EventsUpToDate(cursor=last_processed)

        self.log_info("Polling contract logs", contract_address=self.config.contract_address,
                      from_block=from_block, to_block=to_block)

        logs = self.rpc.get_logs(self.config.contract_address, from_block, to_block, self.topics)

        for log in logs:
            if not from_block <= log.block_number <= to_block:
                raise InvariantViolation("Node returned a log outside the requested range",
                                         block_number=log.block_number,
                                         from_block=from_block, to_block=to_block)

        dropped = [log for log in logs if log.removed]
        if dropped:
            self.log_warning("Skipping logs removed by a reorg", count=len(dropped),
                             from_block=from_block, to_block=to_block)
            logs = [log for log in logs if not log.removed]

        with self.db_manager.get_transaction() as session:
            stored = self.event_repo.bulk_create_skip_existing(session, logs) if logs else 0
            self.cursor_repo.advance(session, self.config.cursor_id, to_block)

        if logs:
            self.log_info("Stored contract logs", count=len(logs), stored=stored,
                          from_block=from_block, to_block=to_block)
        else:
            self.log_debug("No new logs found", from_block=from_block, to_block=to_block)

        return EventsSynced(
            from_block=from_block,
            to_block=to_block,
            log_count=len(logs),
            stored_count=stored,
        )
