# reconciler/database/repositories/polling_state_repository.py

from typing import Optional

from sqlalchemy.orm import Session

from ..base_repository import BaseRepository
from ..tables.polling import DBPollingState
from ...core.errors import InvariantViolation
from ...core.logging import log_with_context, INFO, DEBUG, ERROR


class PollingStateRepository(BaseRepository[DBPollingState]):
    """Persisted block cursor for the event syncer"""

    def __init__(self, db_manager):
        super().__init__(db_manager, DBPollingState)

    def get(self, session: Session, cursor_id: int) -> Optional[DBPollingState]:
        state = self.get_by_id(session, cursor_id)
        if state is not None and state.last_block < 0:
            raise InvariantViolation("Stored cursor is negative",
                                     cursor_id=cursor_id, last_block=state.last_block)
        return state

    def ensure(self, session: Session, cursor_id: int, start_block: int) -> DBPollingState:
        """Return the cursor, creating it at ``max(start_block - 1, 0)`` on first use."""
        state = self.get(session, cursor_id)
        if state is not None:
            return state

        initial_block = max(start_block - 1, 0)
        state = self.create(session, id=cursor_id, last_block=initial_block)

        log_with_context(self.logger, INFO, "Polling cursor initialized",
                         cursor_id=cursor_id, block_number=initial_block)
        return state

    def advance(self, session: Session, cursor_id: int, block_number: int) -> DBPollingState:
        try:
            state = session.get(DBPollingState, cursor_id, with_for_update=True)
        except Exception as e:
            log_with_context(self.logger, ERROR, "Error loading polling cursor",
                             cursor_id=cursor_id, error=str(e))
            raise

        if state is None:
            raise InvariantViolation("Cannot advance a cursor that does not exist", cursor_id=cursor_id)

        if block_number < state.last_block:
            raise InvariantViolation("Cursor may not move backwards",
                                     cursor_id=cursor_id,
                                     last_block=state.last_block,
                                     requested_block=block_number)

        state.last_block = block_number
        session.flush()

        log_with_context(self.logger, DEBUG, "Polling cursor advanced",
                         cursor_id=cursor_id, block_number=block_number)
        return state
