"""Tests for the event log syncer."""

import pytest
from msgspec.structs import replace

from reconciler.core.errors import InvariantViolation
from reconciler.services.event_syncer import EventLogSyncer
from reconciler.types import EventsSynced, EventsUpToDate

from conftest import make_log


def _cursor(db_manager, cursor_id=1):
    with db_manager.get_session() as session:
        return db_manager.get_polling_state_repo().get(session, cursor_id).last_block


def _event_count(db_manager):
    with db_manager.get_session() as session:
        return db_manager.get_contract_event_repo().count(session)


@pytest.fixture
def syncer(db_manager, rpc, event_config):
    return EventLogSyncer(db_manager, rpc, event_config)


class TestCursorInitialization:
    """The cursor starts one block before the configured start block."""

    def test_created_at_start_block_minus_one(self, syncer, db_manager):
        assert syncer.ensure_initial_state() == 99
        assert _cursor(db_manager) == 99

    def test_start_block_zero_clamps_to_zero(self, db_manager, rpc, event_config):
        syncer = EventLogSyncer(db_manager, rpc, replace(event_config, start_block=0))
        assert syncer.ensure_initial_state() == 0

    def test_existing_cursor_is_kept(self, syncer, db_manager):
        syncer.ensure_initial_state()
        with db_manager.get_transaction() as session:
            db_manager.get_polling_state_repo().advance(session, 1, 250)

        assert syncer.ensure_initial_state() == 250


class TestSyncPass:

    def test_no_new_blocks_is_a_no_op(self, syncer, rpc, db_manager):
        rpc.head = 99
        result = syncer.run()

        assert isinstance(result, EventsUpToDate)
        assert result.cursor == 99
        assert rpc.requests == []
        assert _cursor(db_manager) == 99

    def test_stores_logs_and_advances_to_head(self, syncer, rpc, db_manager):
        rpc.head = 110
        rpc.logs = [make_log(block) for block in range(100, 105)]

        result = syncer.run()

        assert isinstance(result, EventsSynced)
        assert (result.from_block, result.to_block) == (100, 110)
        assert result.log_count == 5
        assert result.stored_count == 5
        assert rpc.requests == [(100, 110)]
        assert _cursor(db_manager) == 110
        assert _event_count(db_manager) == 5

    def test_empty_range_still_advances_cursor(self, syncer, rpc, db_manager):
        rpc.head = 150
        result = syncer.run()

        assert result.log_count == 0
        assert _cursor(db_manager) == 150

    def test_next_pass_starts_after_cursor(self, syncer, rpc):
        rpc.head = 120
        syncer.run()
        rpc.head = 130
        syncer.run()

        assert rpc.requests == [(100, 120), (121, 130)]

    def test_cursor_never_moves_backwards(self, syncer, rpc, db_manager):
        rpc.head = 200
        syncer.run()

        rpc.head = 150  # node behind a load balancer
        result = syncer.run()

        assert isinstance(result, EventsUpToDate)
        assert _cursor(db_manager) == 200


class TestIdempotentIngestion:

    def test_replaying_a_range_does_not_duplicate(self, syncer, rpc, db_manager):
        rpc.head = 104
        rpc.logs = [make_log(block) for block in range(100, 105)]
        syncer.run()

        # Rewind the cursor to force the same range to be fetched again
        with db_manager.get_transaction() as session:
            state = db_manager.get_polling_state_repo().get(session, 1)
            state.last_block = 99

        result = syncer.run()

        assert result.log_count == 5
        assert result.stored_count == 0
        assert _event_count(db_manager) == 5

    def test_duplicates_within_one_batch_are_stored_once(self, syncer, rpc, db_manager):
        rpc.head = 101
        rpc.logs = [make_log(100), make_log(100), make_log(101, log_index=3)]

        result = syncer.run()

        assert result.stored_count == 2
        assert _event_count(db_manager) == 2

    def test_same_tx_different_log_index_are_distinct(self, syncer, rpc, db_manager):
        rpc.head = 100
        rpc.logs = [make_log(100, log_index=i, tx_seed=7) for i in range(3)]

        syncer.run()

        assert _event_count(db_manager) == 3


class TestFailureLeavesCursor:

    def test_rpc_failure_does_not_advance(self, syncer, rpc, db_manager):
        rpc.head = 120
        rpc.fail_next = ConnectionError("node unavailable")

        with pytest.raises(ConnectionError):
            syncer.run()

        assert _cursor(db_manager) == 99
        assert _event_count(db_manager) == 0

    def test_persist_failure_rolls_back_cursor(self, syncer, rpc, db_manager, monkeypatch):
        rpc.head = 120
        rpc.logs = [make_log(105)]

        def _fail(session, logs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(syncer.event_repo, "bulk_create_skip_existing", _fail)

        with pytest.raises(RuntimeError):
            syncer.run()

        assert _cursor(db_manager) == 99

        monkeypatch.undo()
        result = syncer.run()
        assert result.from_block == 100
        assert _event_count(db_manager) == 1

    def test_log_outside_requested_range_is_rejected(self, syncer, rpc, db_manager, monkeypatch):
        rpc.head = 110
        monkeypatch.setattr(rpc, "get_logs", lambda *args, **kwargs: [make_log(500)])

        with pytest.raises(InvariantViolation):
            syncer.run()

        assert _cursor(db_manager) == 99


class TestReorgedLogs:

    def test_removed_logs_are_not_stored(self, syncer, rpc, db_manager):
        rpc.head = 102
        rpc.logs = [make_log(100), replace(make_log(101), removed=True), make_log(102)]

        result = syncer.run()

        assert result.log_count == 2
        assert result.stored_count == 2
        assert _cursor(db_manager) == 102
        with db_manager.get_session() as session:
            events = db_manager.get_contract_event_repo().get_by_block_range(session, 0, 200)
            blocks = [e.block_number for e in events]
        assert blocks == [100, 102]


class TestStoredEventQueries:

    def test_block_range_is_inclusive_and_ordered(self, syncer, rpc, db_manager):
        rpc.head = 104
        rpc.logs = [make_log(block, log_index=i) for block in (104, 101, 103, 100, 102) for i in (1, 0)]
        syncer.run()

        with db_manager.get_session() as session:
            events = db_manager.get_contract_event_repo().get_by_block_range(session, 101, 103)
            keys = [(e.block_number, e.log_index) for e in events]

        assert keys == [(101, 0), (101, 1), (102, 0), (102, 1), (103, 0), (103, 1)]

    def test_latest_event(self, syncer, rpc, db_manager):
        rpc.head = 104
        rpc.logs = [make_log(100), make_log(103, log_index=2), make_log(103, log_index=5, tx_seed=9)]
        syncer.run()

        with db_manager.get_session() as session:
            latest = db_manager.get_contract_event_repo().get_latest(session)
            assert (latest.block_number, latest.log_index) == (103, 5)
