"""Tests for the Alembic schema migrations."""

import pytest
from sqlalchemy import inspect

from reconciler.database.connection import DatabaseManager
from reconciler.database.migration_manager import MigrationManager
from reconciler.types import DatabaseConfig

RECONCILER_TABLES = {"polling_state", "contract_events", "validator_rewards", "reward_actions"}


@pytest.fixture
def file_db(tmp_path):
    manager = DatabaseManager(DatabaseConfig(url=f"sqlite:///{tmp_path / 'reconciler.db'}"))
    manager.initialize()
    yield manager
    manager.shutdown()


@pytest.fixture
def migrations(file_db):
    return MigrationManager(file_db)


def _tables(db_manager):
    return set(inspect(db_manager.engine).get_table_names()) - {"alembic_version"}


def _unique_constraints(db_manager, table):
    return {c["name"] for c in inspect(db_manager.engine).get_unique_constraints(table)}


class TestInitialRevision:

    def test_upgrade_creates_reconciler_tables(self, file_db, migrations):
        assert migrations.current_revision() is None

        migrations.upgrade("head")

        assert _tables(file_db) == RECONCILER_TABLES
        assert migrations.current_revision() == "0001_initial"

    def test_natural_keys_are_unique(self, file_db, migrations):
        migrations.upgrade("head")

        assert "uq_contract_events_tx_log" in _unique_constraints(file_db, "contract_events")
        assert "uq_validator_rewards_operator_epoch" in _unique_constraints(file_db, "validator_rewards")

    def test_migrated_schema_accepts_repository_writes(self, file_db, migrations):
        migrations.upgrade("head")
        repo = file_db.get_validator_reward_repo()

        with file_db.get_transaction() as session:
            repo.append(session, "0x" + "2" * 40, 4, 10 ** 30, claimed=False)

        with file_db.get_session() as session:
            assert repo.sum_unclaimed(session, "0x" + "2" * 40) == 10 ** 30

    def test_downgrade_to_base_drops_tables(self, file_db, migrations):
        migrations.upgrade("head")

        migrations.downgrade("base")

        assert _tables(file_db) == set()
        assert migrations.current_revision() is None
