"""Tests for the reconciler command line."""

import json

import pytest
from click.testing import CliRunner

from reconciler.cli.__main__ import cli, cli_context
from reconciler.core.logging import ReconcilerLogger

from conftest import CONTRACT, OPERATOR, make_log


@pytest.fixture
def runner(monkeypatch):
    # Keep log lines out of the command output
    monkeypatch.setattr(ReconcilerLogger, "_configured", True)
    return CliRunner()


@pytest.fixture
def wired(monkeypatch, runtime):
    monkeypatch.setattr(cli_context, "_runtime", runtime)
    return runtime


class TestRefreshCommands:

    def test_refresh_rewards_prints_result(self, runner, wired, chain):
        chain.claimable = 500
        chain.watermark = 3

        result = runner.invoke(cli, ["refresh", "rewards"])

        assert result.exit_code == 0, result.output
        body = json.loads(result.stdout)
        assert body["status"] == "initialized"
        assert body["epoch"] == 4
        assert body["amount"] == "500"

    def test_refresh_events_prints_counts(self, runner, wired, rpc):
        rpc.head = 101
        rpc.logs = [make_log(100), make_log(101)]

        result = runner.invoke(cli, ["refresh", "events"])

        assert result.exit_code == 0, result.output
        body = json.loads(result.stdout)
        assert body["status"] == "synced"
        assert body["stored_count"] == 2

    def test_refresh_failure_exits_non_zero(self, runner, wired, chain, monkeypatch):
        def _fail(operator):
            raise ConnectionError("rpc down")

        monkeypatch.setattr(chain, "last_claimed_operator_rewards_epoch", _fail)

        result = runner.invoke(cli, ["refresh", "rewards"])

        assert result.exit_code == 1
        assert "Reward refresh failed: rpc down" in result.output


class TestStatusCommand:

    def test_status_prints_summary(self, runner, wired, db_manager):
        with db_manager.get_transaction() as session:
            db_manager.get_validator_reward_repo().append(session, OPERATOR, 1, 250, claimed=True)

        result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0, result.output
        summary = json.loads(result.stdout)
        assert summary["database_connected"] is True
        assert summary["events"]["contract_address"] == CONTRACT
        assert summary["rewards"]["claimed"] == "250"
        assert summary["rewards"]["available"] == "250"
        assert summary["schedulers"]["rewards"]["state"] == "stopped"


class TestDatabaseCommands:

    @pytest.fixture
    def database_url(self, tmp_path, monkeypatch):
        url = f"sqlite:///{tmp_path / 'cli.db'}"
        monkeypatch.setenv("RECONCILER_DB_URL", url)
        yield url
        cli_context.shutdown()

    def test_upgrade_then_current(self, runner, database_url):
        result = runner.invoke(cli, ["db", "upgrade"])
        assert result.exit_code == 0, result.output
        assert "Database upgraded to head" in result.output

        result = runner.invoke(cli, ["db", "current"])
        assert result.exit_code == 0, result.output
        assert "Current revision: 0001_initial" in result.output

    def test_current_before_upgrade(self, runner, database_url):
        result = runner.invoke(cli, ["db", "current"])

        assert result.exit_code == 0, result.output
        assert "Current revision: none" in result.output
