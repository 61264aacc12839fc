# tests/conftest.py
"""
pytest configuration and fixtures for reconciler testing.

Every test gets a fresh in-memory SQLite database and scripted chain fakes
in place of a live node.
"""

from typing import Dict, List, Optional

import pytest

from reconciler.clients.interfaces import RPCClientInterface, RewardChainReaderInterface
from reconciler.database.connection import DatabaseManager
from reconciler.services.event_syncer import EventLogSyncer
from reconciler.services.reward_reconciler import RewardReconciler
from reconciler.services.runtime import ReconcilerRuntime
from reconciler.types import (
    ChainLog,
    DatabaseConfig,
    EventSyncConfig,
    LoggingConfig,
    OperatorContribution,
    ReconcilerConfig,
    RewardConfig,
    RewardContractsConfig,
    RpcConfig,
)

CONTRACT = "0x1111111111111111111111111111111111111111"
OPERATOR = "0x2222222222222222222222222222222222222222"
DISTRIBUTOR = "0x3333333333333333333333333333333333333333"
TOPIC = "0x" + "ab" * 32


def make_log(block_number: int, log_index: int = 0, tx_seed: Optional[int] = None) -> ChainLog:
    seed = block_number if tx_seed is None else tx_seed
    return ChainLog(
        address=CONTRACT,
        block_number=block_number,
        transaction_hash="0x" + f"{seed:064x}",
        log_index=log_index,
        data="0x" + f"{block_number:064x}",
        topics=[TOPIC],
    )


class FakeRpcClient(RPCClientInterface):
    """Serves logs from an in-memory chain; ``fail_next`` raises on the next get_logs"""

    def __init__(self, head: int = 0, logs: Optional[List[ChainLog]] = None):
        self.head = head
        self.logs = list(logs or [])
        self.requests = []
        self.fail_next: Optional[Exception] = None

    def get_latest_block_number(self) -> int:
        return self.head

    def get_logs(self, address, from_block, to_block, topics=None):
        self.requests.append((from_block, to_block))
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error
        return [log for log in self.logs if from_block <= log.block_number <= to_block]


class FakeRewardChain(RewardChainReaderInterface):
    """
    Scripted distributor and epoch contracts.

    Per-epoch inputs default to a single validator holding all weight with
    no delegation, so each epoch pays ``emission`` to the operator.
    """

    def __init__(self, claimable: int = 0, watermark: int = 0, epoch: int = 1,
                 emission: int = 1000):
        self.claimable = claimable
        self.watermark = watermark
        self.epoch = epoch
        self.emission = emission
        self.unavailable: set = set()
        self.contributions: Dict[int, Optional[OperatorContribution]] = {}
        self.total_weights: Dict[int, int] = {}
        self.emissions: Dict[int, int] = {}
        self.commission_rates: Dict[int, int] = {}

    def claimable_operator_rewards(self, operator):
        return self.claimable

    def last_claimed_operator_rewards_epoch(self, operator):
        return self.watermark

    def current_epoch(self):
        return self.epoch

    def contribution_available(self, epoch):
        return epoch not in self.unavailable

    def total_weight(self, epoch):
        return self.total_weights.get(epoch, 100)

    def operator_contribution(self, epoch, operator):
        if epoch in self.contributions:
            return self.contributions[epoch]
        return OperatorContribution(weight=100, collateral_share=0, delegation_share=0)

    def validator_emission(self, epoch):
        return self.emissions.get(epoch, self.emission)

    def commission_rate(self, epoch, operator):
        return self.commission_rates.get(epoch, 0)


@pytest.fixture
def db_manager():
    manager = DatabaseManager(DatabaseConfig(url="sqlite://"))
    manager.initialize()
    manager.create_tables()
    yield manager
    manager.shutdown()


@pytest.fixture
def rpc():
    return FakeRpcClient()


@pytest.fixture
def chain():
    return FakeRewardChain()


@pytest.fixture
def event_config():
    return EventSyncConfig(contract_address=CONTRACT, start_block=100, topic=TOPIC)


def reward_config(strategy: str = "epoch", start_epoch: Optional[int] = None) -> RewardConfig:
    return RewardConfig(
        operator_address=OPERATOR,
        contracts=RewardContractsConfig(distributor=DISTRIBUTOR),
        strategy=strategy,
        start_epoch=start_epoch,
    )


@pytest.fixture
def epoch_config():
    return reward_config("epoch")


@pytest.fixture
def aggregate_config():
    return reward_config("aggregate")


@pytest.fixture
def runtime(db_manager, rpc, chain, event_config, aggregate_config):
    """Runtime with both jobs backed by the chain fakes"""
    config = ReconcilerConfig(
        database=DatabaseConfig(url="sqlite://"),
        rpc=RpcConfig(endpoint_url="http://localhost:8545"),
        logging=LoggingConfig(),
        events=event_config,
        rewards=aggregate_config,
    )
    return ReconcilerRuntime(
        config, db_manager,
        event_syncer=EventLogSyncer(db_manager, rpc, event_config),
        reward_reconciler=RewardReconciler(db_manager, chain, aggregate_config),
    )
