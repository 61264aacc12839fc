# reconciler/types/config.py

from pathlib import Path
from typing import Literal, Optional

from msgspec import Struct

from .new import EvmAddress, EvmHash


RewardStrategy = Literal["epoch", "aggregate"]


class DatabaseConfig(Struct, frozen=True):
    url: str
    pool_size: int = 5
    max_overflow: int = 10


class RpcConfig(Struct, frozen=True):
    endpoint_url: str
    timeout: int = 30


class EventSyncConfig(Struct, frozen=True):
    contract_address: EvmAddress
    start_block: int = 0
    topic: Optional[EvmHash] = None
    poll_interval_seconds: float = 60.0
    cursor_id: int = 1


class RewardContractsConfig(Struct, frozen=True):
    distributor: EvmAddress
    epoch_feeder: Optional[EvmAddress] = None
    contribution_feed: Optional[EvmAddress] = None
    validator_manager: Optional[EvmAddress] = None
    emission: Optional[EvmAddress] = None


class RewardConfig(Struct, frozen=True):
    operator_address: EvmAddress
    contracts: RewardContractsConfig
    strategy: RewardStrategy = "epoch"
    poll_interval_seconds: float = 60.0
    start_epoch: Optional[int] = None
    max_commission_rate: int = 10_000


class LoggingConfig(Struct, frozen=True):
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    console_enabled: bool = True
    file_enabled: bool = False
    structured_format: bool = True


class ReconcilerConfig(Struct, frozen=True):
    database: DatabaseConfig
    rpc: RpcConfig
    logging: LoggingConfig
    events: Optional[EventSyncConfig] = None
    rewards: Optional[RewardConfig] = None
