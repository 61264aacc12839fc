# reconciler/types/__init__.py

from .new import (
    EvmAddress,
    EvmHash,
    HexStr,
    is_evm_address,
    is_evm_hash,
    to_evm_address,
    to_evm_hash,
    to_hex_str,
)

from .evm import (
    ChainLog,
    OperatorContribution,
)

from .config import (
    DatabaseConfig,
    RpcConfig,
    EventSyncConfig,
    RewardContractsConfig,
    RewardConfig,
    RewardStrategy,
    LoggingConfig,
    ReconcilerConfig,
)

from .results import (
    PassResult,
    RewardResult,
    Skipped,
    NoChange,
    NewReward,
    Initialized,
    RewardResultUnion,
    EventSyncResult,
    EventsSkipped,
    EventsUpToDate,
    EventsSynced,
    EventSyncResultUnion,
)
