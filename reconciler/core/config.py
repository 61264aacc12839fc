# reconciler/core/config.py

"""
Environment-driven configuration.

Every setting is read from ``RECONCILER_*`` variables (optionally loaded
from a ``.env`` file) and validated into immutable msgspec structs. The
event syncer is enabled by ``RECONCILER_CONTRACT_ADDRESS`` and the reward
reconciler by ``RECONCILER_OPERATOR_ADDRESS``.
"""

import os
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlparse

import msgspec

from ..types import (
    DatabaseConfig,
    RpcConfig,
    EventSyncConfig,
    RewardContractsConfig,
    RewardConfig,
    LoggingConfig,
    ReconcilerConfig,
    is_evm_address,
    is_evm_hash,
)
from .errors import ConfigurationError
from .logging import ReconcilerLogger, log_with_context, INFO

ENV_PREFIX = "RECONCILER_"
REWARD_STRATEGIES = ("epoch", "aggregate")
EPOCH_STRATEGY_CONTRACTS = {
    'epoch_feeder': 'EPOCH_FEEDER_ADDRESS',
    'contribution_feed': 'CONTRIBUTION_FEED_ADDRESS',
    'validator_manager': 'VALIDATOR_MANAGER_ADDRESS',
    'emission': 'EMISSION_ADDRESS',
}


class _EnvReader:
    def __init__(self, env: Mapping[str, str]):
        self.env = env

    def raw(self, name: str) -> Optional[str]:
        value = self.env.get(ENV_PREFIX + name)
        if value is None:
            return None
        value = value.strip()
        return value or None

    def require(self, name: str) -> str:
        value = self.raw(name)
        if value is None:
            raise ConfigurationError(ENV_PREFIX + name, "is required")
        return value

    def integer(self, name: str, default: Optional[int] = None, minimum: int = 0) -> Optional[int]:
        value = self.raw(name)
        if value is None:
            return default
        try:
            parsed = int(value)
        except ValueError:
            raise ConfigurationError(ENV_PREFIX + name, f"expected an integer, got {value!r}")
        if parsed < minimum:
            raise ConfigurationError(ENV_PREFIX + name, f"must be >= {minimum}")
        return parsed

    def boolean(self, name: str, default: bool) -> bool:
        value = self.raw(name)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    def address(self, name: str, required: bool = False) -> Optional[str]:
        value = self.require(name) if required else self.raw(name)
        if value is None:
            return None
        if not is_evm_address(value):
            raise ConfigurationError(ENV_PREFIX + name, f"not a valid EVM address: {value!r}")
        return value.lower()


def _validate_url(name: str, value: str, schemes: tuple) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in schemes or not parsed.netloc:
        raise ConfigurationError(ENV_PREFIX + name, f"not a valid URL: {value!r}")
    return value


def _load_events(reader: _EnvReader, default_interval_ms: int) -> Optional[EventSyncConfig]:
    contract_address = reader.address("CONTRACT_ADDRESS")
    if contract_address is None:
        return None

    topic = reader.raw("EVENT_TOPIC")
    if topic is not None:
        if not is_evm_hash(topic):
            raise ConfigurationError(ENV_PREFIX + "EVENT_TOPIC", f"not a 32-byte hex topic: {topic!r}")
        topic = topic.lower()

    return EventSyncConfig(
        contract_address=contract_address,
        start_block=reader.integer("START_BLOCK", 0),
        topic=topic,
        poll_interval_seconds=default_interval_ms / 1000,
        cursor_id=reader.integer("CURSOR_ID", 1, minimum=1),
    )


def _load_rewards(reader: _EnvReader, default_interval_ms: int) -> Optional[RewardConfig]:
    operator_address = reader.address("OPERATOR_ADDRESS")
    if operator_address is None:
        return None

    strategy = (reader.raw("REWARD_STRATEGY") or "epoch").lower()
    if strategy not in REWARD_STRATEGIES:
        raise ConfigurationError(ENV_PREFIX + "REWARD_STRATEGY",
                                 f"must be one of {', '.join(REWARD_STRATEGIES)}")

    contract_kwargs = {
        field: reader.address(variable, required=(strategy == "epoch"))
        for field, variable in EPOCH_STRATEGY_CONTRACTS.items()
    }
    contracts = RewardContractsConfig(
        distributor=reader.address("REWARD_CONTRACT_ADDRESS", required=True),
        **contract_kwargs,
    )

    interval_ms = reader.integer("REWARD_POLL_INTERVAL_MS", default_interval_ms, minimum=1)

    return RewardConfig(
        operator_address=operator_address,
        contracts=contracts,
        strategy=strategy,
        poll_interval_seconds=interval_ms / 1000,
        start_epoch=reader.integer("REWARD_START_EPOCH", None, minimum=1),
        max_commission_rate=reader.integer("MAX_COMMISSION_RATE", 10_000, minimum=1),
    )


def _load_logging(reader: _EnvReader) -> LoggingConfig:
    log_dir = reader.raw("LOG_DIR")
    return LoggingConfig(
        log_level=(reader.raw("LOG_LEVEL") or "INFO").upper(),
        log_dir=Path(log_dir) if log_dir else None,
        console_enabled=reader.boolean("LOG_CONSOLE", True),
        file_enabled=reader.boolean("LOG_FILE", bool(log_dir)),
        structured_format=reader.boolean("LOG_STRUCTURED", True),
    )


def load_config(env_vars: Optional[Mapping[str, str]] = None, **overrides) -> ReconcilerConfig:
    """
    Build a ReconcilerConfig from the environment.

    Args:
        env_vars: Mapping to read instead of ``os.environ``. When omitted a
            ``.env`` file in the working directory is loaded first.
        **overrides: Top-level ReconcilerConfig fields to replace after parsing
            (``database``, ``rpc``, ``logging``, ``events``, ``rewards``).

    Raises:
        ConfigurationError: A required variable is missing or malformed.
    """
    if env_vars is None:
        from dotenv import load_dotenv
        load_dotenv()
        env_vars = os.environ

    reader = _EnvReader(env_vars)

    default_interval_ms = reader.integer("POLL_INTERVAL_MS", 60_000, minimum=1)

    config = ReconcilerConfig(
        database=DatabaseConfig(url=reader.require("DB_URL")),
        rpc=RpcConfig(
            endpoint_url=_validate_url("RPC_URL", reader.require("RPC_URL"),
                                       ("http", "https", "ws", "wss")),
            timeout=reader.integer("RPC_TIMEOUT", 30, minimum=1),
        ),
        logging=_load_logging(reader),
        events=_load_events(reader, default_interval_ms),
        rewards=_load_rewards(reader, default_interval_ms),
    )

    if overrides:
        config = msgspec.structs.replace(config, **overrides)

    logger = ReconcilerLogger.get_logger('core.config')
    log_with_context(logger, INFO, "Configuration loaded",
                     events_enabled=config.events is not None,
                     rewards_enabled=config.rewards is not None,
                     strategy=config.rewards.strategy if config.rewards else None)

    return config


def load_database_config(env_vars: Optional[Mapping[str, str]] = None) -> DatabaseConfig:
    """Read only ``RECONCILER_DB_URL``, for tooling that never touches the chain."""
    if env_vars is None:
        from dotenv import load_dotenv
        load_dotenv()
        env_vars = os.environ

    return DatabaseConfig(url=_EnvReader(env_vars).require("DB_URL"))
