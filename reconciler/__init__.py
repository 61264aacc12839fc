# reconciler/__init__.py

from pathlib import Path
from typing import Mapping, Optional

from .core.config import load_config
from .core.logging import ReconcilerLogger, log_with_context, INFO
from .clients.web3_rpc import Web3RpcClient
from .clients.reward_chain import Web3RewardChainReader
from .database.connection import DatabaseManager
from .services.event_syncer import EventLogSyncer
from .services.reward_reconciler import RewardReconciler
from .services.runtime import ReconcilerRuntime
from .types import LoggingConfig


def create_reconciler(env_vars: Optional[Mapping[str, str]] = None, **overrides) -> ReconcilerRuntime:
    """
    Build a ReconcilerRuntime from environment configuration.

    The database is initialized but no schedule is started; call
    ``runtime.start()`` once the host process is ready.
    """
    config = load_config(env_vars, **overrides)
    _configure_logging_early(config.logging)

    logger = ReconcilerLogger.get_logger('core.init')
    log_with_context(logger, INFO, "Creating reconciler instance",
                     events_enabled=config.events is not None,
                     rewards_enabled=config.rewards is not None)

    db_manager = DatabaseManager(config.database)
    db_manager.initialize()

    rpc_client = Web3RpcClient(config.rpc)

    event_syncer = None
    if config.events is not None:
        event_syncer = EventLogSyncer(db_manager, rpc_client, config.events)

    reward_reconciler = None
    if config.rewards is not None:
        chain_reader = Web3RewardChainReader(rpc_client, config.rewards.contracts)
        reward_reconciler = RewardReconciler(db_manager, chain_reader, config.rewards)

    runtime = ReconcilerRuntime(config, db_manager,
                                event_syncer=event_syncer,
                                reward_reconciler=reward_reconciler)

    log_with_context(logger, INFO, "Reconciler created successfully")
    return runtime


def _configure_logging_early(config: LoggingConfig) -> None:
    log_dir = config.log_dir
    if config.file_enabled and log_dir is None:
        log_dir = Path.cwd() / "logs"

    ReconcilerLogger.configure(
        log_dir=log_dir,
        log_level=config.log_level,
        console_enabled=config.console_enabled,
        file_enabled=config.file_enabled,
        structured_format=config.structured_format,
    )


__all__ = ['create_reconciler', 'ReconcilerRuntime']
