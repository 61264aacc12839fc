# reconciler/cli/context.py

"""
Shared CLI state.

Commands ask the context for a database manager or a fully wired runtime;
both are created lazily so ``db`` commands never need RPC settings.
"""

from typing import Optional

from ..core.config import load_database_config
from ..core.logging import ReconcilerLogger, log_with_context, INFO
from ..database.connection import DatabaseManager
from ..database.migration_manager import MigrationManager
from ..services.runtime import ReconcilerRuntime


class CLIContext:
    def __init__(self):
        self.logger = ReconcilerLogger.get_logger('cli.context')
        self._db_manager: Optional[DatabaseManager] = None
        self._runtime: Optional[ReconcilerRuntime] = None
        self._migration_manager: Optional[MigrationManager] = None

    @property
    def db_manager(self) -> DatabaseManager:
        if self._runtime is not None:
            return self._runtime.db_manager
        if self._db_manager is None:
            self._db_manager = DatabaseManager(load_database_config())
            self._db_manager.initialize()
            log_with_context(self.logger, INFO, "Database manager created")
        return self._db_manager

    @property
    def migration_manager(self) -> MigrationManager:
        if self._migration_manager is None:
            self._migration_manager = MigrationManager(self.db_manager)
        return self._migration_manager

    @property
    def runtime(self) -> ReconcilerRuntime:
        if self._runtime is None:
            from .. import create_reconciler
            self._runtime = create_reconciler()
        return self._runtime

    def shutdown(self) -> None:
        if self._runtime is not None:
            self._runtime.stop(wait=False)
            self._runtime = None
        if self._db_manager is not None:
            self._db_manager.shutdown()
            self._db_manager = None
        self._migration_manager = None
