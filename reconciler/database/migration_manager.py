# reconciler/database/migration_manager.py

"""
Alembic migrations for the reconciler schema.

The Alembic config is built in code so the database URL comes from the
same configuration as the running service instead of an alembic.ini.
"""

from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext

from ..core.logging import ReconcilerLogger, log_with_context, INFO, ERROR
from .connection import DatabaseManager


class MigrationManager:
    def __init__(self, db_manager: DatabaseManager):
        self.logger = ReconcilerLogger.get_logger('database.migration_manager')
        self.db_manager = db_manager
        self.migrations_dir = Path(__file__).parent / "migrations"

        log_with_context(self.logger, INFO, "MigrationManager initialized",
                         migrations_dir=str(self.migrations_dir))

    def _get_alembic_config(self) -> Config:
        alembic_cfg = Config()
        alembic_cfg.set_main_option("script_location", str(self.migrations_dir))
        # ConfigParser interpolation treats '%' specially
        alembic_cfg.set_main_option("sqlalchemy.url", self.db_manager.config.url.replace('%', '%%'))
        return alembic_cfg

    def upgrade(self, revision: str = 'head') -> None:
        log_with_context(self.logger, INFO, "Upgrading database", revision=revision)
        try:
            command.upgrade(self._get_alembic_config(), revision)
            log_with_context(self.logger, INFO, "Database upgraded successfully", revision=revision)
        except Exception as e:
            log_with_context(self.logger, ERROR, "Failed to upgrade database",
                             revision=revision, error=str(e))
            raise

    def downgrade(self, revision: str) -> None:
        log_with_context(self.logger, INFO, "Downgrading database", revision=revision)
        try:
            command.downgrade(self._get_alembic_config(), revision)
            log_with_context(self.logger, INFO, "Database downgraded successfully", revision=revision)
        except Exception as e:
            log_with_context(self.logger, ERROR, "Failed to downgrade database",
                             revision=revision, error=str(e))
            raise

    def current_revision(self) -> Optional[str]:
        with self.db_manager.engine.connect() as conn:
            context = MigrationContext.configure(conn)
            return context.get_current_revision()
