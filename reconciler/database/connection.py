# reconciler/database/connection.py

from typing import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, Engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from ..core.logging import ReconcilerLogger, log_with_context, INFO, DEBUG, ERROR
from ..types import DatabaseConfig


class DatabaseManager:
    def __init__(self, config: DatabaseConfig):
        if not config:
            raise ValueError("DatabaseConfig is required")

        self.config = config
        self.logger = ReconcilerLogger.get_logger(f'database.{self.__class__.__name__.lower()}')
        self._engine = None
        self._session_factory = None
        self._repositories = {}

        log_with_context(self.logger, INFO, "DatabaseManager initialized",
                         db_url_host=self._extract_host_from_url(config.url))

    @staticmethod
    def _extract_host_from_url(url: str) -> str:
        if '@' in url and '/' in url:
            return url.split('@', 1)[1].split('/', 1)[0]
        return url.split(':', 1)[0]

    @property
    def is_sqlite(self) -> bool:
        return self.config.url.startswith('sqlite')

    def _engine_options(self) -> dict:
        if self.is_sqlite:
            # One shared connection so in-memory databases survive across sessions
            return {
                'poolclass': StaticPool,
                'connect_args': {'check_same_thread': False},
            }
        return {
            'poolclass': QueuePool,
            'pool_size': self.config.pool_size,
            'max_overflow': self.config.max_overflow,
            'pool_timeout': 30,
            'pool_recycle': 3600,
            'pool_pre_ping': True,
        }

    def initialize(self) -> None:
        if self._engine is not None:
            self.logger.warning("Database already initialized")
            return

        try:
            self.logger.info("Initializing database engine")

            self._engine = create_engine(self.config.url, echo=False, **self._engine_options())

            self._session_factory = sessionmaker(
                bind=self._engine,
                expire_on_commit=False,
            )

            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))

            log_with_context(self.logger, INFO, "Database initialized successfully",
                             pool_size=self.config.pool_size,
                             max_overflow=self.config.max_overflow)

        except Exception as e:
            log_with_context(self.logger, ERROR, "Failed to initialize database",
                             error=str(e),
                             exception_type=type(e).__name__)
            self._engine = None
            self._session_factory = None
            raise

    def create_tables(self) -> None:
        from .base import ModelBase
        from . import tables  # noqa: F401  registers every table on ModelBase.metadata

        ModelBase.metadata.create_all(self.engine)
        log_with_context(self.logger, INFO, "Database tables created",
                         count=len(ModelBase.metadata.tables))

    def shutdown(self) -> None:
        self.logger.info("Shutting down database connections")

        try:
            if self._engine:
                self._engine.dispose()
                self._engine = None

            self._session_factory = None
            self.logger.info("Database shutdown completed")

        except Exception as e:
            log_with_context(self.logger, ERROR, "Error during database shutdown",
                             error=str(e),
                             exception_type=type(e).__name__)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._session_factory

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        session = self.session_factory()
        try:
            yield session
        except Exception as e:
            log_with_context(self.logger, ERROR, "Database session error, rolling back",
                             error=str(e),
                             exception_type=type(e).__name__)
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def get_transaction(self) -> Generator[Session, None, None]:
        with self.get_session() as session:
            yield session
            session.commit()
            log_with_context(self.logger, DEBUG, "Database transaction committed")

    def health_check(self) -> bool:
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            log_with_context(self.logger, ERROR, "Database health check failed",
                             error=str(e),
                             exception_type=type(e).__name__)
            return False

    def _get_or_create_repository(self, repo_class, repo_name):
        if repo_name not in self._repositories:
            self._repositories[repo_name] = repo_class(self)
        return self._repositories[repo_name]

    def clear_repository_cache(self):
        self._repositories.clear()

    # === Repositories ===

    def get_polling_state_repo(self):
        from .repositories.polling_state_repository import PollingStateRepository
        return self._get_or_create_repository(PollingStateRepository, 'polling_state')

    def get_contract_event_repo(self):
        from .repositories.contract_event_repository import ContractEventRepository
        return self._get_or_create_repository(ContractEventRepository, 'contract_event')

    def get_validator_reward_repo(self):
        from .repositories.validator_reward_repository import ValidatorRewardRepository
        return self._get_or_create_repository(ValidatorRewardRepository, 'validator_reward')

    def get_reward_action_repo(self):
        from .repositories.reward_action_repository import RewardActionRepository
        return self._get_or_create_repository(RewardActionRepository, 'reward_action')
