# reconciler/database/base_repository.py

from typing import TypeVar, Generic, Type, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from ..core.logging import ReconcilerLogger


T = TypeVar('T')


class BaseRepository(Generic[T]):
    def __init__(self, db_manager, model_class: Type[T]):
        self.db_manager = db_manager
        self.model_class = model_class
        self.logger = ReconcilerLogger.get_logger(f'database.repository.{model_class.__name__.lower()}')

    def get_by_id(self, session: Session, id) -> Optional[T]:
        try:
            return session.get(self.model_class, id)
        except Exception as e:
            self.logger.error(f"Error getting {self.model_class.__name__} by ID {id}: {e}")
            raise

    def get_all(self, session: Session, limit: int = 100) -> List[T]:
        try:
            return session.query(self.model_class).order_by(desc(self.model_class.created_at)).limit(limit).all()
        except Exception as e:
            self.logger.error(f"Error getting all {self.model_class.__name__}: {e}")
            raise

    def create(self, session: Session, **kwargs) -> T:
        try:
            instance = self.model_class(**kwargs)
            session.add(instance)
            session.flush()

            self.logger.debug(f"Created {self.model_class.__name__} with ID: {getattr(instance, 'id', 'N/A')}")
            return instance

        except Exception as e:
            self.logger.error(f"Error creating {self.model_class.__name__}: {e}")
            raise

    def count(self, session: Session) -> int:
        try:
            return session.query(self.model_class).count()
        except Exception as e:
            self.logger.error(f"Error counting {self.model_class.__name__}: {e}")
            raise
