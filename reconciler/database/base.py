# reconciler/database/base.py

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, DateTime, Uuid, text
from sqlalchemy.orm import declarative_base, declarative_mixin


ModelBase = declarative_base()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@declarative_mixin
class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utc_now,
        server_default=text('CURRENT_TIMESTAMP')
    )

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utc_now,
        server_default=text('CURRENT_TIMESTAMP'),
        onupdate=_utc_now
    )


class DBBaseModel(ModelBase, TimestampMixin):
    __abstract__ = True

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
