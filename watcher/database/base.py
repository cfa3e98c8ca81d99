# watcher/database/base.py

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, text
from sqlalchemy.orm import declarative_base, declarative_mixin


Base = declarative_base()


@declarative_mixin
class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text('CURRENT_TIMESTAMP')
    )


class DBBaseModel(Base, TimestampMixin):
    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
