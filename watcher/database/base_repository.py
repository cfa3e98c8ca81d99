# watcher/database/base_repository.py

from typing import TypeVar, Generic, Type, List, Optional, Dict, Any

from sqlalchemy.orm import Session

from ..core.logging import WatcherLogger


T = TypeVar('T')


class BaseRepository(Generic[T]):
    def __init__(self, db_manager, model_class: Type[T]):
        self.db_manager = db_manager
        self.model_class = model_class
        self.logger = WatcherLogger.get_logger(f'database.repository.{model_class.__name__.lower()}')

    def bulk_create_skip_existing(self, session: Session, items: List[Dict[str, Any]],
                                  key_columns: List[str]) -> int:
        """Insert items whose key_columns combination is not stored yet; returns rows created"""
        if not items:
            return 0

        try:
            new_items = []
            seen = set()
            for item in items:
                key = tuple(item[column] for column in key_columns)
                if key in seen or self._exists(session, item, key_columns):
                    continue
                seen.add(key)
                new_items.append(item)

            if not new_items:
                self.logger.debug(f"{self.model_class.__tablename__}: nothing new in {len(items)} rows")
                return 0

            session.add_all(self.model_class(**item) for item in new_items)
            session.flush()

            created_count = len(new_items)
            skipped_count = len(items) - created_count

            self.logger.debug(f"{self.model_class.__tablename__}: stored {created_count}, skipped {skipped_count}")
            return created_count

        except Exception as e:
            self.logger.error(f"Error storing {self.model_class.__tablename__} rows: {e}")
            raise

    def _exists(self, session: Session, item: Dict[str, Any], key_columns: List[str]) -> bool:
        query = session.query(self.model_class.id)
        for column in key_columns:
            query = query.filter(getattr(self.model_class, column) == item[column])
        return session.query(query.exists()).scalar()

    def first_by(self, session: Session, **criteria) -> Optional[T]:
        try:
            return session.query(self.model_class).filter_by(**criteria).first()
        except Exception as e:
            self.logger.error(f"Error getting {self.model_class.__name__} by {criteria}: {e}")
            raise
