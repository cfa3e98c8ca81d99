# watcher/database/repositories/filter_repository.py

from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite

from ..base_repository import BaseRepository
from ..interfaces import FilterRepositoryInterface
from ..tables import LogFilterRecord
from ...types import LogFilter


class FilterRepository(BaseRepository[LogFilterRecord], FilterRepositoryInterface):
    """Log filters, unique by name"""

    def __init__(self, db_manager):
        super().__init__(db_manager, LogFilterRecord)

    def create_filter(self, log_filter: LogFilter) -> None:
        values = {
            'name': log_filter.name,
            'from_block': log_filter.from_block,
            'to_block': log_filter.to_block,
            'address': log_filter.address,
        }
        for position in range(4):
            values[f'topic{position}'] = log_filter.topic(position)

        try:
            with self.db_manager.get_transaction() as session:
                insert = postgresql.insert if session.get_bind().dialect.name == 'postgresql' else sqlite.insert
                statement = insert(LogFilterRecord).values(**values).on_conflict_do_nothing(
                    index_elements=['name']
                )
                result = session.execute(statement)

            if result.rowcount:
                self.logger.debug(f"Created log filter {log_filter.name}")
            else:
                self.logger.debug(f"Log filter {log_filter.name} already exists")

        except Exception as e:
            self.logger.error(f"Error creating log filter {log_filter.name}: {e}")
            raise

    def get_filter(self, name: str) -> Optional[LogFilter]:
        with self.db_manager.get_session() as session:
            record = self.first_by(session, name=name)
            if record is None:
                return None
            return self.to_log_filter(record)

    @staticmethod
    def to_log_filter(record: LogFilterRecord) -> LogFilter:
        topics = [record.topic0, record.topic1, record.topic2, record.topic3]
        while topics and topics[-1] is None:
            topics.pop()

        return LogFilter(
            name=record.name,
            from_block=record.from_block,
            to_block=record.to_block,
            address=record.address,
            topics=topics,
        )
