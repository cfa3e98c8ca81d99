# watcher/database/repositories/watched_event_repository.py

from typing import List

from ..base_repository import BaseRepository
from ..interfaces import WatchedEventRepositoryInterface
from ..tables import Log, LogFilterRecord
from ...types import WatchedEvent, WatchedEventError


class WatchedEventRepository(BaseRepository[Log], WatchedEventRepositoryInterface):
    """Captured logs seen through a stored log filter"""

    def __init__(self, db_manager):
        super().__init__(db_manager, Log)

    def get_watched_events(self, name: str) -> List[WatchedEvent]:
        with self.db_manager.get_session() as session:
            log_filter = session.query(LogFilterRecord).filter(LogFilterRecord.name == name).first()
            if log_filter is None:
                raise WatchedEventError(f"no log filter named {name}")

            query = session.query(Log).filter(
                Log.address == log_filter.address,
                Log.block_number >= log_filter.from_block,
            )
            if log_filter.to_block >= 0:
                query = query.filter(Log.block_number <= log_filter.to_block)

            for position in range(4):
                topic = getattr(log_filter, f'topic{position}')
                if topic is not None:
                    query = query.filter(getattr(Log, f'topic{position}') == topic)

            rows = query.order_by(Log.block_number, Log.index).all()

        self.logger.debug(f"Found {len(rows)} watched events for filter {name}")

        return [
            WatchedEvent(
                log_id=row.id,
                name=name,
                block_number=row.block_number,
                address=row.address,
                tx_hash=row.tx_hash,
                index=row.index,
                data=row.data,
                topic0=row.topic0,
                topic1=row.topic1,
                topic2=row.topic2,
                topic3=row.topic3,
            )
            for row in rows
        ]
