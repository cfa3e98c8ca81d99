# watcher/database/repositories/event_repository.py

from typing import List

from ..base_repository import BaseRepository
from ..interfaces import EventRepositoryInterface
from ..tables import TransformedEventLog
from ...types import Event, TransformedLog


class EventRepository(BaseRepository[TransformedEventLog], EventRepositoryInterface):
    """Transformed event logs; a raw log is stored at most once per event"""

    def __init__(self, db_manager):
        super().__init__(db_manager, TransformedEventLog)

    def persist_logs(self, logs: List[TransformedLog], event: Event,
                     contract_address: str, contract_name: str) -> None:
        if not logs:
            return

        items = [
            {
                'log_id': log.id,
                'event_name': event.name,
                'contract_address': contract_address,
                'contract_name': contract_name or '',
                'block_number': log.block,
                'tx_hash': log.tx,
                'values': dict(log.values),
            }
            for log in logs
        ]

        with self.db_manager.get_transaction() as session:
            self.bulk_create_skip_existing(session, items, ['log_id', 'event_name'])
