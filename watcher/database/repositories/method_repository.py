# watcher/database/repositories/method_repository.py

from typing import List

import msgspec

from ..base_repository import BaseRepository
from ..interfaces import MethodRepositoryInterface
from ..tables import MethodResultRecord
from ...types import MethodResult


class MethodRepository(BaseRepository[MethodResultRecord], MethodRepositoryInterface):
    """Results of polled contract methods, one row per (address, method, block, inputs)"""

    def __init__(self, db_manager):
        super().__init__(db_manager, MethodResultRecord)

    def persist_results(self, results: List[MethodResult]) -> None:
        if not results:
            return

        items = []
        for result in results:
            item = msgspec.to_builtins(result)
            item['inputs'] = list(result.inputs)
            item['inputs_key'] = ','.join(result.inputs)
            items.append(item)

        with self.db_manager.get_transaction() as session:
            self.bulk_create_skip_existing(session, items, ['address', 'method', 'block', 'inputs_key'])
