# watcher/types/events.py

from typing import Dict, List, Optional

from msgspec import Struct


class WatchedEvent(Struct):
    """Captured raw log joined to the filter that selects it"""
    log_id: int
    name: str
    block_number: int
    address: str
    tx_hash: str
    index: int
    data: str
    topic0: Optional[str] = None
    topic1: Optional[str] = None
    topic2: Optional[str] = None
    topic3: Optional[str] = None

    def topics(self) -> List[str]:
        return [t for t in (self.topic0, self.topic1, self.topic2, self.topic3) if t is not None]


class TransformedLog(Struct):
    id: int
    values: Dict[str, str]
    block: int
    tx: str


class MethodResult(Struct):
    method: str
    inputs: List[str]
    output: str
    block: int
    address: str
    contract_name: str = ''
