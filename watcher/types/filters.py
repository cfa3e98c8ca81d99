# watcher/types/filters.py

from typing import List, Optional

from msgspec import Struct


class LogFilter(Struct):
    name: str
    from_block: int
    address: str
    to_block: int = -1  # open ended
    topics: List[Optional[str]] = []

    def topic(self, position: int) -> Optional[str]:
        if position < len(self.topics):
            return self.topics[position]
        return None
