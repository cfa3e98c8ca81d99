"""
Database interfaces for the contract watcher.

This module defines the stores the transformer reads from and writes to.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..types import Event, LogFilter, WatchedEvent, TransformedLog, MethodResult


class FilterRepositoryInterface(ABC):
    """Interface for durable log filters."""

    @abstractmethod
    def create_filter(self, log_filter: LogFilter) -> None:
        """
        Store a log filter. Creating a filter whose name already exists is a no-op.

        Args:
            log_filter: Filter to store
        """
        pass

    @abstractmethod
    def get_filter(self, name: str) -> Optional[LogFilter]:
        """
        Get a stored log filter by name.

        Returns:
            The filter, or None when no filter has that name
        """
        pass


class WatchedEventRepositoryInterface(ABC):
    """Interface for reading captured logs through a filter."""

    @abstractmethod
    def get_watched_events(self, name: str) -> List[WatchedEvent]:
        """
        Get every captured log matching the named filter.

        Args:
            name: Filter name

        Returns:
            Watched events ordered by block and log index
        """
        pass


class EventRepositoryInterface(ABC):
    """Interface for transformed event log persistence."""

    @abstractmethod
    def persist_logs(self, logs: List[TransformedLog], event: Event,
                     contract_address: str, contract_name: str) -> None:
        """
        Persist transformed logs of one event type. Append-only.
        """
        pass


class MethodRepositoryInterface(ABC):
    """Interface for method polling result persistence."""

    @abstractmethod
    def persist_results(self, results: List[MethodResult]) -> None:
        """
        Persist method call results. Append-only.
        """
        pass


class BlockRetrieverInterface(ABC):
    """Interface for block boundary lookups."""

    @abstractmethod
    def retrieve_first_block(self, contract_address: str) -> int:
        """
        Get the first block a contract should be watched from.

        Raises:
            BlockRetrievalError: when no block is known for the contract
        """
        pass

    @abstractmethod
    def retrieve_most_recent_block(self) -> int:
        """
        Get the highest block number known to the database.

        Raises:
            BlockRetrievalError: when no blocks are stored
        """
        pass
