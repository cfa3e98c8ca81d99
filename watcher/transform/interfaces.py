"""
Interfaces for the transformation components.

The transformer is wired against these; production implementations live
beside them and tests substitute fakes.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from ..types import Event, Method, WatchedEvent, TransformedLog, ContractDataResult

if TYPE_CHECKING:
    from ..contracts.contract import Contract


class ParserInterface(ABC):
    """Interface for ABI resolution and lookup."""

    @abstractmethod
    def parse(self, address: str) -> None:
        """
        Resolve and load the ABI for a contract address.

        Raises:
            AbiResolutionError: when no ABI can be found or parsed
        """
        pass

    @abstractmethod
    def parse_abi_str(self, abi_str: str) -> None:
        """
        Load an ABI from its JSON text.

        Raises:
            AbiResolutionError: when the text is not a valid ABI
        """
        pass

    @abstractmethod
    def abi(self) -> str:
        """Raw JSON text of the currently loaded ABI"""
        pass

    @abstractmethod
    def parsed_abi(self) -> List[Dict[str, Any]]:
        """Currently loaded ABI as a list of entries"""
        pass

    @abstractmethod
    def get_events(self, wanted: Optional[List[str]]) -> Dict[str, Event]:
        """Events in the loaded ABI keyed by name, restricted to wanted names"""
        pass

    @abstractmethod
    def get_select_methods(self, wanted: Optional[List[str]]) -> Dict[str, Method]:
        """Pollable constant methods in the loaded ABI keyed by name"""
        pass


class ConverterInterface(ABC):
    """Interface for converting watched event logs into transformed logs."""

    @abstractmethod
    def update(self, contract: 'Contract') -> None:
        """Set the contract whose logs the following convert() calls handle"""
        pass

    @abstractmethod
    def convert(self, watched_event: WatchedEvent, event: Event) -> Optional[TransformedLog]:
        """
        Convert one watched event log.

        Returns:
            The transformed log, or None when the log should be skipped

        Raises:
            ConversionError: when the log cannot be decoded
        """
        pass


class PollerInterface(ABC):
    """Interface for polling constant contract methods."""

    @abstractmethod
    def poll_contract(self, contract: 'Contract', last_block: int) -> None:
        """
        Poll the contract's selected methods up to last_block and persist results.

        Raises:
            PollingError: when a call cannot be made or persisted
        """
        pass

    @abstractmethod
    def fetch_contract_data(self, abi: str, address: str, method: str,
                            method_args: Optional[List[Any]], block_number: int) -> ContractDataResult:
        """
        Best-effort single call. Failures are returned, never raised.
        """
        pass
