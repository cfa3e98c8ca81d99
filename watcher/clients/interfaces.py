"""
Interfaces for blockchain access.

The watcher only needs two things from a node: constant contract calls
pinned to a block, and the current chain head.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Union


class BlockChainInterface(ABC):
    """Interface for blockchain client implementations."""

    @abstractmethod
    def fetch_contract_data(self, abi: Union[str, List[dict]], address: str, method: str,
                            method_args: Optional[List[Any]], block_number: int) -> Any:
        """
        Call a constant contract method.

        Args:
            abi: Contract ABI (JSON text or parsed list)
            address: Contract address
            method: Method name
            method_args: Positional arguments for the call
            block_number: Block to call at; values <= 0 mean latest

        Returns:
            The decoded method output
        """
        pass

    @abstractmethod
    def last_block(self) -> int:
        """
        Get the latest block number known to the node.

        Returns:
            Latest block number
        """
        pass
