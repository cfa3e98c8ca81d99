# watcher/clients/eth_rpc.py

import json
from typing import Any, Dict, List, Optional, Union

from web3 import Web3
from web3.contract import Contract

from .interfaces import BlockChainInterface


class EthRpcClient(BlockChainInterface):
    """
    A client for constant contract calls against an Ethereum JSON-RPC endpoint.
    """

    def __init__(self, endpoint_url: str, timeout: int = 30, w3: Optional[Web3] = None):
        self.endpoint_url = endpoint_url
        self.w3 = w3 or Web3(Web3.HTTPProvider(endpoint_url, request_kwargs={'timeout': timeout}))
        self._contract_cache: Dict[str, Contract] = {}

        if not self.w3.is_connected():
            raise ConnectionError(f"Failed to connect to RPC endpoint: {endpoint_url}")

    def last_block(self) -> int:
        return self.w3.eth.block_number

    def get_contract(self, abi: Union[str, List[dict]], address: str) -> Contract:
        """Get or create a Web3 contract instance for address/abi"""
        if isinstance(abi, str):
            abi = json.loads(abi)

        cache_key = f"{address.lower()}:{hash(json.dumps(abi, sort_keys=True))}"
        if cache_key not in self._contract_cache:
            self._contract_cache[cache_key] = self.w3.eth.contract(
                address=Web3.to_checksum_address(address),
                abi=abi,
            )
        return self._contract_cache[cache_key]

    def fetch_contract_data(self, abi: Union[str, List[dict]], address: str, method: str,
                            method_args: Optional[List[Any]], block_number: int) -> Any:
        """
        Call a constant method. A block number of zero or less calls at 'latest'.
        """
        contract = self.get_contract(abi, address)
        func = getattr(contract.functions, method)
        block_identifier = block_number if block_number > 0 else 'latest'
        return func(*(method_args or [])).call(block_identifier=block_identifier)

    def clear_cache(self) -> None:
        self._contract_cache.clear()
