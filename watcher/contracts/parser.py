# watcher/contracts/parser.py

import json
from contextlib import nullcontext
from typing import Any, Dict, List, Optional

import httpx

from ..core.logging import LoggingMixin
from ..transform.interfaces import ParserInterface
from ..types import Event, Method, AbiResolutionError
from .abi_loader import ABILoader


ETHERSCAN_URLS = {
    '': 'https://api.etherscan.io/api',
    'mainnet': 'https://api.etherscan.io/api',
    'ropsten': 'https://api-ropsten.etherscan.io/api',
    'kovan': 'https://api-kovan.etherscan.io/api',
    'rinkeby': 'https://api-rinkeby.etherscan.io/api',
    'goerli': 'https://api-goerli.etherscan.io/api',
    'sepolia': 'https://api-sepolia.etherscan.io/api',
}

# Input types the poller knows how to feed from emitted values
POLLABLE_ARG_TYPES = ('address', 'bytes32')


class Parser(LoggingMixin, ParserInterface):
    """
    Resolves contract ABIs and exposes the events and methods in them.

    Lookup order for parse(address): the local ABI directory, then Etherscan
    for the configured network.
    """

    def __init__(self, network: str = '',
                 abi_loader: Optional[ABILoader] = None,
                 api_key: Optional[str] = None,
                 http_client: Optional[httpx.Client] = None,
                 timeout: float = 20.0):
        self.network = network
        self.abi_loader = abi_loader
        self.api_key = api_key
        self.http_client = http_client
        self.timeout = timeout

        self._abi: str = ''
        self._parsed_abi: List[Dict[str, Any]] = []

    def abi(self) -> str:
        return self._abi

    def parsed_abi(self) -> List[Dict[str, Any]]:
        return self._parsed_abi

    def parse(self, address: str) -> None:
        if self.abi_loader is not None:
            local_abi = self.abi_loader.load_abi(address)
            if local_abi is not None:
                self.log_debug("Using local ABI", contract_address=address)
                self._set_abi(local_abi)
                return

        self.parse_abi_str(self._lookup(address))

    def parse_abi_str(self, abi_str: str) -> None:
        try:
            parsed = json.loads(abi_str)
        except (TypeError, json.JSONDecodeError) as e:
            raise AbiResolutionError(f"invalid ABI json: {e}") from e

        if not isinstance(parsed, list):
            raise AbiResolutionError(f"ABI must be a list, got {type(parsed).__name__}")

        self._set_abi(parsed)

    def _set_abi(self, parsed: List[Dict[str, Any]]) -> None:
        self._parsed_abi = parsed
        self._abi = json.dumps(parsed)

    def _lookup(self, address: str) -> str:
        url = ETHERSCAN_URLS.get(self.network)
        if url is None:
            raise AbiResolutionError(f"unknown network for ABI lookup: {self.network!r}")

        params = {'module': 'contract', 'action': 'getabi', 'address': address}
        if self.api_key:
            params['apikey'] = self.api_key

        self.log_info("Fetching ABI from Etherscan", contract_address=address, network=self.network or 'mainnet')

        try:
            with self._client() as client:
                response = client.get(url, params=params)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise AbiResolutionError(f"ABI lookup failed for {address}: {e}") from e

        if str(body.get('status')) != '1':
            raise AbiResolutionError(
                f"ABI lookup failed for {address}: {body.get('message')} {body.get('result')}"
            )

        return body['result']

    def _client(self):
        """Injected client as is; otherwise a client that lives for one lookup"""
        if self.http_client is not None:
            return nullcontext(self.http_client)
        return httpx.Client(timeout=self.timeout)

    def get_events(self, wanted: Optional[List[str]]) -> Dict[str, Event]:
        """Empty or missing wanted list returns every event in the ABI"""
        events = {}
        for entry in self._parsed_abi:
            if entry.get('type') != 'event':
                continue
            if wanted and entry.get('name') not in wanted:
                continue
            event = Event.from_abi(entry)
            if event.name in events:
                # Overloads share a name; only the last one is watched
                self.log_warning(f"Event {event.name} is overloaded, watching {event.sig()} only",
                                 event_name=event.name)
            events[event.name] = event
        return events

    def get_select_methods(self, wanted: Optional[List[str]]) -> Dict[str, Method]:
        """Empty or missing wanted list returns no methods"""
        if not wanted:
            return {}

        methods = {}
        for entry in self._parsed_abi:
            if entry.get('type', 'function') != 'function' or entry.get('name') not in wanted:
                continue

            method = Method.from_abi(entry)
            if not self._is_pollable(method):
                self.log_warning("Skipping method that cannot be polled", method=method.name)
                continue
            methods[method.name] = method
        return methods

    @staticmethod
    def _is_pollable(method: Method) -> bool:
        if not method.const or len(method.returns) != 1 or len(method.args) > 2:
            return False
        return all(arg.type in POLLABLE_ARG_TYPES for arg in method.args)
