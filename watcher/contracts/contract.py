# watcher/contracts/contract.py

from typing import Any, Dict, List, Optional, Set

from msgspec import Struct, field
from eth_utils import to_checksum_address

from ..types import Event, Method, LogFilter, FilterGenerationError


class Contract(Struct):
    """
    Everything the transformer knows about one watched contract.

    Built once during Transformer.init(); only generate_filters() and the
    emitted value caches change it afterwards.
    """
    address: str
    name: str = ''
    network: str = ''
    abi: str = ''
    parsed_abi: List[Dict[str, Any]] = field(default_factory=list)
    starting_block: int = 0
    events: Dict[str, Event] = field(default_factory=dict)
    methods: Dict[str, Method] = field(default_factory=dict)
    filter_args: Set[str] = field(default_factory=set)
    method_args: Set[str] = field(default_factory=set)
    piping: bool = False
    filters: Dict[str, LogFilter] = field(default_factory=dict)

    # Values seen in converted logs, used as inputs for method polling.
    # None means nothing polled needs that kind of input.
    emitted_addrs: Optional[Set[str]] = None
    emitted_hashes: Optional[Set[str]] = None

    def init(self) -> 'Contract':
        self.filters = {}
        self.filter_args = {arg.lower() for arg in self.filter_args}
        self.method_args = {arg.lower() for arg in self.method_args}

        for method in self.methods.values():
            for arg in method.args:
                if arg.type == 'address' and self.emitted_addrs is None:
                    self.emitted_addrs = set()
                elif arg.type == 'bytes32' and self.emitted_hashes is None:
                    self.emitted_hashes = set()

        return self

    def generate_filters(self) -> None:
        """One open-ended log filter per selected event, keyed like self.events"""
        for key, event in self.events.items():
            self.filters[key] = LogFilter(
                name=f"{event.name}_{self.address.lower()}",
                from_block=self.starting_block,
                to_block=-1,
                address=to_checksum_address(self.address),
                topics=[event.topic0()],
            )

        # No point in watching a contract without filters
        if not self.filters:
            raise FilterGenerationError(f"no filters created for contract {self.address}")

    def passes_event_filter(self, values: Dict[str, str]) -> bool:
        if not self.filter_args:
            return True
        return any(str(value).lower() in self.filter_args for value in values.values())

    def passes_method_filter(self, value: str) -> bool:
        if not self.method_args:
            return True
        return value.lower() in self.method_args

    def add_emitted_addr(self, *addrs: str) -> None:
        if self.emitted_addrs is None:
            return
        for addr in addrs:
            if self.passes_method_filter(addr):
                self.emitted_addrs.add(to_checksum_address(addr))

    def add_emitted_hash(self, *hashes: str) -> None:
        if self.emitted_hashes is None:
            return
        for value in hashes:
            if self.passes_method_filter(value):
                self.emitted_hashes.add(value.lower())
