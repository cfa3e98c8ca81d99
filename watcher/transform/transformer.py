# watcher/transform/transformer.py

from typing import Dict, Optional

from ..clients.interfaces import BlockChainInterface
from ..contracts.contract import Contract
from ..contracts.parser import Parser
from ..core.logging import LoggingMixin
from ..database.interfaces import (
    BlockRetrieverInterface,
    EventRepositoryInterface,
    FilterRepositoryInterface,
    WatchedEventRepositoryInterface,
)
from ..database.repositories import (
    BlockRetriever,
    EventRepository,
    FilterRepository,
    WatchedEventRepository,
)
from ..types import ContractConfig, NoContractsError
from .converter import Converter
from .interfaces import ConverterInterface, ParserInterface, PollerInterface
from .poller import Poller


class Transformer(LoggingMixin):
    """
    Top level orchestrator for transforming watched contract data.

    init() builds one Contract per configured address and registers its log
    filters. Each execute() drains the watched event logs for every contract
    through the converter into the event repository, then polls the
    contract's methods up to the last block seen when the cycle started.

    Requires a synced database of blocks, receipts and logs and a reachable node.
    """

    def __init__(self, config: ContractConfig,
                 blockchain: BlockChainInterface,
                 db_manager,
                 *,
                 parser: Optional[ParserInterface] = None,
                 retriever: Optional[BlockRetrieverInterface] = None,
                 converter: Optional[ConverterInterface] = None,
                 poller: Optional[PollerInterface] = None,
                 filter_repository: Optional[FilterRepositoryInterface] = None,
                 watched_event_repository: Optional[WatchedEventRepositoryInterface] = None,
                 event_repository: Optional[EventRepositoryInterface] = None):
        self.config = config

        # Pre-processing
        self.parser = parser or Parser(config.network)
        self.retriever = retriever or BlockRetriever(db_manager)

        # Processing
        self.converter = converter or Converter()
        self.poller = poller or Poller(blockchain, db_manager)

        # Storage
        self.filter_repository = filter_repository or FilterRepository(db_manager)
        self.watched_event_repository = watched_event_repository or WatchedEventRepository(db_manager)
        self.event_repository = event_repository or EventRepository(db_manager)

        # Contract info keyed by address
        self.contracts: Dict[str, Contract] = {}

        # Latest block in the block repository, refreshed at cycle boundaries
        self.last_block: int = 0
        self.cycles_completed: int = 0

    def get_config(self) -> ContractConfig:
        return self.config

    def init(self) -> None:
        """
        Build watch state for every configured address and register its filters.

        Not safe to call twice on the same instance.
        """
        for address in self.config.addresses:
            self.contracts[address] = self._init_contract(address)

        self._refresh_last_block()

        self.log_info("Transformer initialized",
                      last_block=self.last_block,
                      contract_count=len(self.contracts))

    def _init_contract(self, address: str) -> Contract:
        abi_str = self.config.abis.get(address, '')
        if abi_str:
            self.parser.parse_abi_str(abi_str)
        else:
            # No ABI in the config: local ABI files, then Etherscan
            self.parser.parse(address)

        first_block = self.retriever.retrieve_first_block(address)
        # An override only moves the start later, never earlier
        override = self.config.starting_blocks.get(address, 0)
        if first_block < override:
            first_block = override

        name = ''
        result = self.poller.fetch_contract_data(self.parser.abi(), address, 'name', None, self.last_block)
        if result.ok:
            name = str(result.value)
        else:
            # Not every contract has a name method
            self.log_warning("Error fetching contract name",
                             contract_address=address,
                             error=result.error)

        contract = Contract(
            name=name,
            network=self.config.network,
            address=address,
            abi=self.parser.abi(),
            parsed_abi=self.parser.parsed_abi(),
            starting_block=first_block,
            events=self.parser.get_events(self.config.events.get(address)),
            methods=self.parser.get_select_methods(self.config.methods.get(address)),
            filter_args=set(self.config.event_args.get(address) or []),
            method_args=set(self.config.method_args.get(address) or []),
            piping=self.config.piping.get(address, False),
        ).init()

        contract.generate_filters()

        for log_filter in contract.filters.values():
            self.filter_repository.create_filter(log_filter)

        self.log_info("Contract initialized",
                      contract_address=address,
                      block_number=first_block,
                      filter_count=len(contract.filters),
                      method_count=len(contract.methods))
        return contract

    def _refresh_last_block(self) -> None:
        most_recent = self.retriever.retrieve_most_recent_block()
        if most_recent < self.last_block:
            self.log_warning("Most recent block moved backwards, keeping cursor",
                             block_number=most_recent,
                             last_block=self.last_block)
            return
        self.last_block = most_recent

    def execute(self) -> None:
        """
        Run one transformation cycle over every initialized contract.

        Any collaborator error aborts the cycle; everything persisted before
        the failure stays persisted.
        """
        if not self.contracts:
            raise NoContractsError()

        persisted = 0
        skipped = 0

        for contract in self.contracts.values():
            self.converter.update(contract)

            for event_key, log_filter in contract.filters.items():
                event = contract.events[event_key]
                watched_events = self.watched_event_repository.get_watched_events(log_filter.name)

                for watched_event in watched_events:
                    log = self.converter.convert(watched_event, event)
                    if log is None:
                        skipped += 1
                        continue

                    # Persist each log as soon as it is converted
                    self.event_repository.persist_logs([log], event, contract.address, contract.name)
                    persisted += 1

            # Uses the block height captured before this cycle started
            self.poller.poll_contract(contract, self.last_block)

        self._refresh_last_block()
        self.cycles_completed += 1

        self.log_info("Transformation cycle complete",
                      cycle=self.cycles_completed,
                      persisted=persisted,
                      skipped=skipped,
                      last_block=self.last_block)
