# watcher/transform/converter.py

import json
from typing import Any, Dict, List, Optional, Tuple

from web3 import Web3
from web3._utils.events import get_event_data
from hexbytes import HexBytes
from eth_utils import to_checksum_address

from ..contracts.contract import Contract
from ..core.logging import LoggingMixin
from ..types import Event, WatchedEvent, TransformedLog, ConversionError
from .interfaces import ConverterInterface


class Converter(LoggingMixin, ConverterInterface):
    """
    Decodes watched event logs for the active contract into string-valued logs.

    Addresses and 32 byte values seen while decoding are cached on the
    contract so the poller can use them as method inputs.
    """

    def __init__(self):
        self.w3 = Web3()
        self.contract: Optional[Contract] = None

    def update(self, contract: Contract) -> None:
        self.contract = contract

    def convert(self, watched_event: WatchedEvent, event: Event) -> Optional[TransformedLog]:
        if self.contract is None:
            raise ConversionError("converter has no active contract")

        try:
            event_data = get_event_data(self.w3.codec, self._event_abi(event), self._log_entry(watched_event))
        except Exception as e:
            raise ConversionError(
                f"failed to decode log {watched_event.log_id} as {event.name}: {e}"
            ) from e

        field_types = {f.name: f.type for f in event.fields}
        values: Dict[str, str] = {}
        seen_addrs: List[str] = []
        seen_hashes: List[str] = []

        for field_name, value in event_data['args'].items():
            values[field_name], addrs, hashes = self._stringify(value, field_types.get(field_name, ''))
            seen_addrs.extend(addrs)
            seen_hashes.extend(hashes)

        # Only hold onto logs that pass the event argument filter, if any
        if not self.contract.passes_event_filter(values):
            self.log_debug("Log filtered out by event arguments",
                           contract_address=self.contract.address,
                           event_name=event.name,
                           log_id=watched_event.log_id)
            return None

        self.contract.add_emitted_addr(*seen_addrs)
        self.contract.add_emitted_hash(*seen_hashes)

        return TransformedLog(
            id=watched_event.log_id,
            values=values,
            block=watched_event.block_number,
            tx=watched_event.tx_hash,
        )

    @staticmethod
    def _event_abi(event: Event) -> Dict[str, Any]:
        entry = dict(event.abi_entry) if event.abi_entry else {
            'type': 'event',
            'name': event.name,
            'inputs': [{'name': f.name, 'type': f.type, 'indexed': f.indexed} for f in event.fields],
        }
        entry['anonymous'] = event.anonymous
        entry['inputs'] = [{'indexed': False, **i} for i in entry.get('inputs', [])]
        return entry

    @staticmethod
    def _log_entry(watched_event: WatchedEvent) -> Dict[str, Any]:
        return {
            'address': to_checksum_address(watched_event.address),
            'topics': [HexBytes(topic) for topic in watched_event.topics()],
            'data': HexBytes(watched_event.data or '0x'),
            'logIndex': watched_event.index,
            'transactionIndex': 0,
            'transactionHash': HexBytes(watched_event.tx_hash),
            'blockHash': None,
            'blockNumber': watched_event.block_number,
        }

    def _stringify(self, value: Any, abi_type: str) -> Tuple[str, List[str], List[str]]:
        """Render a decoded value as text; also returns addresses and hashes found in it"""
        if isinstance(value, bool):
            return ('true' if value else 'false'), [], []

        if isinstance(value, int):
            return str(value), [], []

        if isinstance(value, (bytes, bytearray)):
            rendered = '0x' + bytes(value).hex()
            return rendered, [], ([rendered] if len(value) == 32 else [])

        if isinstance(value, str):
            if abi_type == 'address':
                checksummed = to_checksum_address(value)
                return checksummed, [checksummed], []
            return value, [], []

        if isinstance(value, (list, tuple)):
            item_type = abi_type[:abi_type.rfind('[')] if abi_type.endswith(']') else ''
            parts, addrs, hashes = [], [], []
            for item in value:
                rendered, item_addrs, item_hashes = self._stringify(item, item_type)
                parts.append(rendered)
                addrs.extend(item_addrs)
                hashes.extend(item_hashes)
            return json.dumps(parts), addrs, hashes

        raise ConversionError(f"unhandled abi type {type(value).__name__} for {abi_type}")
