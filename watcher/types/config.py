# watcher/types/config.py

from typing import Dict, List, Optional, Set, Any

from msgspec import Struct, field

from .errors import ConfigurationError


class DatabaseConfig(Struct):
    url: str
    pool_size: int = 5
    max_overflow: int = 10


class RpcConfig(Struct):
    endpoint_url: str
    timeout: int = 30


def _text(value: Any, where: str) -> str:
    # YAML 1.1 reads an unquoted 0x... value as an integer
    if not isinstance(value, str):
        raise ConfigurationError(
            f"{where}: expected a string, got {type(value).__name__} {value!r}; "
            f"quote hex addresses and hashes in the config file"
        )
    return value


def _texts(values: Any, where: str) -> List[str]:
    if values is None:
        return []
    if not isinstance(values, list):
        raise ConfigurationError(f"{where}: expected a list, got {type(values).__name__}")
    return [_text(value, where) for value in values]


class ContractConfig(Struct):
    """Per-address watch settings. Loaded once, read-only afterwards."""
    network: str = ''
    addresses: Set[str] = field(default_factory=set)
    abis: Dict[str, str] = field(default_factory=dict)
    starting_blocks: Dict[str, int] = field(default_factory=dict)
    events: Dict[str, List[str]] = field(default_factory=dict)
    event_args: Dict[str, List[str]] = field(default_factory=dict)
    methods: Dict[str, Optional[List[str]]] = field(default_factory=dict)
    method_args: Dict[str, List[str]] = field(default_factory=dict)
    piping: Dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContractConfig':
        """
        Build from the ``contracts`` mapping of a config file.

        Raises:
            ConfigurationError: when an address or list entry is not a string
        """
        config = cls(network=data.get('network') or '')

        for raw_address, settings in (data.get('contracts') or {}).items():
            address = _text(raw_address, "contract address").lower()
            settings = settings or {}

            config.addresses.add(address)
            config.abis[address] = settings.get('abi') or ''
            config.starting_blocks[address] = int(settings.get('starting_block') or 0)
            config.events[address] = _texts(settings.get('events'), f"{address} events")
            config.event_args[address] = _texts(settings.get('event_args'), f"{address} event_args")
            methods = settings.get('methods')
            config.methods[address] = None if methods is None else _texts(methods, f"{address} methods")
            config.method_args[address] = _texts(settings.get('method_args'), f"{address} method_args")
            config.piping[address] = bool(settings.get('piping', False))

        return config
