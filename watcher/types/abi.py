# watcher/types/abi.py

from typing import Dict, List, Optional, Any

from msgspec import Struct, field
from eth_utils import keccak


CONSTANT_MUTABILITY = ('view', 'pure')


class Field(Struct):
    name: str
    type: str
    indexed: bool = False
    components: Optional[List[Dict[str, Any]]] = None

    def canonical_type(self) -> str:
        if not self.type.startswith('tuple'):
            return self.type
        suffix = self.type[len('tuple'):]
        inner = ','.join(
            Field.from_abi(component).canonical_type() for component in self.components or []
        )
        return f"({inner}){suffix}"

    @classmethod
    def from_abi(cls, entry: Dict[str, Any]) -> 'Field':
        return cls(
            name=entry.get('name', ''),
            type=entry['type'],
            indexed=entry.get('indexed', False),
            components=entry.get('components'),
        )


class Event(Struct):
    name: str
    fields: List[Field]
    anonymous: bool = False
    abi_entry: Dict[str, Any] = field(default_factory=dict)

    def sig(self) -> str:
        return f"{self.name}({','.join(f.canonical_type() for f in self.fields)})"

    def topic0(self) -> str:
        return '0x' + keccak(text=self.sig()).hex()

    @classmethod
    def from_abi(cls, entry: Dict[str, Any]) -> 'Event':
        return cls(
            name=entry['name'],
            fields=[Field.from_abi(i) for i in entry.get('inputs', [])],
            anonymous=entry.get('anonymous', False),
            abi_entry=entry,
        )


class Method(Struct):
    name: str
    args: List[Field]
    returns: List[Field]
    const: bool = False
    abi_entry: Dict[str, Any] = field(default_factory=dict)

    def sig(self) -> str:
        return f"{self.name}({','.join(a.canonical_type() for a in self.args)})"

    @classmethod
    def from_abi(cls, entry: Dict[str, Any]) -> 'Method':
        mutability = entry.get('stateMutability')
        return cls(
            name=entry['name'],
            args=[Field.from_abi(i) for i in entry.get('inputs', [])],
            returns=[Field.from_abi(o) for o in entry.get('outputs', [])],
            const=bool(entry.get('constant')) or mutability in CONSTANT_MUTABILITY,
            abi_entry=entry,
        )
