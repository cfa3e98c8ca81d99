# watcher/contracts/abi_loader.py

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.logging import LoggingMixin


DEFAULT_ABI_DIR = Path(__file__).parent.parent.parent / "config" / "abis"


class ABILoader(LoggingMixin):
    """
    ABIs stored as ``<abi_dir>/<address>.json``, either a bare list of
    entries or a build artifact with an ``abi`` key.

    Results are cached per address, misses included.
    """

    def __init__(self, abi_base_path: Optional[Path] = None):
        self.abi_base_path = Path(abi_base_path) if abi_base_path is not None else DEFAULT_ABI_DIR
        self._abi_cache: Dict[str, Optional[List[Dict[str, Any]]]] = {}

    def load_abi(self, address: str) -> Optional[List[Dict[str, Any]]]:
        if not address:
            return None

        address = address.lower()
        if address not in self._abi_cache:
            self._abi_cache[address] = self._read(self.abi_base_path / f"{address}.json")
        return self._abi_cache[address]

    def _read(self, abi_path: Path) -> Optional[List[Dict[str, Any]]]:
        if not abi_path.is_file():
            return None

        try:
            content = json.loads(abi_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            self.log_error(f"Unreadable ABI file {abi_path}", error=str(e))
            return None

        if isinstance(content, dict):
            content = content.get('abi')
        if not isinstance(content, list):
            self.log_error(f"ABI file {abi_path} does not hold a list of entries")
            return None

        self.log_debug(f"Loaded ABI from {abi_path} ({len(content)} entries)")
        return content

    def clear_cache(self) -> None:
        self._abi_cache.clear()
