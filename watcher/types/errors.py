# watcher/types/errors.py

from typing import Any, Optional

from msgspec import Struct


class WatcherError(Exception):
    """Base class for every error raised by the watcher"""


class ConfigurationError(WatcherError):
    """Operator or programmer misuse; retrying will not help"""


class NoContractsError(ConfigurationError):
    def __init__(self, message: str = "transformer has no initialized contracts to work with"):
        super().__init__(message)


class AbiResolutionError(WatcherError):
    pass


class BlockRetrievalError(WatcherError):
    pass


class FilterGenerationError(WatcherError):
    pass


class WatchedEventError(WatcherError):
    pass


class ConversionError(WatcherError):
    pass


class PollingError(WatcherError):
    pass


class ContractDataResult(Struct):
    """Outcome of a best-effort contract call. A failure here is never fatal."""
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> 'ContractDataResult':
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> 'ContractDataResult':
        return cls(error=f"{type(error).__name__}: {error}")
