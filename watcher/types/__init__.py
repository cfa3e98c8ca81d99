# watcher/types/__init__.py

# ABI Types
from .abi import (
    Field,
    Event,
    Method,
)

# Filter and Log Types
from .filters import LogFilter
from .events import (
    WatchedEvent,
    TransformedLog,
    MethodResult,
)

# Configuration Types
from .config import (
    DatabaseConfig,
    RpcConfig,
    ContractConfig,
)

# Errors
from .errors import (
    WatcherError,
    ConfigurationError,
    NoContractsError,
    AbiResolutionError,
    BlockRetrievalError,
    FilterGenerationError,
    WatchedEventError,
    ConversionError,
    PollingError,
    ContractDataResult,
)
