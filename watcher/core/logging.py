# watcher/core/logging.py
"""
Logging for the contract watcher.

Everything logs under the ``watcher`` logger. Context passed as keyword
arguments (contract address, block number, filter name...) is attached to
the record and rendered after the message by WatcherFormatter.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Mapping, Optional

from logging import DEBUG, INFO, WARNING, ERROR
from msgspec import Struct


ROOT_LOGGER = 'watcher'

# Record attributes rendered as key=value pairs, in this order
CONTEXT_ATTRS = (
    'contract_address', 'block_number', 'last_block', 'filter_name', 'event_name',
    'method', 'log_id', 'tx_hash', 'network', 'contract_count', 'filter_count',
    'method_count', 'cycle', 'persisted', 'skipped', 'error', 'exception_type',
)


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class LoggingSettings(Struct):
    level: str = "INFO"
    console: bool = True
    structured: bool = True
    log_dir: Optional[str] = None
    file: bool = False

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> 'LoggingSettings':
        return cls(
            level=env.get("WATCHER_LOG_LEVEL", "INFO"),
            console=_flag(env.get("WATCHER_LOG_CONSOLE"), True),
            structured=_flag(env.get("WATCHER_LOG_STRUCTURED"), True),
            log_dir=env.get("WATCHER_LOG_DIR") or str(Path.cwd() / "logs"),
            file=_flag(env.get("WATCHER_LOG_FILE"), False),
        )


class WatcherFormatter(logging.Formatter):
    """Plain text lines with an optional ``| key=value ...`` context suffix"""

    def __init__(self, include_context: bool = True):
        super().__init__(fmt='%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s',
                         datefmt='%Y-%m-%d %H:%M:%S')
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        if not self.include_context:
            return line

        context = ' '.join(
            f"{attr}={record.__dict__[attr]}" for attr in CONTEXT_ATTRS if attr in record.__dict__
        )
        if not context:
            return line

        # Keep any traceback below the context
        first, sep, rest = line.partition('\n')
        return f"{first} | {context}{sep}{rest}"


class WatcherLogger:
    """Process-wide logging setup; the first configure() call wins until reset()"""

    _configured = False
    _settings: Optional[LoggingSettings] = None

    @classmethod
    def configure(cls, settings: Optional[LoggingSettings] = None) -> None:
        if cls._configured:
            return

        settings = settings or LoggingSettings()
        level = logging.getLevelName(settings.level.upper())
        if not isinstance(level, int):
            level = logging.INFO

        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(level)
        root.handlers.clear()

        if settings.console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(WatcherFormatter(include_context=settings.structured))
            root.addHandler(console)

        if settings.file and settings.log_dir:
            log_dir = Path(settings.log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            for filename, handler_level in (('watcher.log', level), ('watcher_errors.log', ERROR)):
                handler = logging.FileHandler(log_dir / filename)
                handler.setLevel(handler_level)
                handler.setFormatter(WatcherFormatter())
                root.addHandler(handler)

        cls._settings = settings
        cls._configured = True

    @classmethod
    def reset(cls) -> None:
        for handler in logging.getLogger(ROOT_LOGGER).handlers:
            handler.close()
        logging.getLogger(ROOT_LOGGER).handlers.clear()
        cls._settings = None
        cls._configured = False

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        cls.configure()
        if name != ROOT_LOGGER and not name.startswith(f'{ROOT_LOGGER}.'):
            name = f'{ROOT_LOGGER}.{name}'
        return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: int, message: str, **context) -> None:
    logger.log(level, message, extra=context, stacklevel=2)


class LoggingMixin:
    """
    Per-class logger named after the class's module path under ``watcher``,
    with level helpers that take context as keyword arguments.
    """

    @property
    def logger(self) -> logging.Logger:
        logger = self.__dict__.get('_logger')
        if logger is None:
            module = type(self).__module__
            if module.startswith(f'{ROOT_LOGGER}.'):
                module = module[len(ROOT_LOGGER) + 1:]
            logger = WatcherLogger.get_logger(f"{module}.{type(self).__name__}")
            self.__dict__['_logger'] = logger
        return logger

    def _log(self, level: int, message: str, context: Dict[str, object]) -> None:
        self.logger.log(level, message, extra=context, stacklevel=3)

    def log_debug(self, message: str, **context) -> None:
        self._log(DEBUG, message, context)

    def log_info(self, message: str, **context) -> None:
        self._log(INFO, message, context)

    def log_warning(self, message: str, **context) -> None:
        self._log(WARNING, message, context)

    def log_error(self, message: str, **context) -> None:
        self._log(ERROR, message, context)
