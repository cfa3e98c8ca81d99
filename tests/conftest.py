# tests/conftest.py
"""
pytest configuration and fixtures for contract watcher testing
"""

import pytest

from watcher.core.logging import LoggingSettings, WatcherLogger
from watcher.database.connection import DatabaseManager
from watcher.database.tables import Block, Log, Receipt
from watcher.types import DatabaseConfig

from tests.fakes import (
    TOKEN_ADDRESS,
    TRANSFER_TOPIC,
    address_topic,
    uint_data,
)


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    WatcherLogger.reset()
    WatcherLogger.configure(LoggingSettings(level="DEBUG", console=False))
    yield
    WatcherLogger.reset()


@pytest.fixture
def db_manager():
    """Fresh in-memory database with all watcher tables"""
    manager = DatabaseManager(DatabaseConfig(url="sqlite://"))
    manager.initialize()
    manager.create_tables()
    yield manager
    manager.shutdown()


@pytest.fixture
def add_log(db_manager):
    """Insert a captured log row and return its id"""
    def _add(block_number, topics, data, address=TOKEN_ADDRESS, tx_hash=None, index=0):
        tx_hash = tx_hash or '0x' + format(block_number * 1000 + index, '064x')
        with db_manager.get_transaction() as session:
            values = {f'topic{i}': topic for i, topic in enumerate(topics)}
            row = Log(block_number=block_number, address=address, tx_hash=tx_hash,
                      index=index, data=data, **values)
            session.add(row)
            session.flush()
            return row.id
    return _add


@pytest.fixture
def add_transfer(add_log):
    def _add(block_number, sender, receiver, value, **kwargs):
        topics = [TRANSFER_TOPIC, address_topic(sender), address_topic(receiver)]
        return add_log(block_number, topics, uint_data(value), **kwargs)
    return _add


@pytest.fixture
def add_blocks(db_manager):
    def _add(*numbers):
        with db_manager.get_transaction() as session:
            session.add_all(Block(number=n, hash='0x' + format(n, '064x')) for n in numbers)
    return _add


@pytest.fixture
def add_receipt(db_manager):
    def _add(block_number, contract_address=None, tx_hash=None):
        with db_manager.get_transaction() as session:
            session.add(Receipt(
                block_number=block_number,
                tx_hash=tx_hash or '0x' + format(block_number, '064x'),
                contract_address=contract_address,
            ))
    return _add
