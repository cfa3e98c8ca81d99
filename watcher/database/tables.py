# watcher/database/tables.py

from sqlalchemy import Column, String, Integer, BigInteger, Text, Index, UniqueConstraint

from .base import Base, DBBaseModel
from .types import EvmAddressType, EvmHashType, JsonType


# === Captured chain data (written by the syncer, read here) ===

class Block(Base):
    __tablename__ = 'blocks'

    id = Column(Integer, primary_key=True, autoincrement=True)
    number = Column(BigInteger, nullable=False, unique=True, index=True)
    hash = Column(EvmHashType(), nullable=True)


class Receipt(Base):
    __tablename__ = 'receipts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    block_number = Column(BigInteger, nullable=False, index=True)
    tx_hash = Column(EvmHashType(), nullable=False, index=True)
    contract_address = Column(EvmAddressType(), nullable=True, index=True)


class Log(Base):
    __tablename__ = 'logs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    block_number = Column(BigInteger, nullable=False, index=True)
    address = Column(EvmAddressType(), nullable=False)
    tx_hash = Column(EvmHashType(), nullable=False)
    index = Column(Integer, nullable=False)
    topic0 = Column(EvmHashType(), nullable=True)
    topic1 = Column(EvmHashType(), nullable=True)
    topic2 = Column(EvmHashType(), nullable=True)
    topic3 = Column(EvmHashType(), nullable=True)
    data = Column(Text, nullable=False, default='0x')

    __table_args__ = (
        UniqueConstraint('tx_hash', 'index', name='uq_logs_tx_index'),
        Index('idx_logs_address_topic0', 'address', 'topic0'),
    )


# === Watcher state ===

class LogFilterRecord(DBBaseModel):
    __tablename__ = 'log_filters'

    name = Column(String(255), nullable=False, unique=True, index=True)
    from_block = Column(BigInteger, nullable=False)
    to_block = Column(BigInteger, nullable=False, default=-1)
    address = Column(EvmAddressType(), nullable=False)
    topic0 = Column(EvmHashType(), nullable=True)
    topic1 = Column(EvmHashType(), nullable=True)
    topic2 = Column(EvmHashType(), nullable=True)
    topic3 = Column(EvmHashType(), nullable=True)


class TransformedEventLog(DBBaseModel):
    __tablename__ = 'transformed_event_logs'

    log_id = Column(Integer, nullable=False)
    event_name = Column(String(255), nullable=False)
    contract_address = Column(EvmAddressType(), nullable=False, index=True)
    contract_name = Column(String(255), nullable=False, default='')
    block_number = Column(BigInteger, nullable=False, index=True)
    tx_hash = Column(EvmHashType(), nullable=False)
    values = Column(JsonType, nullable=False)

    __table_args__ = (
        UniqueConstraint('log_id', 'event_name', name='uq_transformed_log_event'),
    )


class MethodResultRecord(DBBaseModel):
    __tablename__ = 'method_results'

    address = Column(EvmAddressType(), nullable=False, index=True)
    contract_name = Column(String(255), nullable=False, default='')
    method = Column(String(255), nullable=False)
    block = Column(BigInteger, nullable=False)
    inputs = Column(JsonType, nullable=False)
    inputs_key = Column(String(255), nullable=False, default='')
    output = Column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint('address', 'method', 'block', 'inputs_key', name='uq_method_result'),
    )
