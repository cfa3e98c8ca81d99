# watcher/database/repositories/block_retriever.py

from sqlalchemy import func

from ..interfaces import BlockRetrieverInterface
from ..tables import Block, Log, Receipt
from ...core.logging import LoggingMixin
from ...types import BlockRetrievalError


class BlockRetriever(LoggingMixin, BlockRetrieverInterface):
    """Block boundaries from captured chain data"""

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def retrieve_first_block(self, contract_address: str) -> int:
        """Block of the contract creation receipt, else the earliest captured log"""
        with self.db_manager.get_session() as session:
            first_block = session.query(func.min(Receipt.block_number)).filter(
                Receipt.contract_address == contract_address
            ).scalar()

            if first_block is None:
                first_block = session.query(func.min(Log.block_number)).filter(
                    Log.address == contract_address
                ).scalar()

        if first_block is None:
            raise BlockRetrievalError(f"no receipts or logs found for contract {contract_address}")

        self.log_debug("Retrieved first block", contract_address=contract_address, block_number=first_block)
        return int(first_block)

    def retrieve_most_recent_block(self) -> int:
        with self.db_manager.get_session() as session:
            last_block = session.query(func.max(Block.number)).scalar()

        if last_block is None:
            raise BlockRetrievalError("no blocks found")

        return int(last_block)
