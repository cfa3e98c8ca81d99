# watcher/__init__.py

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from .core.config import WatcherConfig
from .core.logging import LoggingSettings, WatcherLogger, log_with_context
from .clients.eth_rpc import EthRpcClient
from .clients.interfaces import BlockChainInterface
from .contracts.abi_loader import ABILoader
from .contracts.parser import Parser
from .database.connection import DatabaseManager
from .transform.transformer import Transformer


def load_config(config_file: str, env_vars: Optional[Mapping[str, str]] = None) -> WatcherConfig:
    env = env_vars if env_vars is not None else os.environ
    # Before anything asks for a logger, or the defaults win
    WatcherLogger.configure(LoggingSettings.from_env(env))
    return WatcherConfig.from_file(config_file, env)


def create_db_manager(config: WatcherConfig) -> DatabaseManager:
    db_manager = DatabaseManager(config.database)
    db_manager.initialize()
    return db_manager


def create_transformer(config: WatcherConfig, db_manager: DatabaseManager,
                       blockchain: Optional[BlockChainInterface] = None) -> Transformer:
    """Production wiring: JSON-RPC node, local ABI directory with Etherscan fallback"""
    logger = WatcherLogger.get_logger('setup')

    if blockchain is None:
        blockchain = EthRpcClient(config.rpc.endpoint_url, timeout=config.rpc.timeout)

    parser = Parser(
        config.contracts.network,
        abi_loader=ABILoader(Path(config.abi_dir) if config.abi_dir else None),
        api_key=config.etherscan_api_key,
    )

    transformer = Transformer(config.contracts, blockchain, db_manager, parser=parser)

    log_with_context(logger, logging.INFO, "Transformer created",
                     network=config.contracts.network or 'mainnet',
                     contract_count=len(config.contracts.addresses))
    return transformer
