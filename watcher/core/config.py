# watcher/core/config.py

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from msgspec import Struct

from ..types import ContractConfig, DatabaseConfig, RpcConfig, ConfigurationError
from .logging import WatcherLogger, log_with_context


class WatcherConfig(Struct):
    database: DatabaseConfig
    rpc: RpcConfig
    contracts: ContractConfig
    etherscan_api_key: Optional[str] = None
    abi_dir: Optional[str] = None
    poll_interval: float = 10.0

    @classmethod
    def from_file(cls, config_file: str, env_vars: Optional[Dict[str, str]] = None) -> 'WatcherConfig':
        """Contracts from a YAML/JSON file; connection settings from the environment"""
        logger = WatcherLogger.get_logger('core.config')

        load_dotenv()
        env = env_vars if env_vars is not None else os.environ

        data = cls._load_file(Path(config_file))
        contracts = ContractConfig.from_dict(data)

        if not contracts.addresses:
            raise ConfigurationError(f"no contracts configured in {config_file}")

        config = cls(
            database=cls._create_database_config(env),
            rpc=cls._create_rpc_config(env),
            contracts=contracts,
            etherscan_api_key=env.get("WATCHER_ETHERSCAN_API_KEY"),
            abi_dir=data.get('abi_dir') or env.get("WATCHER_ABI_DIR"),
            poll_interval=float(data.get('poll_interval', env.get("WATCHER_POLL_INTERVAL", 10.0))),
        )

        log_with_context(logger, logging.INFO, "Watcher configuration loaded",
                         network=contracts.network or 'mainnet',
                         contract_count=len(contracts.addresses))
        return config

    @staticmethod
    def _load_file(config_path: Path) -> Dict[str, Any]:
        if not config_path.exists():
            raise ConfigurationError(f"config file not found: {config_path}")

        with open(config_path, 'r') as f:
            if config_path.suffix.lower() in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            elif config_path.suffix.lower() == '.json':
                data = json.load(f)
            else:
                raise ConfigurationError(f"unsupported config file type: {config_path.suffix}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"config file must contain a mapping: {config_path}")
        return data

    @staticmethod
    def _create_database_config(env) -> DatabaseConfig:
        url = env.get("WATCHER_DB_URL")
        if not url:
            db_user = env.get("WATCHER_DB_USER")
            db_password = env.get("WATCHER_DB_PASSWORD")
            db_host = env.get("WATCHER_DB_HOST", "127.0.0.1")
            db_port = env.get("WATCHER_DB_PORT", "5432")
            db_name = env.get("WATCHER_DB_NAME", "watcher")

            if not db_user or not db_password:
                raise ConfigurationError("Database credentials not found")

            url = f"postgresql+psycopg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"

        return DatabaseConfig(
            url=url,
            pool_size=int(env.get("WATCHER_DB_POOL_SIZE", 5)),
            max_overflow=int(env.get("WATCHER_DB_MAX_OVERFLOW", 10)),
        )

    @staticmethod
    def _create_rpc_config(env) -> RpcConfig:
        endpoint_url = env.get("WATCHER_RPC_URL")
        if not endpoint_url:
            raise ConfigurationError("WATCHER_RPC_URL environment variable required")
        return RpcConfig(endpoint_url=endpoint_url, timeout=int(env.get("WATCHER_RPC_TIMEOUT", 30)))
