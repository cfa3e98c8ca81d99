# watcher/cli.py

"""
Command-line interface for the contract watcher.
"""

import json
import logging
import time

import click
import msgspec
from sqlalchemy.exc import SQLAlchemyError

from . import load_config, create_db_manager, create_transformer
from .types import ConfigurationError, WatcherError


logger = logging.getLogger("watcher.cli")


@click.group()
def cli():
    """Watch configured contracts and transform their logs and method results"""
    pass


@cli.command('init-db')
@click.option('--config', 'config_file', required=True, type=click.Path(exists=True), help='Contract config file')
def init_db(config_file):
    """Create the watcher tables"""
    config = _load(config_file)
    db_manager = create_db_manager(config)
    try:
        db_manager.create_tables()
        click.echo("✅ Tables created")
    finally:
        db_manager.shutdown()


@cli.command('filters')
@click.option('--config', 'config_file', required=True, type=click.Path(exists=True), help='Contract config file')
def filters(config_file):
    """Initialize the contracts and print the log filters they watch"""
    config = _load(config_file)
    db_manager = create_db_manager(config)
    try:
        transformer = create_transformer(config, db_manager)
        _run_or_abort(transformer.init)

        for address, contract in sorted(transformer.contracts.items()):
            click.echo(f"{address} ({contract.name or 'unnamed'}) from block {contract.starting_block}")
            for log_filter in contract.filters.values():
                stored = transformer.filter_repository.get_filter(log_filter.name)
                if stored is None:
                    click.echo(f"   {log_filter.name}: not stored")
                    continue
                click.echo(f"   {json.dumps(msgspec.to_builtins(stored))}")
    finally:
        db_manager.shutdown()


@cli.command('run')
@click.option('--config', 'config_file', required=True, type=click.Path(exists=True), help='Contract config file')
@click.option('--once', is_flag=True, help='Run a single transformation cycle and exit')
@click.option('--interval', type=float, default=None, help='Seconds between cycles (default: from config)')
def run(config_file, once, interval):
    """Initialize the transformer and execute transformation cycles"""
    config = _load(config_file)
    interval = interval if interval is not None else config.poll_interval

    db_manager = create_db_manager(config)
    try:
        transformer = create_transformer(config, db_manager)
        _run_or_abort(transformer.init)

        while True:
            try:
                transformer.execute()
            except ConfigurationError as e:
                raise click.ClickException(str(e))
            except (WatcherError, SQLAlchemyError) as e:
                if once:
                    raise click.ClickException(str(e))
                logger.error(f"Transformation cycle failed, retrying in {interval}s: {e}")

            if once:
                break
            time.sleep(interval)

    except KeyboardInterrupt:
        logger.info("Interrupted by user, shutting down...")
    finally:
        db_manager.shutdown()


def _load(config_file):
    try:
        return load_config(config_file)
    except ConfigurationError as e:
        raise click.ClickException(str(e))


def _run_or_abort(step):
    try:
        step()
    except (WatcherError, SQLAlchemyError) as e:
        raise click.ClickException(f"initialization failed: {e}")


def main():
    cli()


if __name__ == '__main__':
    main()
