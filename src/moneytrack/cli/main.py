#!/usr/bin/env python3
"""
Main CLI Entry Point for moneytrack

Provides the command-line interface over accounts, transactions, recurrents,
investments and backups.
"""


import click

from ..core.config import get_config, reload_config


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    moneytrack - Personal Finance Tracker

    Accounts, transactions, credit card invoices, recurring bills and
    investments kept in a local JSON data file.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)

    # Set environment if specified
    if config_env:
        import os

        os.environ["MONEYTRACK_ENV"] = config_env

    # Configure debug logging if requested
    if debug:
        import logging
        import os

        os.environ["LOG_LEVEL"] = "DEBUG"
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("moneytrack").setLevel(logging.DEBUG)

    # Store global options
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config"] = reload_config() if config_env else get_config()

    if verbose:
        click.echo(f"Environment: {ctx.obj['config'].environment.value}")
        click.echo(f"Data file: {ctx.obj['config'].db_file}")

    if debug:
        click.echo("Debug logging enabled")


@main.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show version information."""
    from moneytrack import __author__, __version__

    click.echo(f"moneytrack v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    config_obj = ctx.obj["config"]

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {config_obj.environment.value}")
    click.echo(f"  Data Directory: {config_obj.data_dir}")
    click.echo(f"  Data File: {config_obj.db_file}")
    click.echo(f"  Backup Directory: {config_obj.backup.backup_dir}")
    click.echo(f"  Backup Retention: {config_obj.backup.retention_days} days")
    click.echo(f"  Debug Mode: {config_obj.debug}")
    click.echo(f"  Log Level: {config_obj.log_level}")


# Import command groups
from .accounts import accounts  # noqa: E402
from .alerts import alerts  # noqa: E402
from .backup import backup  # noqa: E402
from .investments import investments  # noqa: E402
from .recurrents import recurrents  # noqa: E402
from .search import search  # noqa: E402
from .tags import tags  # noqa: E402
from .transactions import tx  # noqa: E402

main.add_command(accounts)
main.add_command(tx)
main.add_command(recurrents)
main.add_command(investments)
main.add_command(backup)
main.add_command(alerts)
main.add_command(search)
main.add_command(tags)


if __name__ == "__main__":
    main()
