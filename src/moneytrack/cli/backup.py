#!/usr/bin/env python3
"""
Backup CLI - Export and restore of the whole data file.
"""

from pathlib import Path

import click

from ..app import FinanceApp
from ..backup.backup import parse_backup_file, prune_backups, summarize_backup
from ..core.errors import BackupValidationError
from .runner import run_app


@click.group()
def backup() -> None:
    """Backup export and restore commands."""
    pass


@backup.command()
@click.option("--dir", "directory", type=click.Path(file_okay=False, path_type=Path), help="Output directory")
@click.option("--prune/--no-prune", default=True, help="Delete backups older than the retention period")
@click.pass_context
def export(ctx: click.Context, directory: Path | None, prune: bool) -> None:
    """
    Export every collection to moneytrack-backup-YYYY-MM-DD.json.

    Example:
      moneytrack backup export --dir ~/backups
    """
    config = ctx.obj["config"]
    directory = directory or config.backup.backup_dir

    async def action(app: FinanceApp):
        return await app.export_backup(directory)

    path = run_app(ctx, action)
    click.echo(f"Backup written to {path}")

    if prune:
        removed = prune_backups(directory, config.backup.retention_days)
        if removed:
            click.echo(f"Removed {len(removed)} old backup(s)")


@backup.command("import")
@click.argument("backup_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.confirmation_option(prompt="Replace ALL current data with this backup?")
@click.pass_context
def import_backup(ctx: click.Context, backup_file: Path) -> None:
    """
    Replace all data with the contents of a backup file.

    The file is fully validated before anything is changed.

    Example:
      moneytrack backup import moneytrack-backup-2026-03-01.json --yes
    """
    try:
        data = parse_backup_file(backup_file)
    except BackupValidationError as e:
        raise click.ClickException(str(e)) from e

    async def action(app: FinanceApp):
        await app.restore_backup(data)

    run_app(ctx, action)
    click.echo("Backup restored:")
    for name, count in summarize_backup(data).items():
        click.echo(f"  {name}: {count}")
