"""
Backup Package

Export and restore of every collection.
"""

from .backup import (
    BackupData,
    build_backup_envelope,
    collect_backup_data,
    export_backup_json,
    parse_backup_content,
    parse_backup_file,
    prune_backups,
    replace_data_with_backup,
    resolve_backup_data,
    summarize_backup,
    validate_relations,
)

__all__ = [
    "BackupData",
    "build_backup_envelope",
    "collect_backup_data",
    "export_backup_json",
    "parse_backup_content",
    "parse_backup_file",
    "prune_backups",
    "replace_data_with_backup",
    "resolve_backup_data",
    "summarize_backup",
    "validate_relations",
]
