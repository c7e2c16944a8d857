#!/usr/bin/env python3
"""
Configuration Management for moneytrack

Handles environment-based configuration with defaults and validation.
Supports multiple environments (development, test, production).
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class BackupConfig:
    """Backup export settings."""

    backup_dir: Path
    retention_days: int = 30


@dataclass
class Config:
    """
    Main configuration class for moneytrack.

    Loads configuration from environment variables with defaults and
    validation for each environment type.
    """

    environment: Environment

    # Core paths
    data_dir: Path
    db_file: Path

    # Component configurations
    backup: BackupConfig

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("MONEYTRACK_ENV", "development"))

        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_moneytrack"
            data_dir = Path(os.getenv("MONEYTRACK_DATA_DIR", str(default_test_dir)))
        else:
            data_dir = Path(os.getenv("MONEYTRACK_DATA_DIR", "./data")).expanduser().resolve()

        data_dir.mkdir(parents=True, exist_ok=True)

        db_file = Path(os.getenv("MONEYTRACK_DB_FILE", str(data_dir / "db.json"))).expanduser()

        backup = BackupConfig(
            backup_dir=Path(os.getenv("MONEYTRACK_BACKUP_DIR", str(data_dir / "backups"))).expanduser(),
            retention_days=int(os.getenv("MONEYTRACK_BACKUP_RETENTION_DAYS", "30")),
        )

        return cls(
            environment=env,
            data_dir=data_dir,
            db_file=db_file,
            backup=backup,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.data_dir.exists():
            errors.append(f"data_dir does not exist: {self.data_dir}")

        if self.db_file.exists() and not self.db_file.is_file():
            errors.append(f"db_file is not a file: {self.db_file}")

        if self.backup.retention_days < 0:
            errors.append("Backup retention days must be non-negative")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Unknown log level: {self.log_level}")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")

        if self.debug:
            logging.getLogger("moneytrack").setLevel(logging.DEBUG)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a plain dictionary for display."""
        return {
            "environment": self.environment.value,
            "data_dir": str(self.data_dir),
            "db_file": str(self.db_file),
            "backup": {
                "backup_dir": str(self.backup.backup_dir),
                "retention_days": self.backup.retention_days,
            },
            "debug": self.debug,
            "log_level": self.log_level,
        }


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_environment()

        errors = _config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        _config.setup_logging()

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()


def get_data_dir() -> Path:
    """Get the data directory path."""
    return get_config().data_dir


def is_test() -> bool:
    """Check if running in test environment."""
    return get_config().environment == Environment.TEST


def get_db_file() -> Path:
    """Get the JSON data file path."""
    return get_config().db_file


def is_development() -> bool:
    """Check if running in development environment."""
    return get_config().environment == Environment.DEVELOPMENT


def is_production() -> bool:
    """Check if running in production environment."""
    return get_config().environment == Environment.PRODUCTION
