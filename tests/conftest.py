"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import tempfile
from pathlib import Path
from typing import Any

import pytest

from moneytrack.app import FinanceApp
from moneytrack.core import config as config_module
from moneytrack.core.json_utils import write_json
from moneytrack.storage.datastore import COLLECTIONS
from moneytrack.storage.json_store import JsonFileStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't use real data
    monkeypatch.setenv("MONEYTRACK_ENV", "test")
    monkeypatch.setenv("MONEYTRACK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("MONEYTRACK_DB_FILE", raising=False)
    monkeypatch.delenv("MONEYTRACK_BACKUP_DIR", raising=False)

    # Every test starts from a freshly loaded configuration
    monkeypatch.setattr(config_module, "_config", None)


def write_db(db_file: Path, **collections: list[dict[str, Any]]) -> Path:
    """Write a db.json holding the given collections (the rest empty)."""
    data = {name: [] for name in COLLECTIONS}
    data.update({name: list(items) for name, items in collections.items()})
    write_json(db_file, data)
    return db_file


@pytest.fixture
def db_file(temp_dir) -> Path:
    return temp_dir / "db.json"


@pytest.fixture
def store(db_file) -> JsonFileStore:
    """Empty JSON store in a temporary directory."""
    return JsonFileStore(db_file)


@pytest.fixture
def app(store) -> FinanceApp:
    """Application wired over the empty store."""
    return FinanceApp(store)


@pytest.fixture
def sample_accounts() -> list[dict[str, Any]]:
    """A checking account, a savings account and a credit card."""
    return [
        {"id": 1, "label": "Checking", "bank": "Nubank", "type": "bank", "balance_cents": 10000},
        {"id": 2, "label": "Savings", "type": "bank", "balance_cents": 50000},
        {
            "id": 3,
            "label": "Card",
            "type": "bank",
            "balance_cents": 0,
            "card_closing_day": 28,
            "card_due_day": 3,
        },
    ]


@pytest.fixture
def seeded_app(db_file, sample_accounts) -> FinanceApp:
    """Application over a store holding the sample accounts."""
    write_db(db_file, accounts=sample_accounts)
    return FinanceApp(JsonFileStore(db_file))


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "currency: Tests for currency handling and precision")
    config.addinivalue_line("markers", "ledger: Tests for account balances and history")
    config.addinivalue_line("markers", "investments: Tests for investment replay and cash effects")
    config.addinivalue_line("markers", "backup: Tests for backup export and restore")
