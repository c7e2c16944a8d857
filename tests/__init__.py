"""
Test Suite for moneytrack

Test Structure:
- conftest.py: Shared fixtures (isolated data directory, sample records)
- unit/: Unit tests mirroring src/ package structure
- integration/: CLI workflows and configuration

Test Categories:
- Core utilities (currency, dates, models, config, fan-out)
- Ledger balances and history
- Transactions, installments and invoices
- Recurrents, investments, backups and alerts

Test Data:
All test data is synthetic and written to a per-test temporary data file.
"""
