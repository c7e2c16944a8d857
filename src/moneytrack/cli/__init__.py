"""
Command Line Interface Package

Provides the ``moneytrack`` entry point.

Command Structure:
- moneytrack: Main entry point with utility commands (version, config)
- moneytrack accounts: list, add, adjust, delete
- moneytrack tx: add, pay, unpay, delete, invoices
- moneytrack recurrents: list, pay
- moneytrack investments: list, recompute
- moneytrack backup: export, import
- moneytrack alerts: due and overdue reminders
"""
