"""
Alerts Package

Due-date and invoice reminders.
"""

from .alerts import AlertBucket, AlertItem, AlertKind, AlertService

__all__ = [
    "AlertBucket",
    "AlertItem",
    "AlertKind",
    "AlertService",
]
