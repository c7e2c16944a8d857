#!/usr/bin/env python3
"""
Error Types

Every failure the core raises deliberately derives from ``MoneyTrackError`` and
carries enough context (collection, record id, violation list) to be shown to
the user as-is. Storage-layer errors (OSError, JSONDecodeError) are not wrapped.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import AccountDeletionSummary

MAX_LISTED_VIOLATIONS = 10


class MoneyTrackError(Exception):
    """Base class for errors raised by moneytrack."""

    pass


class RecordNotFoundError(MoneyTrackError):
    """Raised when a referenced record does not exist in its collection."""

    def __init__(self, collection: str, record_id: Any):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} record not found: {record_id}")


class InvariantViolationError(MoneyTrackError):
    """Raised when an operation would break a balance or lifecycle rule."""

    pass


class BackupValidationError(MoneyTrackError):
    """
    Raised when a backup is structurally invalid or referentially broken.

    The message lists at most ``MAX_LISTED_VIOLATIONS`` violations followed by a
    count of the rest; the full list is kept on ``errors``.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        preview = "\n".join(self.errors[:MAX_LISTED_VIOLATIONS])
        remaining = len(self.errors) - MAX_LISTED_VIOLATIONS
        suffix = f"\n... and {remaining} more error(s)." if remaining > 0 else ""
        super().__init__(f"Invalid backup:\n{preview}{suffix}")


class CascadeDeleteError(MoneyTrackError):
    """Raised when an account cascade could not remove every dependent record."""

    def __init__(self, account_id: int, summary: "AccountDeletionSummary"):
        self.account_id = account_id
        self.summary = summary
        super().__init__(
            f"accounts record {account_id} was not removed: "
            f"{summary.failed} dependent record(s) could not be deleted"
        )


class SourceLoadError(MoneyTrackError):
    """Raised when every source of a multi-source load failed."""

    def __init__(self, failed_sources: list[str]):
        self.failed_sources = list(failed_sources)
        super().__init__(f"Failed to load sources: {', '.join(self.failed_sources)}")
