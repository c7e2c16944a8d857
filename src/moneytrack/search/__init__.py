"""
Search Package

Accent-insensitive search across transactions, recurrents and positions.
"""

from .search import GlobalSearch, SearchKind, SearchResult, normalize_search_text

__all__ = [
    "GlobalSearch",
    "SearchKind",
    "SearchResult",
    "normalize_search_text",
]
