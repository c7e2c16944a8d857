"""
Tags Package

Normalized tag names shared by transactions.
"""

from .repository import TagRepository, normalize_tag_name, normalize_tag_names

__all__ = ["TagRepository", "normalize_tag_name", "normalize_tag_names"]
