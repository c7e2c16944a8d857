#!/usr/bin/env python3
"""
Tag Repository

CRUD over the ``tags`` collection. Names are stored normalized (trimmed and
lowercased) and are unique after normalization.
"""

import logging
import uuid

from ..core.errors import InvariantViolationError, RecordNotFoundError
from ..core.models import Tag
from ..storage.datastore import TAGS, Collection

logger = logging.getLogger(__name__)


def normalize_tag_name(name: str) -> str:
    return name.strip().lower()


def normalize_tag_names(names: list[str]) -> list[str]:
    """Normalized names in first-seen order, without duplicates or blanks."""
    resolved: list[str] = []
    for name in names:
        normalized = normalize_tag_name(name)
        if normalized and normalized not in resolved:
            resolved.append(normalized)
    return resolved


class TagRepository:
    """Owns tags and their in-memory cache."""

    def __init__(self, tags: Collection):
        self._tags = tags
        self.tags: list[Tag] = []

    async def load_tags(self) -> list[Tag]:
        self.tags = [Tag.from_dict(record) for record in await self._tags.list()]
        return self.tags

    def find_by_name(self, name: str) -> Tag | None:
        normalized = normalize_tag_name(name)
        for tag in self.tags:
            if tag.name == normalized:
                return tag
        return None

    async def create_tag(self, name: str) -> Tag:
        """
        Store a new tag under its normalized name.

        Raises:
            ValueError: If the name is blank
            InvariantViolationError: If a tag with the same normalized name exists
        """
        normalized = normalize_tag_name(name)
        if not normalized:
            raise ValueError("Tag name cannot be blank")
        if self.find_by_name(normalized) is not None:
            raise InvariantViolationError(f"Tag already exists: {normalized}")

        created = Tag.from_dict(await self._tags.create({"id": str(uuid.uuid4()), "name": normalized}))
        self.tags.append(created)
        logger.info(f"Created tag {created.name!r}")
        return created

    async def ensure_tag(self, name: str) -> Tag:
        """Existing tag with this normalized name, created when missing."""
        existing = self.find_by_name(name)
        if existing is not None:
            return existing
        return await self.create_tag(name)

    async def ensure_tags(self, names: list[str]) -> list[str]:
        """Normalized, de-duplicated names, each backed by a stored tag."""
        resolved = normalize_tag_names(names)
        for name in resolved:
            await self.ensure_tag(name)
        return resolved

    async def delete_tag(self, name: str) -> Tag:
        """
        Raises:
            RecordNotFoundError: If no tag has this name
        """
        tag = self.find_by_name(name)
        if tag is None:
            raise RecordNotFoundError(TAGS, normalize_tag_name(name))
        await self._tags.delete(tag.id)
        self.tags = [t for t in self.tags if t.id != tag.id]
        return tag
