"""
Cache component - Last-known link collection.

A dumb mirror of the canonical collection in the "local" storage area.
Last write wins; no merge logic. Read when there is no credential or the
remote service cannot be used.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import ValidationError

from linkshelf.core.ports.storage import KeyValueStorePort
from linkshelf.domain.entities import Link

logger = logging.getLogger(__name__)

CACHE_KEY = "savedLinks"


class LocalCache:
    """Persists the link collection for offline fallback."""

    def __init__(self, storage: KeyValueStorePort) -> None:
        self._storage = storage

    async def read(self) -> list[Link]:
        result = await self._storage.get([CACHE_KEY], {CACHE_KEY: []})
        raw = result.get(CACHE_KEY) or []
        if not isinstance(raw, list):
            logger.warning(f"Ignoring cached links: expected a list, got {type(raw).__name__}")
            return []

        links: list[Link] = []
        for item in raw:
            try:
                links.append(Link.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable cached link: {e.error_count()} error(s)")
        return links

    async def write(self, links: Iterable[Link]) -> None:
        await self._storage.set({CACHE_KEY: [link.to_wire() for link in links]})
