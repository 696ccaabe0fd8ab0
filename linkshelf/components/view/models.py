"""
View component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass

from linkshelf.domain.entities import Link, SortOrder

DEFAULT_PAGE_SIZE = 5


@dataclass(frozen=True)
class ViewQuery:
    """What the list view currently asks for."""

    active_filters: frozenset[str] = frozenset()
    sort_order: SortOrder = "newest"
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class Projection:
    """Result of projecting the collection through a ViewQuery."""

    links: tuple[Link, ...]
    total: int
    page: int
    page_count: int
