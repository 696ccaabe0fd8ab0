"""
View projection - Filter, sort and paginate the collection.

Functional Core - pure functions over immutable inputs.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import UTC, datetime

from linkshelf.domain.entities import Link, SortOrder

from .models import Projection, ViewQuery


def matches_filters(link: Link, active_filters: Iterable[str]) -> bool:
    """AND semantics: the link must carry every active tag."""
    tags = set(link.tags)
    return all(tag.lower() in tags for tag in active_filters)


def matching(collection: Iterable[Link], active_filters: Iterable[str]) -> list[Link]:
    active = [tag.strip().lower() for tag in active_filters if tag.strip()]
    return [link for link in collection if matches_filters(link, active)]


def _timestamp(value: datetime) -> datetime:
    # Naive timestamps are treated as UTC so they compare with aware ones
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def sort_links(links: Iterable[Link], order: SortOrder = "newest") -> list[Link]:
    """
    Sort by created_at, newest or oldest first.

    Links without a timestamp go last in both orders; ties keep their
    collection order.
    """
    links = list(links)
    dated = [link for link in links if link.created_at is not None]
    undated = [link for link in links if link.created_at is None]
    dated.sort(
        key=lambda link: _timestamp(link.created_at),  # type: ignore[arg-type]
        reverse=(order == "newest"),
    )
    return dated + undated


def page_count(total: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError("page_size must be positive")
    return max(1, math.ceil(total / page_size))


def paginate(links: list[Link], page: int, page_size: int) -> list[Link]:
    start = (max(page, 1) - 1) * page_size
    return links[start : start + page_size]


def visible_slice(collection: Iterable[Link], query: ViewQuery) -> list[Link]:
    """Filtered, sorted and paginated slice of the collection."""
    filtered = matching(collection, query.active_filters)
    return paginate(sort_links(filtered, query.sort_order), query.page, query.page_size)


def project(collection: Iterable[Link], query: ViewQuery) -> Projection:
    """Like visible_slice, plus totals; a page past the end is clamped."""
    filtered = sort_links(matching(collection, query.active_filters), query.sort_order)
    pages = page_count(len(filtered), query.page_size)
    page = min(max(query.page, 1), pages)
    return Projection(
        links=tuple(paginate(filtered, page, query.page_size)),
        total=len(filtered),
        page=page,
        page_count=pages,
    )
