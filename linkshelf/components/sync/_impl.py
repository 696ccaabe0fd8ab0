"""
Sync component - Collection reconciliation helpers.

Functional Core - pure functions over immutable Links, no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from linkshelf.domain.entities import Link, LinkEcho, LinkId


def dedupe(links: Iterable[Link]) -> tuple[Link, ...]:
    """
    Keep the first Link per id.

    Links without an id (local-only) are dropped when a persisted link
    with the same URL exists.
    """
    links = list(links)
    persisted_urls = {link.url for link in links if link.id is not None}
    seen_ids: set[LinkId] = set()
    seen_local_urls: set[str] = set()
    result: list[Link] = []

    for link in links:
        if link.id is not None:
            if link.id in seen_ids:
                continue
            seen_ids.add(link.id)
        else:
            if link.url in persisted_urls or link.url in seen_local_urls:
                continue
            seen_local_urls.add(link.url)
        result.append(link)

    return tuple(result)


def merge_update(held: Link, changes: dict[str, Any], echo: LinkEcho) -> Link:
    """
    Merge a server echo over the held Link.

    The sent changes are applied first, then every field the server
    returned wins, except that url and title never become empty.
    """
    merged = held.model_dump()
    merged.update(changes)

    for name, value in echo.model_dump(exclude_unset=True).items():
        if name in ("url", "title") and not (value or "").strip():
            continue
        if name in ("id", "created_at") and value is None:
            continue
        merged[name] = value

    return Link.model_validate(merged)
