"""
Tags component - Tag vocabulary derivation.

Functional Core - pure, no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable

from linkshelf.domain.entities import Link


def compute(
    collection: Iterable[Link],
    server_vocabulary: Iterable[str] | None = None,
) -> list[str]:
    """
    Union of all link tags and the server vocabulary.

    Tags are compared case-insensitively and reported lowercase. The
    result is sorted so the filter list is stable across reloads.
    """
    seen: set[str] = set()

    for link in collection:
        for tag in link.tags:
            _add(seen, tag)

    for tag in server_vocabulary or ():
        _add(seen, tag)

    return sorted(seen, key=lambda tag: (tag.casefold(), tag))


def _add(seen: set[str], tag: str) -> None:
    cleaned = str(tag).strip().lower()
    if cleaned:
        seen.add(cleaned)
