"""
Feed component - RSS 2.0 rendering of the link collection.

Functional Core - pure string building, no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC
from email.utils import format_datetime
from xml.sax.saxutils import escape

from linkshelf.domain.entities import Link

DEFAULT_TITLE = "Saved Links"
DEFAULT_DESCRIPTION = "Links saved from the web"


def _item(link: Link) -> str:
    lines = [
        "  <item>",
        f"    <title>{escape(link.title)}</title>",
        f"    <link>{escape(link.url)}</link>",
        f"    <description>{escape(link.description or '')}</description>",
    ]
    if link.id is not None:
        lines.append(f'    <guid isPermaLink="false">{escape(str(link.id))}</guid>')
    if link.created_at is not None:
        created = link.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=UTC)
        lines.append(f"    <pubDate>{format_datetime(created.astimezone(UTC), usegmt=True)}</pubDate>")
    lines.extend(f"    <category>{escape(tag)}</category>" for tag in link.tags)
    lines.append("  </item>")
    return "\n".join(lines)


def render_rss(
    links: Iterable[Link],
    *,
    title: str = DEFAULT_TITLE,
    site_url: str = "",
    description: str = DEFAULT_DESCRIPTION,
) -> str:
    """Render links as an RSS 2.0 document, in the order given."""
    items = "\n".join(_item(link) for link in links)
    parts = [
        '<?xml version="1.0" encoding="UTF-8" ?>',
        '<rss version="2.0">',
        "<channel>",
        f"  <title>{escape(title)}</title>",
        f"  <description>{escape(description)}</description>",
        f"  <link>{escape(site_url)}</link>",
    ]
    if items:
        parts.append(items)
    parts.extend(["</channel>", "</rss>"])
    return "\n".join(parts) + "\n"
