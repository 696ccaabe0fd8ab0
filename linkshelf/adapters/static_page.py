"""
Static Page Metadata Adapter.

Implements PageMetadataPort with values supplied up front (CLI
arguments, or a scraper running elsewhere).
"""

from __future__ import annotations

from dataclasses import dataclass

from linkshelf.domain.entities import PageMetadata


@dataclass(frozen=True)
class StaticPageMetadata:
    url: str
    title: str = ""
    description: str = ""

    async def get_page_metadata(self) -> PageMetadata:
        return PageMetadata(url=self.url, title=self.title, description=self.description)
