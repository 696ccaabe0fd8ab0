"""
Page Metadata Port.

Supplies url/title/description of the page the user wants to capture.
Scraping itself happens outside this package.
"""

from __future__ import annotations

from typing import Protocol

from linkshelf.domain.entities import PageMetadata


class PageMetadataPort(Protocol):
    async def get_page_metadata(self) -> PageMetadata:
        """Return metadata of the current page."""
        ...
