"""
Capture component - Turn the current page into a new link.

Functional core (parse_tag_input, build_draft) plus one shell function
that pulls metadata from the page port and hands the draft to the engine.
"""

from __future__ import annotations

from typing import Protocol

from linkshelf.components.sync.models import CommandResult
from linkshelf.core.ports.page import PageMetadataPort
from linkshelf.domain.entities import LinkDraft, PageMetadata


class LinkCreatorPort(Protocol):
    async def create_link(self, draft: LinkDraft) -> CommandResult:
        ...


def parse_tag_input(raw: str | None) -> list[str]:
    """Split comma-separated user input into tags."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def build_draft(
    metadata: PageMetadata,
    *,
    title: str | None = None,
    description: str | None = None,
    notes: str | None = None,
    tag_input: str | None = None,
) -> LinkDraft:
    """
    Build a LinkDraft from page metadata and user overrides.

    The page title is used unless overridden; an untitled page falls
    back to its URL.
    """
    url = metadata.url.strip()
    chosen_title = (title or metadata.title or "").strip() or url
    chosen_description = description if description is not None else metadata.description
    return LinkDraft(
        url=url,
        title=chosen_title,
        description=chosen_description,
        notes=notes,
        tags=parse_tag_input(tag_input),
    )


async def capture_page(
    provider: PageMetadataPort,
    engine: LinkCreatorPort,
    *,
    title: str | None = None,
    notes: str | None = None,
    tag_input: str | None = None,
) -> CommandResult:
    metadata = await provider.get_page_metadata()
    draft = build_draft(metadata, title=title, notes=notes, tag_input=tag_input)
    return await engine.create_link(draft)
