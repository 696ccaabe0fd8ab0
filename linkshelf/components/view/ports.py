"""
View component - Port interfaces.
"""

from __future__ import annotations

from typing import Protocol

from linkshelf.components.sync.models import CommandResult
from linkshelf.domain.entities import LinkId, LinkPatch


class LinkUpdaterPort(Protocol):
    """The part of SyncEngine an edit session needs to save."""

    async def update_link(self, link_id: LinkId, patch: LinkPatch) -> CommandResult:
        ...
