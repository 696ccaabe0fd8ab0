"""
View component - List view state and per-row edit sessions.

Shell Layer - holds the user's query and edit drafts; never touches the
collection itself. Saving goes through the SyncEngine.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from pydantic import ValidationError

from linkshelf.components.sync.models import CommandResult, CommandStatus
from linkshelf.domain import edit_state
from linkshelf.domain.edit_state import EditSession
from linkshelf.domain.entities import Link, LinkId, SortOrder, describe_validation_error

from ._impl import page_count, project
from .models import DEFAULT_PAGE_SIZE, Projection, ViewQuery
from .ports import LinkUpdaterPort

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("url", "title", "description", "notes", "tags")


class ViewProjection:
    """
    Query state (filters, sort, page) plus edit sessions for one list view.

    Filter and sort changes reset to the first page.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.query = ViewQuery(page_size=page_size)
        self._sessions: dict[LinkId, EditSession] = {}

    # --- query ---

    def set_filter(self, tag: str, active: bool = True) -> ViewQuery:
        tag = tag.strip().lower()
        filters = set(self.query.active_filters)
        if active and tag:
            filters.add(tag)
        else:
            filters.discard(tag)
        self.query = replace(self.query, active_filters=frozenset(filters), page=1)
        return self.query

    def clear_filters(self) -> ViewQuery:
        self.query = replace(self.query, active_filters=frozenset(), page=1)
        return self.query

    def set_sort(self, order: SortOrder) -> ViewQuery:
        if order not in ("newest", "oldest"):
            raise ValueError(f"Unknown sort order: {order}")
        self.query = replace(self.query, sort_order=order, page=1)
        return self.query

    def change_page(self, page: int, total: int) -> ViewQuery:
        """Move to `page`, clamped to the pages `total` links fill."""
        pages = page_count(total, self.query.page_size)
        self.query = replace(self.query, page=min(max(page, 1), pages))
        return self.query

    def project(self, collection: Iterable[Link]) -> Projection:
        projection = project(collection, self.query)
        if projection.page != self.query.page:
            self.query = replace(self.query, page=projection.page)
        return projection

    # --- edit sessions ---

    @property
    def sessions(self) -> tuple[EditSession, ...]:
        return tuple(self._sessions.values())

    def session(self, link_id: LinkId) -> EditSession | None:
        return self._sessions.get(link_id)

    def _require(self, link_id: LinkId) -> EditSession:
        session = self._sessions.get(link_id)
        if session is None:
            raise KeyError(f"No edit in progress for link {link_id}")
        return session

    def begin_edit(self, link: Link) -> EditSession:
        """Enter editing; snapshots the link as it is now."""
        existing = self._sessions.get(link.id) if link.id is not None else None
        if existing is not None:
            return existing
        session = edit_state.begin(link)
        self._sessions[session.link_id] = session
        return session

    def edit_draft(self, link_id: LinkId, **fields: Any) -> EditSession:
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        session = edit_state.with_draft(self._require(link_id), **fields)
        self._sessions[link_id] = session
        return session

    def cancel_edit(self, link_id: LinkId) -> Link:
        """Discard the draft and return the original snapshot verbatim."""
        session = self._require(link_id)
        edit_state.transition(session, "viewing")
        del self._sessions[link_id]
        return session.original

    async def save_edit(self, link_id: LinkId, engine: LinkUpdaterPort) -> CommandResult:
        """
        Save the draft through the engine.

        Success closes the session. Failure returns it to editing with
        the draft untouched and the error attached.
        """
        session = self._require(link_id)

        try:
            patch = session.as_patch()
        except ValidationError as e:
            message = describe_validation_error(e)
            self._sessions[link_id] = session.model_copy(update={"error": message})
            return CommandResult.failed(message)

        saving = edit_state.transition(session, "saving")
        self._sessions[link_id] = saving

        result = await engine.update_link(link_id, patch)

        if result.status in (CommandStatus.OK, CommandStatus.SKIPPED):
            edit_state.transition(saving, "viewing")
            self._sessions.pop(link_id, None)
            return result

        logger.info(f"Save of link {link_id} failed, keeping draft: {result.message}")
        self._sessions[link_id] = edit_state.transition(saving, "editing", error=result.message)
        return result

    def prune_sessions(self, existing_ids: Iterable[LinkId]) -> None:
        """Drop sessions whose link is no longer in the collection."""
        keep = set(existing_ids)
        for link_id in [link_id for link_id in self._sessions if link_id not in keep]:
            del self._sessions[link_id]
