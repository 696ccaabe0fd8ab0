"""
Command dispatcher.

Translates discrete user intents into SyncEngine / ViewProjection calls
and pushes the resulting ViewState to the render sink. No raw UI events
cross this boundary, and rendering is a pure function of engine + view
state.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from linkshelf.components import tags as tag_index
from linkshelf.components.capture import capture_page, parse_tag_input
from linkshelf.components.sync import (
    CommandResult,
    CommandStatus,
    ReloadOutcome,
    SyncEngine,
)
from linkshelf.components.view import ViewProjection
from linkshelf.core.ports.page import PageMetadataPort
from linkshelf.core.ports.render import RenderSinkPort, ViewState
from linkshelf.domain.entities import (
    LinkDraft,
    LinkId,
    LinkPatch,
    ListFilters,
    SortOrder,
    describe_validation_error,
)

logger = logging.getLogger(__name__)


# --- Commands ---


@dataclass(frozen=True)
class Reload:
    search: str | None = None


@dataclass(frozen=True)
class CreateLink:
    url: str
    title: str
    description: str | None = None
    notes: str | None = None
    tags: str | tuple[str, ...] = ()


@dataclass(frozen=True)
class UpdateLink:
    link_id: LinkId
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteLink:
    link_id: LinkId


@dataclass(frozen=True)
class BulkDelete:
    link_ids: tuple[LinkId, ...]


@dataclass(frozen=True)
class SetCredential:
    credential: str


@dataclass(frozen=True)
class ClearCredential:
    pass


@dataclass(frozen=True)
class SetFilter:
    tag: str
    active: bool = True


@dataclass(frozen=True)
class ClearFilters:
    pass


@dataclass(frozen=True)
class SetSort:
    order: SortOrder


@dataclass(frozen=True)
class ChangePage:
    page: int


@dataclass(frozen=True)
class BeginEdit:
    link_id: LinkId


@dataclass(frozen=True)
class EditDraft:
    link_id: LinkId
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SaveEdit:
    link_id: LinkId


@dataclass(frozen=True)
class CancelEdit:
    link_id: LinkId


@dataclass(frozen=True)
class CapturePage:
    title: str | None = None
    notes: str | None = None
    tags: str | None = None


Command = (
    Reload
    | CreateLink
    | UpdateLink
    | DeleteLink
    | BulkDelete
    | SetCredential
    | ClearCredential
    | SetFilter
    | ClearFilters
    | SetSort
    | ChangePage
    | BeginEdit
    | EditDraft
    | SaveEdit
    | CancelEdit
    | CapturePage
)


class Dispatcher:
    """
    Routes commands and renders after each one.

    The upgrade prompt for LIMIT_REACHED is shown once per dispatcher;
    later limit hits only show the message.
    """

    def __init__(
        self,
        engine: SyncEngine,
        view: ViewProjection,
        sink: RenderSinkPort,
        *,
        page_provider: PageMetadataPort | None = None,
        fetch_page_size: int = 500,
    ) -> None:
        self.engine = engine
        self.view = view
        self.sink = sink
        self.page_provider = page_provider
        self._fetch_page_size = fetch_page_size

        self._message: str | None = None
        self._is_error = False
        self._upgrade_prompt = False
        self._upgrade_prompt_shown = False

        self._handlers: dict[type, Callable[[Any], Awaitable[CommandResult]]] = {
            Reload: self._reload,
            CreateLink: self._create,
            UpdateLink: self._update,
            DeleteLink: self._delete,
            BulkDelete: self._bulk_delete,
            SetCredential: self._set_credential,
            ClearCredential: self._clear_credential,
            SetFilter: self._set_filter,
            ClearFilters: self._clear_filters,
            SetSort: self._set_sort,
            ChangePage: self._change_page,
            BeginEdit: self._begin_edit,
            EditDraft: self._edit_draft,
            SaveEdit: self._save_edit,
            CancelEdit: self._cancel_edit,
            CapturePage: self._capture,
        }

    async def dispatch(self, command: Command, *, render: bool = True) -> CommandResult:
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unknown command: {type(command).__name__}")

        try:
            result = await handler(command)
        except ValidationError as e:
            result = CommandResult.failed(describe_validation_error(e))
        except (KeyError, ValueError) as e:
            # Edit-session misuse and bad view arguments
            result = CommandResult.failed(str(e.args[0]) if e.args else type(e).__name__)

        if result.status is CommandStatus.SKIPPED and not result.message:
            # Superseded reload: the newer request owns the display
            return result

        self._note(result)
        if render:
            self.render()
        return result

    def _note(self, result: CommandResult) -> None:
        self._message = result.message or None
        self._is_error = not result.success

        if result.status is CommandStatus.LIMIT_REACHED and not self._upgrade_prompt_shown:
            self._upgrade_prompt = True
            self._upgrade_prompt_shown = True

    def view_state(self) -> ViewState:
        snapshot = self.engine.snapshot()
        projection = self.view.project(snapshot.links)
        return ViewState(
            links=projection.links,
            tags=tuple(tag_index.compute(snapshot.links, snapshot.vocabulary)),
            active_filters=tuple(sorted(self.view.query.active_filters)),
            sort_order=self.view.query.sort_order,
            page=projection.page,
            page_count=projection.page_count,
            total=projection.total,
            message=self._message,
            is_error=self._is_error,
            upgrade_prompt=self._upgrade_prompt,
            needs_credential=snapshot.needs_credential,
            stale=snapshot.stale,
            edit_sessions=self.view.sessions,
        )

    def show(self, result: CommandResult) -> ViewState:
        """Render with `result` as the message of record."""
        self._note(result)
        return self.render()

    def render(self) -> ViewState:
        state = self.view_state()
        self.sink.render(state)
        self._upgrade_prompt = False
        return state

    # --- sync commands ---

    async def _reload(self, command: Reload) -> CommandResult:
        filters = ListFilters(page_size=self._fetch_page_size, search=command.search)
        outcome = await self.engine.reload(filters)

        if outcome.outcome is ReloadOutcome.SUPERSEDED:
            return CommandResult(status=CommandStatus.SKIPPED, message="")

        self.view.prune_sessions(link.id for link in self.engine.links)
        if outcome.applied:
            return CommandResult.ok("")
        if self.engine.needs_credential:
            return CommandResult(
                status=CommandStatus.NEEDS_CREDENTIAL, message=outcome.message or ""
            )
        return CommandResult.failed(outcome.message or "Failed to load links")

    async def _create(self, command: CreateLink) -> CommandResult:
        tags = (
            parse_tag_input(command.tags) if isinstance(command.tags, str) else list(command.tags)
        )
        draft = LinkDraft(
            url=command.url,
            title=command.title,
            description=command.description,
            notes=command.notes,
            tags=tags,
        )
        return await self.engine.create_link(draft)

    async def _update(self, command: UpdateLink) -> CommandResult:
        return await self.engine.update_link(command.link_id, LinkPatch(**command.changes))

    async def _delete(self, command: DeleteLink) -> CommandResult:
        result = await self.engine.delete_link(command.link_id)
        self.view.prune_sessions(link.id for link in self.engine.links)
        return result

    async def _bulk_delete(self, command: BulkDelete) -> CommandResult:
        result = await self.engine.bulk_delete(command.link_ids)
        self.view.prune_sessions(link.id for link in self.engine.links)
        return result

    async def _set_credential(self, command: SetCredential) -> CommandResult:
        result = await self.engine.set_credential(command.credential)
        if result.success:
            await self._reload(Reload())
        return result

    async def _clear_credential(self, command: ClearCredential) -> CommandResult:
        return await self.engine.clear_credential()

    async def _capture(self, command: CapturePage) -> CommandResult:
        if self.page_provider is None:
            return CommandResult.failed("No page to capture")
        return await capture_page(
            self.page_provider,
            self.engine,
            title=command.title,
            notes=command.notes,
            tag_input=command.tags,
        )

    # --- view commands ---

    async def _set_filter(self, command: SetFilter) -> CommandResult:
        self.view.set_filter(command.tag, command.active)
        return CommandResult.ok("")

    async def _clear_filters(self, command: ClearFilters) -> CommandResult:
        self.view.clear_filters()
        return CommandResult.ok("")

    async def _set_sort(self, command: SetSort) -> CommandResult:
        self.view.set_sort(command.order)
        return CommandResult.ok("")

    async def _change_page(self, command: ChangePage) -> CommandResult:
        total = self.view.project(self.engine.links).total
        self.view.change_page(command.page, total)
        return CommandResult.ok("")

    async def _begin_edit(self, command: BeginEdit) -> CommandResult:
        link = self.engine.get(command.link_id)
        if link is None:
            return CommandResult.failed("Link not found")
        self.view.begin_edit(link)
        return CommandResult.ok("")

    async def _edit_draft(self, command: EditDraft) -> CommandResult:
        self.view.edit_draft(command.link_id, **command.changes)
        return CommandResult.ok("")

    async def _save_edit(self, command: SaveEdit) -> CommandResult:
        return await self.view.save_edit(command.link_id, self.engine)

    async def _cancel_edit(self, command: CancelEdit) -> CommandResult:
        self.view.cancel_edit(command.link_id)
        return CommandResult.ok("Edit cancelled")
