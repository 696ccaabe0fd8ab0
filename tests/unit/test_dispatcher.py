"""
Unit tests for the command dispatcher.

Each command goes through a full ServiceContext wired to the fake
gateway, and assertions are made on the rendered ViewState frames.
"""

import asyncio

import pytest
from conftest import API_KEY, settle

from linkshelf.adapters.static_page import StaticPageMetadata
from linkshelf.app_shell.dispatcher import (
    BeginEdit,
    BulkDelete,
    CancelEdit,
    CapturePage,
    ChangePage,
    ClearCredential,
    ClearFilters,
    CreateLink,
    DeleteLink,
    EditDraft,
    Reload,
    SaveEdit,
    SetCredential,
    SetFilter,
    SetSort,
    UpdateLink,
)
from linkshelf.components.sync import CommandStatus
from linkshelf.core.ports.gateway import LimitReachedError, RequestError


@pytest.fixture
async def loaded_ctx(test_ctx):
    await test_ctx.dispatcher.dispatch(Reload())
    return test_ctx


class TestReloadAndView:
    async def test_reload_renders_first_page(self, test_ctx, sink, gateway):
        gateway.vocabulary = ["go"]

        result = await test_ctx.dispatcher.dispatch(Reload())

        assert result.status is CommandStatus.OK
        frame = sink.last
        assert [link.id for link in frame.links] == [3, 2]
        assert frame.page_count == 2
        assert frame.total == 3
        assert frame.tags == ("go", "python", "rust", "web")
        assert frame.message is None

    async def test_filter_and_sort(self, loaded_ctx, sink):
        dispatch = loaded_ctx.dispatcher.dispatch

        await dispatch(SetFilter("Python"))
        assert [link.id for link in sink.last.links] == [2, 1]
        assert sink.last.active_filters == ("python",)

        await dispatch(SetSort("oldest"))
        assert [link.id for link in sink.last.links] == [1, 2]

        await dispatch(SetFilter("web"))
        assert [link.id for link in sink.last.links] == [1]

        await dispatch(ClearFilters())
        assert sink.last.total == 3

    async def test_change_page_is_clamped(self, loaded_ctx, sink):
        await loaded_ctx.dispatcher.dispatch(ChangePage(5))

        assert sink.last.page == 2
        assert [link.id for link in sink.last.links] == [1]

    async def test_bad_sort_is_reported(self, loaded_ctx, sink):
        result = await loaded_ctx.dispatcher.dispatch(SetSort("random"))

        assert result.status is CommandStatus.FAILED
        assert sink.last.is_error is True

    async def test_superseded_reload_does_not_render(self, test_ctx, sink, gateway):
        gate = asyncio.Event()
        gateway.list_gates = [gate]

        first = asyncio.create_task(test_ctx.dispatcher.dispatch(Reload()))
        await settle()
        await test_ctx.dispatcher.dispatch(Reload())
        gate.set()
        result = await first

        assert result.status is CommandStatus.SKIPPED
        assert len(sink.frames) == 1

    async def test_reload_without_credential(self, test_ctx, sink):
        await test_ctx.credentials.clear()

        result = await test_ctx.dispatcher.dispatch(Reload())

        assert result.status is CommandStatus.NEEDS_CREDENTIAL
        assert sink.last.needs_credential is True
        assert sink.last.stale is True

    async def test_reload_failure_is_error(self, test_ctx, sink, gateway):
        gateway.failures["list"] = RequestError("Server error", 500)

        result = await test_ctx.dispatcher.dispatch(Reload())

        assert result.message == "Server error"
        assert sink.last.is_error is True
        assert sink.last.stale is True


class TestMutations:
    async def test_create_link(self, loaded_ctx, sink):
        result = await loaded_ctx.dispatcher.dispatch(
            CreateLink(url="https://new.example", title="New", tags="News, AI")
        )

        assert result.status is CommandStatus.OK
        assert sink.last.message == "Link saved successfully!"
        assert sink.last.links[0].tags == ["news", "ai"]
        assert sink.last.total == 4

    async def test_create_invalid_draft(self, loaded_ctx, sink, gateway):
        result = await loaded_ctx.dispatcher.dispatch(CreateLink(url="  ", title="New"))

        assert result.message == "URL is required"
        assert gateway.called("create") == []

    async def test_upgrade_prompt_shown_once(self, loaded_ctx, sink, gateway):
        gateway.failures["create"] = LimitReachedError("Link limit reached")
        command = CreateLink(url="https://new.example", title="New")

        first = await loaded_ctx.dispatcher.dispatch(command)
        first_frame = sink.last
        await loaded_ctx.dispatcher.dispatch(command)

        assert first.status is CommandStatus.LIMIT_REACHED
        assert first_frame.upgrade_prompt is True
        assert first_frame.is_error is True
        assert sink.last.upgrade_prompt is False
        assert sink.last.message == "Link limit reached"

    async def test_update_link(self, loaded_ctx):
        result = await loaded_ctx.dispatcher.dispatch(UpdateLink(1, {"notes": "later"}))

        assert result.success
        assert loaded_ctx.engine.get(1).notes == "later"

    async def test_update_with_invalid_patch(self, loaded_ctx):
        result = await loaded_ctx.dispatcher.dispatch(UpdateLink(1, {"title": ""}))

        assert result.message == "Title is required"

    async def test_delete_and_bulk_delete(self, loaded_ctx, sink):
        dispatch = loaded_ctx.dispatcher.dispatch

        await dispatch(DeleteLink(3))
        assert sink.last.message == "Link deleted successfully!"

        await dispatch(BulkDelete((1, 2)))
        assert sink.last.message == "Deleted 2 links"
        assert sink.last.total == 0

    async def test_capture_page(self, loaded_ctx, sink):
        loaded_ctx.dispatcher.page_provider = StaticPageMetadata(
            url="https://page.example", title="A Page"
        )

        result = await loaded_ctx.dispatcher.dispatch(CapturePage(tags="read"))

        assert result.success
        assert sink.last.links[0].title == "A Page"

    async def test_capture_without_page(self, loaded_ctx):
        result = await loaded_ctx.dispatcher.dispatch(CapturePage())

        assert result.message == "No page to capture"


class TestEditFlow:
    async def test_edit_and_save(self, loaded_ctx, sink):
        dispatch = loaded_ctx.dispatcher.dispatch

        await dispatch(BeginEdit(3))
        assert [s.link_id for s in sink.last.edit_sessions] == [3]

        await dispatch(EditDraft(3, {"title": "Renamed"}))
        result = await dispatch(SaveEdit(3))

        assert result.message == "Link updated successfully!"
        assert sink.last.edit_sessions == ()
        assert sink.last.links[0].title == "Renamed"

    async def test_failed_save_keeps_session(self, loaded_ctx, sink, gateway):
        gateway.failures["update"] = RequestError("Failed to update link", 500)
        dispatch = loaded_ctx.dispatcher.dispatch

        await dispatch(BeginEdit(3))
        await dispatch(EditDraft(3, {"title": "Renamed"}))
        await dispatch(SaveEdit(3))

        (session,) = sink.last.edit_sessions
        assert session.error == "Failed to update link"
        assert session.draft == {"title": "Renamed"}
        assert sink.last.links[0].title == "Link 3"

    async def test_cancel_edit(self, loaded_ctx, sink):
        dispatch = loaded_ctx.dispatcher.dispatch

        await dispatch(BeginEdit(3))
        await dispatch(EditDraft(3, {"title": "Renamed"}))
        result = await dispatch(CancelEdit(3))

        assert result.message == "Edit cancelled"
        assert sink.last.edit_sessions == ()

    async def test_edit_without_session(self, loaded_ctx):
        result = await loaded_ctx.dispatcher.dispatch(EditDraft(3, {"title": "x"}))

        assert result.status is CommandStatus.FAILED
        assert result.message == "No edit in progress for link 3"

    async def test_begin_edit_unknown_link(self, loaded_ctx):
        result = await loaded_ctx.dispatcher.dispatch(BeginEdit(99))

        assert result.message == "Link not found"

    async def test_delete_drops_session(self, loaded_ctx, sink):
        dispatch = loaded_ctx.dispatcher.dispatch

        await dispatch(BeginEdit(3))
        await dispatch(DeleteLink(3))

        assert sink.last.edit_sessions == ()


class TestCredentials:
    async def test_set_credential_then_reload(self, test_ctx, sink):
        await test_ctx.credentials.clear()
        dispatch = test_ctx.dispatcher.dispatch

        bad = await dispatch(SetCredential("wrong"))
        assert bad.message == "Invalid API key"

        good = await dispatch(SetCredential(API_KEY))

        assert good.message == "API key saved"
        assert sink.last.needs_credential is False
        assert sink.last.total == 3
        assert await test_ctx.credentials.get() == API_KEY

    async def test_clear_credential(self, loaded_ctx, sink):
        await loaded_ctx.dispatcher.dispatch(ClearCredential())

        assert sink.last.needs_credential is True
        assert await loaded_ctx.credentials.get() is None

    async def test_unknown_command(self, test_ctx):
        with pytest.raises(TypeError):
            await test_ctx.dispatcher.dispatch(object())
