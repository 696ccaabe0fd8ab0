from __future__ import annotations

import asyncio
import io
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from linkshelf.adapters.console_renderer import ConsoleRenderSink
from linkshelf.adapters.memory_storage import InMemoryKeyValueStore
from linkshelf.app_shell.config import ClientSettings
from linkshelf.app_shell.context import ServiceContext
from linkshelf.components.credentials import CREDENTIAL_KEY
from linkshelf.core.ports.gateway import GatewayError
from linkshelf.core.ports.render import ViewState
from linkshelf.domain.entities import (
    CredentialCheck,
    Link,
    LinkDraft,
    LinkEcho,
    LinkId,
    ListFilters,
    UserInfo,
)

API_KEY = "key-123"
BASE_TIME = datetime(2025, 1, 1, tzinfo=UTC)


def make_link(link_id: LinkId | None, days: int = 0, **kwargs: Any) -> Link:
    return Link(
        id=link_id,
        url=kwargs.pop("url", f"https://example.com/{link_id}"),
        title=kwargs.pop("title", f"Link {link_id}"),
        created_at=kwargs.pop("created_at", BASE_TIME + timedelta(days=days)),
        **kwargs,
    )


class FakeLinkGateway:
    """
    In-memory LinkGatewayPort backed by a dict of server links.

    `failures` maps an operation name to the GatewayError it raises;
    `list_gates` holds events that successive list calls wait on.
    """

    def __init__(self, links: list[Link] | None = None) -> None:
        self.server: dict[LinkId, Link] = {link.id: link for link in links or []}
        self.vocabulary: list[str] = []
        self.valid_keys = {API_KEY}
        self.next_id = 100
        self.failures: dict[str, GatewayError] = {}
        self.list_gates: list[asyncio.Event] = []
        self.calls: list[tuple[str, Any]] = []

    def _maybe_fail(self, name: str) -> None:
        if name in self.failures:
            raise self.failures[name]

    async def list_links(self, credential: str, filters: ListFilters) -> list[Link]:
        self.calls.append(("list", filters))
        if self.list_gates:
            # Answer with the server state as of the request
            links = list(self.server.values())
            await self.list_gates.pop(0).wait()
        else:
            links = list(self.server.values())
        self._maybe_fail("list")
        return links

    async def create(self, credential: str, draft: LinkDraft) -> Link:
        self.calls.append(("create", draft))
        self._maybe_fail("create")
        link = Link(id=self.next_id, created_at=datetime.now(UTC), **draft.model_dump())
        self.next_id += 1
        self.server[link.id] = link
        return link

    async def update(self, credential: str, link_id: LinkId, changes: dict[str, Any]) -> LinkEcho:
        self.calls.append(("update", (link_id, changes)))
        self._maybe_fail("update")
        current = self.server.get(link_id)
        if current is None:
            return LinkEcho()
        updated = current.model_copy(update=changes)
        self.server[link_id] = updated
        return LinkEcho.model_validate(updated.model_dump())

    async def delete(self, credential: str, link_id: LinkId) -> None:
        self.calls.append(("delete", link_id))
        self._maybe_fail("delete")
        self.server.pop(link_id, None)

    async def bulk_delete(self, credential: str, link_ids: Sequence[LinkId]) -> None:
        self.calls.append(("bulk_delete", list(link_ids)))
        self._maybe_fail("bulk_delete")
        for link_id in link_ids:
            self.server.pop(link_id, None)

    async def get_tag_vocabulary(self, credential: str) -> list[str]:
        self._maybe_fail("tags")
        return list(self.vocabulary)

    async def validate_credential(self, credential: str) -> CredentialCheck:
        self.calls.append(("validate", credential))
        self._maybe_fail("validate")
        return CredentialCheck(valid=credential in self.valid_keys)

    async def get_rss_feed_url(self, credential: str) -> str | None:
        self._maybe_fail("rss")
        return "https://app.example.com/api/rss/tok"

    async def get_user_info(self, credential: str) -> UserInfo:
        self._maybe_fail("user")
        return UserInfo(email="me@example.com", plan="free")

    def called(self, name: str) -> list[Any]:
        return [arg for call, arg in self.calls if call == name]


class RecordingSink:
    """RenderSinkPort that keeps every frame."""

    def __init__(self) -> None:
        self.frames: list[ViewState] = []

    def render(self, state: ViewState) -> None:
        self.frames.append(state)

    @property
    def last(self) -> ViewState:
        return self.frames[-1]


async def settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def settings(tmp_path) -> ClientSettings:
    return ClientSettings(api_base_url="https://app.example.com", page_size=2, data_dir=tmp_path)


@pytest.fixture
def gateway() -> FakeLinkGateway:
    return FakeLinkGateway(
        [
            make_link(1, days=1, tags=["python", "web"]),
            make_link(2, days=2, tags=["python"]),
            make_link(3, days=3, tags=["rust"]),
        ]
    )


@pytest.fixture
def sync_storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore({CREDENTIAL_KEY: API_KEY})


@pytest.fixture
def local_storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def test_ctx(
    settings: ClientSettings,
    gateway: FakeLinkGateway,
    sync_storage: InMemoryKeyValueStore,
    local_storage: InMemoryKeyValueStore,
    sink: RecordingSink,
) -> ServiceContext:
    """
    Full ServiceContext wired to the fake gateway and in-memory storage.
    """
    return ServiceContext.create(
        settings,
        gateway=gateway,
        sync_storage=sync_storage,
        local_storage=local_storage,
        sink=sink,
    )


@pytest.fixture
def console() -> tuple[ConsoleRenderSink, io.StringIO]:
    stream = io.StringIO()
    return ConsoleRenderSink(stream), stream
