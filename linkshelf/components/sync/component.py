"""
Sync component - SyncEngine, the canonical link collection.

Shell Layer - owns the only mutable copy of the user's links and talks to
the gateway, credential store and cache. Every change goes through a
command method; everyone else reads immutable snapshots.

Invariants:
- At most one Link per id in the collection
- A list response whose request was superseded is never applied
- A mutation is applied only after the server confirmed it
- A mutation is not applied if its target vanished meanwhile

Concurrency: single event loop. Each collection update reads and
replaces the tuple without awaiting in between, so commands cannot
interleave inside an update.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from linkshelf.core.ports.gateway import (
    AuthError,
    GatewayError,
    LimitReachedError,
    LinkGatewayPort,
)
from linkshelf.domain.entities import Link, LinkDraft, LinkId, LinkPatch, ListFilters

from ._impl import dedupe, merge_update
from .models import (
    CommandResult,
    CommandStatus,
    ReloadOutcome,
    ReloadResult,
    RequestState,
    SyncSnapshot,
)
from .ports import CredentialPort, LinkCachePort

logger = logging.getLogger(__name__)

NO_CREDENTIAL_MESSAGE = "Please add your API key to sync your saved links."


class SyncEngine:
    """
    Single source of truth for the user's links.

    Coordinates the remote gateway, the credential store and the local
    cache. Commands never raise gateway errors; they return results.
    """

    def __init__(
        self,
        gateway: LinkGatewayPort,
        credentials: CredentialPort,
        cache: LinkCachePort,
        *,
        default_filters: ListFilters | None = None,
    ) -> None:
        self._gateway = gateway
        self._credentials = credentials
        self._cache = cache
        self._default_filters = default_filters or ListFilters()

        self._links: tuple[Link, ...] = ()
        self._vocabulary: tuple[str, ...] = ()
        self._generation = 0
        self._pending: int | None = None
        # Mutations confirmed while a list request may have been in flight,
        # keyed by the generation current at confirmation time
        self._recent_creates: list[tuple[int, Link]] = []
        self._recent_deletes: list[tuple[int, LinkId]] = []
        self._recent_updates: list[tuple[int, Link]] = []

        self.stale = False
        self.needs_credential = False

    # --- read side ---

    @property
    def links(self) -> tuple[Link, ...]:
        return self._links

    @property
    def vocabulary(self) -> tuple[str, ...]:
        return self._vocabulary

    @property
    def request_state(self) -> RequestState:
        return "idle" if self._pending is None else "requesting"

    def get(self, link_id: LinkId) -> Link | None:
        return next((link for link in self._links if link.id == link_id), None)

    def snapshot(self) -> SyncSnapshot:
        return SyncSnapshot(
            links=self._links,
            vocabulary=self._vocabulary,
            stale=self.stale,
            needs_credential=self.needs_credential,
            request_state=self.request_state,
        )

    # --- reload ---

    def _is_superseded(self, token: int) -> bool:
        return token != self._generation

    def _discard(self, token: int) -> ReloadResult:
        logger.debug(f"Discarding superseded list request #{token}")
        return ReloadResult(outcome=ReloadOutcome.SUPERSEDED)

    def _finish(self, token: int) -> None:
        if self._pending == token:
            self._pending = None

    async def reload(self, filters: ListFilters | None = None) -> ReloadResult:
        """
        Replace the collection with the server's list.

        Issuing a reload supersedes any reload still in flight; the
        older one's response is discarded whenever it arrives.
        """
        self._generation += 1
        token = self._generation
        self._pending = token
        filters = filters or self._default_filters
        logger.debug(f"Issuing list request #{token} ({filters})")

        credential = await self._credentials.get()
        if self._is_superseded(token):
            return self._discard(token)

        if not credential:
            self.needs_credential = True
            return await self._fallback(token, NO_CREDENTIAL_MESSAGE)

        try:
            links = await self._gateway.list_links(credential, filters)
        except AuthError as e:
            if self._is_superseded(token):
                return self._discard(token)
            logger.warning(f"List request #{token} rejected credential: {e.message}")
            await self._credentials.clear()
            self.needs_credential = True
            return await self._fallback(token, e.message)
        except GatewayError as e:
            if self._is_superseded(token):
                return self._discard(token)
            logger.warning(f"List request #{token} failed, using cached links: {e.message}")
            return await self._fallback(token, e.message)

        if self._is_superseded(token):
            return self._discard(token)

        self._links = self._reconcile(token, links)
        self.stale = False
        self.needs_credential = False
        self._finish(token)
        logger.info(f"Applied list request #{token}: {len(self._links)} links")

        await self._cache.write(self._links)
        await self._refresh_vocabulary(credential, token)
        return ReloadResult(outcome=ReloadOutcome.APPLIED)

    def _reconcile(self, token: int, listed: Iterable[Link]) -> tuple[Link, ...]:
        """
        Apply a list response on top of mutations it may not reflect.

        A create, update or delete confirmed after request `token` was
        issued may be missing from (or still present in) its response.
        """
        deleted = {link_id for gen, link_id in self._recent_deletes if gen >= token}
        links = [link for link in dedupe(listed) if link.id not in deleted]
        listed_ids = {link.id for link in links}
        created = [
            link
            for gen, link in self._recent_creates
            if gen >= token and link.id not in listed_ids and link.id not in deleted
        ]

        self._recent_creates = [entry for entry in self._recent_creates if entry[0] >= token]
        self._recent_deletes = [entry for entry in self._recent_deletes if entry[0] >= token]
        self._recent_updates = [entry for entry in self._recent_updates if entry[0] >= token]

        updated = {link.id: link for gen, link in self._recent_updates if gen >= token}
        merged = [updated.get(link.id, link) for link in [*reversed(created), *links]]
        return dedupe(merged)

    async def _fallback(self, token: int, message: str) -> ReloadResult:
        cached = await self._cache.read()
        if self._is_superseded(token):
            return self._discard(token)

        self._links = dedupe(cached)
        self.stale = True
        self._finish(token)
        return ReloadResult(outcome=ReloadOutcome.FALLBACK, message=message)

    async def _refresh_vocabulary(self, credential: str, token: int) -> None:
        try:
            vocabulary = await self._gateway.get_tag_vocabulary(credential)
        except GatewayError as e:
            logger.warning(f"Could not load tag vocabulary: {e.message}")
            return
        if not self._is_superseded(token):
            self._vocabulary = tuple(vocabulary)

    # --- mutations ---

    def _remember_create(self, link: Link) -> None:
        if self._pending is not None:
            self._recent_creates.append((self._generation, link))

    def _remember_update(self, link: Link) -> None:
        if self._pending is not None:
            self._recent_updates.append((self._generation, link))

    def _remember_deletes(self, link_ids: Iterable[LinkId]) -> None:
        if self._pending is not None:
            self._recent_deletes.extend((self._generation, link_id) for link_id in link_ids)

    async def _require_credential(self) -> str | None:
        credential = await self._credentials.get()
        if not credential:
            self.needs_credential = True
            return None
        return credential

    async def _failure(self, error: GatewayError) -> CommandResult:
        if isinstance(error, AuthError):
            await self._credentials.clear()
            self.needs_credential = True
            return CommandResult(status=CommandStatus.NEEDS_CREDENTIAL, message=error.message)
        return CommandResult.failed(error.message)

    async def create_link(self, draft: LinkDraft) -> CommandResult:
        """Create on the server first, then prepend the returned Link."""
        credential = await self._require_credential()
        if credential is None:
            return CommandResult(status=CommandStatus.NEEDS_CREDENTIAL, message=NO_CREDENTIAL_MESSAGE)

        try:
            link = await self._gateway.create(credential, draft)
        except LimitReachedError as e:
            logger.info(f"Link limit reached: {e.message}")
            return CommandResult(status=CommandStatus.LIMIT_REACHED, message=e.message)
        except GatewayError as e:
            logger.warning(f"Create failed: {e.message}")
            return await self._failure(e)

        # A reload may already have delivered this id
        self._links = (link, *(held for held in self._links if held.id != link.id))
        self._remember_create(link)
        logger.info(f"Created link {link.id}")
        await self._cache.write(self._links)
        return CommandResult.ok("Link saved successfully!", link=link)

    async def update_link(self, link_id: LinkId, patch: LinkPatch) -> CommandResult:
        """Send only changed fields; merge the echo on success."""
        current = self.get(link_id)
        if current is None:
            return CommandResult.failed("Link not found")

        changes = patch.changes_against(current)
        if not changes:
            return CommandResult.ok("No changes to save", link=current)

        credential = await self._require_credential()
        if credential is None:
            return CommandResult(status=CommandStatus.NEEDS_CREDENTIAL, message=NO_CREDENTIAL_MESSAGE)

        try:
            echo = await self._gateway.update(credential, link_id, changes)
        except GatewayError as e:
            logger.warning(f"Update of link {link_id} failed: {e.message}")
            return await self._failure(e)

        held = self.get(link_id)
        if held is None:
            logger.info(f"Link {link_id} was removed while its update was in flight")
            return CommandResult(
                status=CommandStatus.SKIPPED,
                message="Link was deleted before the update completed",
            )

        merged = merge_update(held, changes, echo)
        self._links = tuple(merged if link.id == link_id else link for link in self._links)
        self._remember_update(merged)
        logger.info(f"Updated link {link_id} ({', '.join(sorted(changes))})")
        await self._cache.write(self._links)
        return CommandResult.ok("Link updated successfully!", link=merged)

    async def delete_link(self, link_id: LinkId) -> CommandResult:
        """Remove locally only after the server confirmed (or 404'd)."""
        if self.get(link_id) is None:
            return CommandResult.ok("Link already removed")

        credential = await self._require_credential()
        if credential is None:
            return CommandResult(status=CommandStatus.NEEDS_CREDENTIAL, message=NO_CREDENTIAL_MESSAGE)

        try:
            await self._gateway.delete(credential, link_id)
        except GatewayError as e:
            logger.warning(f"Delete of link {link_id} failed: {e.message}")
            return await self._failure(e)

        self._links = tuple(link for link in self._links if link.id != link_id)
        self._remember_deletes([link_id])
        logger.info(f"Deleted link {link_id}")
        await self._cache.write(self._links)
        return CommandResult.ok("Link deleted successfully!")

    async def bulk_delete(self, link_ids: Sequence[LinkId]) -> CommandResult:
        """All-or-nothing removal of several links."""
        targets: list[LinkId] = []
        for link_id in link_ids:
            if link_id not in targets and self.get(link_id) is not None:
                targets.append(link_id)

        if not targets:
            return CommandResult.ok("No links to delete")

        credential = await self._require_credential()
        if credential is None:
            return CommandResult(status=CommandStatus.NEEDS_CREDENTIAL, message=NO_CREDENTIAL_MESSAGE)

        try:
            await self._gateway.bulk_delete(credential, targets)
        except GatewayError as e:
            logger.warning(f"Bulk delete of {len(targets)} links failed: {e.message}")
            return await self._failure(e)

        removed = set(targets)
        self._links = tuple(link for link in self._links if link.id not in removed)
        self._remember_deletes(targets)
        logger.info(f"Deleted {len(targets)} links")
        await self._cache.write(self._links)
        noun = "link" if len(targets) == 1 else "links"
        return CommandResult.ok(f"Deleted {len(targets)} {noun}")

    # --- credential & account ---

    async def set_credential(self, credential: str) -> CommandResult:
        """Validate with the server, then store."""
        credential = (credential or "").strip()
        if not credential:
            return CommandResult.failed("API key is required")

        try:
            check = await self._gateway.validate_credential(credential)
        except GatewayError as e:
            return CommandResult.failed(e.message)

        if not check.valid:
            return CommandResult.failed("Invalid API key")

        await self._credentials.set(credential)
        self.needs_credential = False
        return CommandResult.ok("API key saved")

    async def clear_credential(self) -> CommandResult:
        await self._credentials.clear()
        self.needs_credential = True
        return CommandResult.ok("API key removed")

    async def rss_feed_url(self) -> CommandResult:
        credential = await self._require_credential()
        if credential is None:
            return CommandResult(status=CommandStatus.NEEDS_CREDENTIAL, message=NO_CREDENTIAL_MESSAGE)
        try:
            url = await self._gateway.get_rss_feed_url(credential)
        except GatewayError as e:
            return await self._failure(e)
        if url is None:
            return CommandResult.failed("No RSS feed is available for this account")
        return CommandResult.ok(url, payload=url)

    async def user_info(self) -> CommandResult:
        credential = await self._require_credential()
        if credential is None:
            return CommandResult(status=CommandStatus.NEEDS_CREDENTIAL, message=NO_CREDENTIAL_MESSAGE)
        try:
            info = await self._gateway.get_user_info(credential)
        except GatewayError as e:
            return await self._failure(e)
        return CommandResult.ok(info.email or "Account loaded", payload=info)
