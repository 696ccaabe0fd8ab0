"""
Remote Link Gateway Port.

Protocol-based interface for the remote link service plus the error
taxonomy every implementation must raise.

Error taxonomy:
- AuthError: credential missing or rejected by the server
- LimitReachedError: plan ceiling reached (code LINK_LIMIT_REACHED)
- FormatError: payload is not JSON or lacks the expected fields
- RequestError: any other failed request
- NetworkError: transport failure (a RequestError)

Callers never retry automatically; the user action is the retry.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from linkshelf.domain.entities import (
    CredentialCheck,
    Link,
    LinkDraft,
    LinkEcho,
    LinkId,
    ListFilters,
    UserInfo,
)

LINK_LIMIT_REACHED = "LINK_LIMIT_REACHED"


class GatewayError(Exception):
    """Base class for remote service errors."""

    def __init__(
        self, message: str, status: int | None = None, code: str | None = None
    ) -> None:
        self.message = message
        self.status = status
        self.code = code
        super().__init__(message)


class AuthError(GatewayError):
    """Credential missing or rejected."""


class LimitReachedError(GatewayError):
    """Plan or quota ceiling reached. Drives an upgrade prompt."""

    def __init__(self, message: str, status: int | None = 403) -> None:
        super().__init__(message, status=status, code=LINK_LIMIT_REACHED)


class FormatError(GatewayError):
    """Malformed or unexpected server payload."""


class RequestError(GatewayError):
    """Request failed for any other reason."""


class NetworkError(RequestError):
    """Transport-level failure (connection, timeout)."""


class LinkGatewayPort(Protocol):
    """
    Remote link service interface.

    Implementations:
    - HttpLinkGateway: httpx-based client (production)
    - FakeLinkGateway: scripted in-memory gateway (tests)
    """

    async def list_links(self, credential: str, filters: ListFilters) -> list[Link]:
        """List links visible to the credential."""
        ...

    async def create(self, credential: str, draft: LinkDraft) -> Link:
        """
        Create a link.

        Raises:
            LimitReachedError: If the plan does not allow more links
        """
        ...

    async def update(
        self, credential: str, link_id: LinkId, changes: dict[str, Any]
    ) -> LinkEcho:
        """Apply a partial update and return whatever the server echoes."""
        ...

    async def delete(self, credential: str, link_id: LinkId) -> None:
        """Delete a link. Not-found counts as success."""
        ...

    async def bulk_delete(self, credential: str, link_ids: Sequence[LinkId]) -> None:
        """Delete several links; any per-id failure raises one RequestError."""
        ...

    async def get_tag_vocabulary(self, credential: str) -> list[str]:
        """Tags the server knows for this account."""
        ...

    async def validate_credential(self, credential: str) -> CredentialCheck:
        """Check whether the credential is accepted."""
        ...

    async def get_rss_feed_url(self, credential: str) -> str | None:
        """Public RSS feed URL for the account, if one exists."""
        ...

    async def get_user_info(self, credential: str) -> UserInfo:
        """Account information."""
        ...
