"""
HTTP Link Gateway Adapter.

Implements LinkGatewayPort against the link service REST API using an
httpx.AsyncClient. All responses pass through the envelope module before
any field is read, and every failure is classified into the gateway
error taxonomy.

Endpoints:
- GET    /api/extension/links       list
- POST   /api/links                 create
- PATCH  /api/links/{id}            update
- DELETE /api/links/{id}            delete (404 is success)
- DELETE /api/links/batch           bulk delete
- GET    /api/extension/tags        tag vocabulary
- POST   /api/validate-api-key      credential check
- GET    /api/extension/rss-token   RSS token
- GET    /api/extension/user        account info
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from linkshelf.adapters.http import envelope
from linkshelf.core.ports.gateway import (
    LINK_LIMIT_REACHED,
    AuthError,
    FormatError,
    LimitReachedError,
    NetworkError,
    RequestError,
)
from linkshelf.domain.entities import (
    CredentialCheck,
    Link,
    LinkDraft,
    LinkEcho,
    LinkId,
    ListFilters,
    UserInfo,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


class HttpLinkGateway:
    """
    httpx implementation of LinkGatewayPort.

    Pass `client` to reuse a configured AsyncClient (tests inject one
    with a MockTransport or ASGITransport); otherwise one is created
    from base_url and timeout.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpLinkGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- transport helpers ---

    async def _request(
        self,
        method: str,
        path: str,
        credential: str | None,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = {API_KEY_HEADER: credential} if credential else {}
        logger.debug(f"{method} {path} params={params}")
        try:
            return await self._client.request(
                method, f"{self.base_url}{path}", headers=headers, json=json, params=params
            )
        except httpx.TransportError as e:
            raise NetworkError(f"Could not reach link service: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise FormatError(
                f"Expected JSON response but got '{content_type or 'no content type'}'",
                response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise FormatError("Invalid JSON response from server", response.status_code) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, default_message: str) -> None:
        if response.is_success:
            return

        try:
            payload = response.json()
        except ValueError:
            payload = None
        message, code = envelope.error_details(payload)
        status = response.status_code

        if status == 403 and code == LINK_LIMIT_REACHED:
            raise LimitReachedError(message or "Link limit reached", status)
        if status in (401, 403):
            raise AuthError(message or "API key was rejected", status, code)
        raise RequestError(message or default_message, status, code)

    async def _envelope(
        self,
        method: str,
        path: str,
        credential: str | None,
        default_message: str,
        **kwargs: Any,
    ) -> tuple[envelope.Envelope, int]:
        response = await self._request(method, path, credential, **kwargs)
        self._raise_for_status(response, default_message)
        return envelope.decode(self._json(response)), response.status_code

    # --- LinkGatewayPort ---

    async def list_links(self, credential: str, filters: ListFilters) -> list[Link]:
        params: dict[str, Any] = {"page": filters.page, "pageSize": filters.page_size}
        if filters.tags:
            params["tags"] = ",".join(filters.tags)
        if filters.search:
            params["search"] = filters.search

        env, status = await self._envelope(
            "GET", "/api/extension/links", credential, "Failed to load links", params=params
        )
        links: list[Link] = []
        for item in envelope.links_payload(env, status):
            try:
                links.append(Link.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid link in response: {e}")
        return links

    async def create(self, credential: str, draft: LinkDraft) -> Link:
        env, status = await self._envelope(
            "POST", "/api/links", credential, "Failed to save link", json=draft.model_dump()
        )
        body = _link_body(envelope.unwrap(env, status))
        try:
            link = Link.model_validate(body)
        except ValidationError as e:
            raise FormatError(f"Invalid link in response: {e}", status) from e
        if link.id is None:
            raise FormatError("Server did not assign an id to the new link", status)
        return link

    async def update(
        self, credential: str, link_id: LinkId, changes: dict[str, Any]
    ) -> LinkEcho:
        response = await self._request(
            "PATCH", f"/api/links/{link_id}", credential, json=changes
        )
        self._raise_for_status(response, "Failed to update link")
        if response.status_code == 204 or not response.content:
            return LinkEcho()

        env = envelope.decode(self._json(response))
        body = _link_body(envelope.unwrap(env, response.status_code))
        try:
            return LinkEcho.model_validate(body if isinstance(body, dict) else {})
        except ValidationError as e:
            raise FormatError(f"Invalid link in response: {e}", response.status_code) from e

    async def delete(self, credential: str, link_id: LinkId) -> None:
        response = await self._request("DELETE", f"/api/links/{link_id}", credential)
        if response.status_code == 404:
            logger.debug(f"Link {link_id} already gone on server")
            return
        self._raise_for_status(response, "Failed to delete link")
        if response.status_code == 204 or not response.content:
            return
        envelope.unwrap(envelope.decode(self._json(response)), response.status_code)

    async def bulk_delete(self, credential: str, link_ids: Sequence[LinkId]) -> None:
        ids = list(link_ids)
        response = await self._request(
            "DELETE", "/api/links/batch", credential, json={"ids": ids}
        )
        self._raise_for_status(response, "Failed to delete links")
        if response.status_code == 204 or not response.content:
            return

        body = envelope.unwrap(envelope.decode(self._json(response)), response.status_code)
        failed = body.get("failed") if isinstance(body, dict) else None
        if failed:
            raise RequestError(
                f"Failed to delete {len(failed)} of {len(ids)} links",
                response.status_code,
            )

    async def get_tag_vocabulary(self, credential: str) -> list[str]:
        env, status = await self._envelope(
            "GET", "/api/extension/tags", credential, "Failed to get user tags"
        )
        tags = envelope.optional_field(env, "tags", status)
        if tags is None:
            return []
        if not isinstance(tags, list):
            raise FormatError("Field 'tags' is not a list", status)
        return [str(tag) for tag in tags]

    async def validate_credential(self, credential: str) -> CredentialCheck:
        response = await self._request(
            "POST", "/api/validate-api-key", None, json={"apiKey": credential}
        )
        if response.status_code in (401, 403):
            return CredentialCheck(valid=False)
        self._raise_for_status(response, "Failed to validate API key")

        env = envelope.decode(self._json(response))
        valid = envelope.field(env, "valid", response.status_code)
        if not isinstance(valid, bool):
            raise FormatError("Field 'valid' is not a boolean", response.status_code)
        return CredentialCheck(valid=valid)

    async def get_rss_feed_url(self, credential: str) -> str | None:
        env, status = await self._envelope(
            "GET", "/api/extension/rss-token", credential, "Failed to get RSS feed URL"
        )
        token = envelope.optional_field(env, "rssToken", status)
        if not token:
            return None
        return f"{self.base_url}/api/rss/{token}"

    async def get_user_info(self, credential: str) -> UserInfo:
        env, status = await self._envelope(
            "GET", "/api/extension/user", credential, "Failed to get user info"
        )
        body = envelope.unwrap(env, status)
        if not isinstance(body, dict):
            raise FormatError("User info is not an object", status)
        return UserInfo.model_validate(body)


def _link_body(body: Any) -> Any:
    # Some endpoints answer {"link": {...}} instead of the bare object
    if isinstance(body, dict) and isinstance(body.get("link"), dict):
        return body["link"]
    return body
