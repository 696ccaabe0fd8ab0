"""
Sync component - Port interfaces.

SyncEngine depends on these protocols, not on the concrete
CredentialStore / LocalCache classes.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from linkshelf.core.ports.gateway import LinkGatewayPort
from linkshelf.domain.entities import Link


class CredentialPort(Protocol):
    async def get(self) -> str | None:
        ...

    async def set(self, credential: str) -> None:
        ...

    async def clear(self) -> None:
        ...


class LinkCachePort(Protocol):
    async def read(self) -> list[Link]:
        ...

    async def write(self, links: Iterable[Link]) -> None:
        ...


__all__ = ["CredentialPort", "LinkCachePort", "LinkGatewayPort"]
