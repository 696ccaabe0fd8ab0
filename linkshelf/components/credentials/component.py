"""
Credentials component - API key persistence.

Pass-through over the "sync" storage area; no validation happens here.
"""

from __future__ import annotations

from linkshelf.core.ports.storage import KeyValueStorePort

CREDENTIAL_KEY = "apiKey"


class CredentialStore:
    """Holds the API credential in the storage substrate."""

    def __init__(self, storage: KeyValueStorePort) -> None:
        self._storage = storage

    async def get(self) -> str | None:
        result = await self._storage.get([CREDENTIAL_KEY])
        return result.get(CREDENTIAL_KEY) or None

    async def set(self, credential: str) -> None:
        await self._storage.set({CREDENTIAL_KEY: credential})

    async def clear(self) -> None:
        await self._storage.remove([CREDENTIAL_KEY])
