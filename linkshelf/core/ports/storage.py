"""
Key-Value Storage Port.

Protocol-based interface for the on-device persistence substrate.
Implementations: in-memory (tests), JSON file (CLI).

Invariants:
- Values are JSON-compatible; a read returns a copy, never a live reference
- No transactions: callers must not assume a read reflects a write
  issued by someone else in the same turn
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol


class KeyValueStorePort(Protocol):
    """
    Async key-value store interface.

    Mirrors the browser extension storage areas: `get` returns only the
    requested keys, falling back to `defaults` for keys that are absent.
    """

    async def get(
        self, keys: Sequence[str], defaults: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        Read values for the given keys.

        Args:
            keys: Keys to read
            defaults: Values returned for keys that are not stored

        Returns:
            Dict with one entry per key that is stored or has a default
        """
        ...

    async def set(self, values: Mapping[str, Any]) -> None:
        """Write all given key/value pairs."""
        ...

    async def remove(self, keys: Sequence[str]) -> None:
        """Remove keys. Missing keys are ignored."""
        ...


class StorageError(Exception):
    """Base class for storage errors."""


class StorageCorruptedError(StorageError):
    """Raised when the backing file cannot be decoded."""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        super().__init__(f"Storage at {location} is unreadable: {reason}")
