"""
In-Memory Key-Value Storage Adapter.

Implements KeyValueStorePort with a dict. Values are deep-copied on the
way in and out so callers cannot mutate stored state by reference,
matching the serialize/deserialize behaviour of real storage areas.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from typing import Any


class InMemoryKeyValueStore:
    """Dict-backed KeyValueStorePort for tests and ephemeral sessions."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(dict(initial or {}))

    async def get(
        self, keys: Sequence[str], defaults: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        defaults = defaults or {}
        result: dict[str, Any] = {}
        for key in keys:
            if key in self._data:
                result[key] = copy.deepcopy(self._data[key])
            elif key in defaults:
                result[key] = copy.deepcopy(defaults[key])
        return result

    async def set(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self._data[key] = copy.deepcopy(value)

    async def remove(self, keys: Sequence[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def dump(self) -> dict[str, Any]:
        """Snapshot of everything stored (test helper)."""
        return copy.deepcopy(self._data)
