"""
JSON File Key-Value Storage Adapter.

Implements KeyValueStorePort on top of a single JSON document per
storage area. File I/O runs in a worker thread so the event loop is
never blocked.

Invariants:
- Writes are atomic (temp file + os.replace); a crash never leaves a
  half-written document behind
- A missing file reads as an empty store
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from linkshelf.core.ports.storage import StorageCorruptedError

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore:
    """
    File-backed KeyValueStorePort.

    Example: JsonFileKeyValueStore("~/.linkshelf/local.json")
    """

    def __init__(self, path: str | Path, *, create_dirs: bool = True) -> None:
        self.path = Path(path).expanduser()
        self._lock = asyncio.Lock()

        if create_dirs:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageCorruptedError(str(self.path), str(e)) from e

        if not isinstance(data, dict):
            raise StorageCorruptedError(str(self.path), "top-level value is not an object")
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            # Remove the temp file, keep the previous document intact
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    async def get(
        self, keys: Sequence[str], defaults: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        defaults = defaults or {}
        async with self._lock:
            data = await asyncio.to_thread(self._load)

        result: dict[str, Any] = {}
        for key in keys:
            if key in data:
                result[key] = data[key]
            elif key in defaults:
                result[key] = copy.deepcopy(defaults[key])
        return result

    async def set(self, values: Mapping[str, Any]) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            data.update(values)
            await asyncio.to_thread(self._dump, data)
        logger.debug(f"Stored keys {sorted(values)} in {self.path}")

    async def remove(self, keys: Sequence[str]) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            if not any(key in data for key in keys):
                return
            for key in keys:
                data.pop(key, None)
            await asyncio.to_thread(self._dump, data)


def create_json_storage(
    data_dir: str | Path, area: str
) -> JsonFileKeyValueStore:
    """
    Factory for one storage area ("sync" or "local") under data_dir.

    Returns:
        JsonFileKeyValueStore at {data_dir}/{area}.json
    """
    return JsonFileKeyValueStore(Path(data_dir).expanduser() / f"{area}.json")
