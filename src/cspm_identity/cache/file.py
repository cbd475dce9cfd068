"""JSON file key-value store.

Keeps the whole cache in one JSON document on disk, which gives the
"persists across reloads of the same client" behaviour without a server.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

from ..exceptions import CacheError
from .ports import IKeyValueStore

logger = logging.getLogger("cspm_identity.cache")


class JsonFileKeyValueStore(IKeyValueStore):
    """File-backed key-value store.

    Writes go to a temporary sibling file that is then renamed over the
    original, so a crash never leaves a half-written document behind.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            data[key] = value
            await asyncio.to_thread(self._write, data)

    async def delete(self, key: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            if key not in data:
                return
            del data[key]
            await asyncio.to_thread(self._write, data)

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise CacheError(f"Cannot read cache file {self._path}: {e}") from e
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheError(f"Corrupt cache file {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise CacheError(f"Corrupt cache file {self._path}: not an object")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, default=str), encoding="utf-8")
            os.replace(tmp, self._path)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Cache file write failed for %s: %s", self._path, e)
            raise CacheError(f"Cannot write cache file {self._path}: {e}") from e
