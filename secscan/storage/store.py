"""
SecScan Key-Value Stores

The scanner persists reports through a small async key-value interface
(set with TTL, get, glob keys, delete). Two implementations are provided:

- MemoryStore: in-process, for tests and embedding
- FileStore: one JSON file per key, used by the CLI so reports survive
  between invocations
"""

from __future__ import annotations

import asyncio
import fnmatch
import json
import os
import time
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import quote, unquote


class KeyValueStore(Protocol):
    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None: ...

    async def get(self, key: str) -> Optional[str]: ...

    async def keys(self, pattern: str) -> list[str]: ...

    async def delete(self, key: str) -> int: ...


class MemoryStore:
    """Dictionary-backed store. Expired keys disappear on the next access."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, Optional[float]]] = {}

    def _live(self, key: str) -> bool:
        entry = self._data.get(key)
        if entry is None:
            return False
        expires_at = entry[1]
        if expires_at is not None and expires_at <= time.time():
            del self._data[key]
            return False
        return True

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        expires_at = time.time() + ttl_seconds if ttl_seconds else None
        self._data[key] = (value, expires_at)

    async def get(self, key: str) -> Optional[str]:
        if not self._live(key):
            return None
        return self._data[key][0]

    async def keys(self, pattern: str) -> list[str]:
        return [k for k in list(self._data) if fnmatch.fnmatchcase(k, pattern) and self._live(k)]

    async def delete(self, key: str) -> int:
        if not self._live(key):
            return 0
        del self._data[key]
        return 1

    def ttl(self, key: str) -> Optional[float]:
        """Seconds left before key expires, None for no expiry or no key."""
        if not self._live(key):
            return None
        expires_at = self._data[key][1]
        return None if expires_at is None else expires_at - time.time()


class FileStore:
    """
    Directory-backed store.

    Each key lives in ``<dir>/<quoted key>.json`` as an envelope
    ``{"key": ..., "value": ..., "expires_at": epoch-seconds-or-null}``.
    """

    SUFFIX = ".json"

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / (quote(key, safe="") + self.SUFFIX)

    def _read(self, path: Path) -> Optional[str]:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            envelope = json.loads(text)
            value = envelope["value"]
            expires_at = envelope.get("expires_at")
        except (ValueError, KeyError, TypeError, AttributeError):
            # Damaged envelope: hand back the raw text so callers see a corrupt value
            return text
        if expires_at is not None and expires_at <= time.time():
            path.unlink(missing_ok=True)
            return None
        return value

    def _write(self, key: str, value: str, ttl_seconds: Optional[int]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        envelope = {
            "key": key,
            "value": value,
            "expires_at": time.time() + ttl_seconds if ttl_seconds else None,
        }
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(envelope), encoding="utf-8")
        os.replace(tmp, path)

    def _keys(self, pattern: str) -> list[str]:
        if not self.directory.is_dir():
            return []
        matches = []
        for path in sorted(self.directory.glob("*" + self.SUFFIX)):
            key = unquote(path.name[: -len(self.SUFFIX)])
            if fnmatch.fnmatchcase(key, pattern) and self._read(path) is not None:
                matches.append(key)
        return matches

    def _delete(self, key: str) -> int:
        path = self._path(key)
        if self._read(path) is None:
            return 0
        path.unlink(missing_ok=True)
        return 1

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        await asyncio.to_thread(self._write, key, value, ttl_seconds)

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, self._path(key))

    async def keys(self, pattern: str) -> list[str]:
        return await asyncio.to_thread(self._keys, pattern)

    async def delete(self, key: str) -> int:
        return await asyncio.to_thread(self._delete, key)
