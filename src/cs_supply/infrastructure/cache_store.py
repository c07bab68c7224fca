"""Key-value stores backing the result cache.

Each store keeps one opaque payload per key together with the time it was
written. TTL decisions are made by the caller, not the store. Writes are
last-writer-wins; there is no locking.

    FileCacheStore      <dir>/<key>.cache, write time = file mtime (default)
                        file I/O runs in a worker thread
    RedisCacheStore     JSON envelope {"written_at", "payload"} under <key>
    InMemoryCacheStore  process-local dict, clock injectable (tests)
"""

import asyncio
import json
import os
import tempfile
import time
from collections.abc import Awaitable, Callable
from pathlib import Path

import redis.asyncio as aioredis

from src.cs_common.errors import CacheReadError
from src.cs_supply.domain.models import CacheEntry


class FileCacheStore:
    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    def path_for(self, key: str) -> Path:
        return self._dir / f"{key}.cache"

    async def read(self, key: str) -> CacheEntry | None:
        return await asyncio.to_thread(self._read_sync, key)

    async def write(self, key: str, payload: str) -> None:
        await asyncio.to_thread(self._write_sync, key, payload)

    def _read_sync(self, key: str) -> CacheEntry | None:
        path = self.path_for(key)
        try:
            written_at = path.stat().st_mtime
            payload = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise CacheReadError(key, str(exc)) from exc
        return CacheEntry(payload=payload, written_at=written_at)

    def _write_sync(self, key: str, payload: str) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)
        # Write-then-rename so readers never observe a half-written payload
        fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, target)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class RedisCacheStore:
    def __init__(
        self,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]],
        expire_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis_factory = redis_factory
        self._expire_seconds = expire_seconds
        self._clock = clock

    async def read(self, key: str) -> CacheEntry | None:
        redis = await self._redis_factory()
        raw = await redis.get(key)
        if raw is None:
            return None
        try:
            envelope = json.loads(raw)
            return CacheEntry(
                payload=envelope["payload"],
                written_at=float(envelope["written_at"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise CacheReadError(key, f"bad envelope: {exc}") from exc

    async def write(self, key: str, payload: str) -> None:
        redis = await self._redis_factory()
        envelope = json.dumps({"written_at": self._clock(), "payload": payload})
        await redis.set(key, envelope, ex=self._expire_seconds)


class InMemoryCacheStore:
    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    async def read(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    async def write(self, key: str, payload: str) -> None:
        self._entries[key] = CacheEntry(payload=payload, written_at=self._clock())
