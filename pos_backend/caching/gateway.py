"""
PATH: caching/gateway.py

CACHE GATEWAY

Purpose:
- Best-effort read-through cache in front of the order store.
- Values are JSON documents (order snapshots, list envelopes).
- Keys are plain strings; invalidate() accepts an exact key or a glob
  pattern ("orders:*").

Backends:
- RedisCacheGateway  -> redis-py client from CACHE_URL (redis:// / rediss://)
- MemoryCacheGateway -> process-local dict (dev + tests)

Hard rules:
- A cache failure must never fail a request. Backend errors are logged
  and swallowed; get() degrades to a miss.
- The store stays authoritative.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import threading
import time
from typing import Any, Optional

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder

logger = logging.getLogger(__name__)

GLOB_CHARS = ("*", "?", "[")


def is_pattern(key: str) -> bool:
    return any(ch in key for ch in GLOB_CHARS)


def _dumps(value: Any) -> str:
    return json.dumps(value, cls=DjangoJSONEncoder)


# =========================================================
# BASE
# =========================================================
class CacheGateway:
    """
    Interface shared by every backend.
    """

    backend_name = "base"

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        raise NotImplementedError

    def invalidate(self, key_or_pattern: str) -> int:
        raise NotImplementedError

    def ping(self) -> bool:
        return True


# =========================================================
# MEMORY
# =========================================================
class MemoryCacheGateway(CacheGateway):
    backend_name = "memory"

    def __init__(self):
        self._entries: dict[str, tuple[float, str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, raw = entry
            if expires_at <= time.monotonic():
                del self._entries[key]
                return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        raw = _dumps(value)
        with self._lock:
            self._entries[key] = (time.monotonic() + int(ttl_seconds), raw)

    def invalidate(self, key_or_pattern: str) -> int:
        with self._lock:
            if not is_pattern(key_or_pattern):
                return 1 if self._entries.pop(key_or_pattern, None) else 0

            doomed = [k for k in self._entries if fnmatch.fnmatchcase(k, key_or_pattern)]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self):
        return len(self._entries)


# =========================================================
# REDIS
# =========================================================
class RedisCacheGateway(CacheGateway):
    """
    redis-py backed gateway.

    Pattern invalidation walks the keyspace with SCAN (never KEYS) and
    deletes in batches.
    """

    backend_name = "redis"
    SCAN_BATCH = 500

    def __init__(self, url: str, *, client=None, socket_timeout: float = 5.0):
        if client is None:
            import redis

            client = redis.Redis.from_url(
                url,
                socket_timeout=socket_timeout,
                socket_connect_timeout=socket_timeout,
                decode_responses=True,
            )
        self._client = client
        self._url = url

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self._client.get(key)
        except Exception as e:
            logger.warning("cache get failed", extra={"key": key, "error": str(e)})
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("cache entry is not valid JSON, dropping", extra={"key": key})
            self.invalidate(key)
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            self._client.setex(key, int(ttl_seconds), _dumps(value))
        except Exception as e:
            logger.warning("cache set failed", extra={"key": key, "error": str(e)})

    def invalidate(self, key_or_pattern: str) -> int:
        try:
            if not is_pattern(key_or_pattern):
                return int(self._client.delete(key_or_pattern) or 0)

            removed = 0
            batch: list[str] = []
            for key in self._client.scan_iter(match=key_or_pattern, count=self.SCAN_BATCH):
                batch.append(key)
                if len(batch) >= self.SCAN_BATCH:
                    removed += int(self._client.delete(*batch) or 0)
                    batch = []
            if batch:
                removed += int(self._client.delete(*batch) or 0)
            return removed
        except Exception as e:
            logger.warning(
                "cache invalidate failed",
                extra={"pattern": key_or_pattern, "error": str(e)},
            )
            return 0

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except Exception as e:
            logger.warning("cache ping failed", extra={"error": str(e)})
            return False


# =========================================================
# FACTORY
# =========================================================
def build_cache_gateway(url: Optional[str] = None) -> CacheGateway:
    url = (url if url is not None else getattr(settings, "CACHE_URL", "")) or ""
    url = url.strip()

    if url.startswith(("redis://", "rediss://", "unix://")):
        logger.info("cache gateway: redis")
        return RedisCacheGateway(url)

    logger.info("cache gateway: memory")
    return MemoryCacheGateway()
