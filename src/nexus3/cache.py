"""Cache for raw repository metadata responses, keyed by request URL."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from common.logging_utils import extra_context, is_debug_enabled, safe_url

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A stored response body and when it was stored."""

    value: str
    created_at: float = field(default_factory=time.time)

    def is_expired(self, ttl: Optional[float]) -> bool:
        if ttl is None:
            return False
        return time.time() - self.created_at > ttl


class RepositoryInfoCache:
    """Memoizes repository-info responses so each URL is fetched once.

    Concurrent first-time callers for the same key share a single in-flight
    fetch. When ``cache_file`` is given, entries are loaded from it on
    construction and written back after each store.
    """

    def __init__(
        self,
        cache_file: Optional[Union[str, Path]] = None,
        ttl: Optional[float] = None,
    ):
        """Initialize the cache.

        Args:
            cache_file: Optional JSON file persisting entries across processes.
            ttl: Optional time-to-live in seconds; None keeps entries forever.
        """
        self._cache_file = Path(cache_file) if cache_file else None
        self._ttl = ttl
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, Future] = {}
        self._lock = threading.Lock()
        if self._cache_file is not None:
            self._load()

    @property
    def cache_file(self) -> Optional[Path]:
        return self._cache_file

    def get(self, key: str, fetch: Callable[[], str]) -> str:
        """Return the cached value for ``key``, calling ``fetch`` on a miss.

        A failed fetch stores nothing and its exception reaches every caller
        waiting on that key.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not entry.is_expired(self._ttl):
                if is_debug_enabled(logger):
                    logger.debug(
                        "Repository info cache hit",
                        extra=extra_context(event="cache_hit", component="cache", target=safe_url(key)),
                    )
                return entry.value
            pending = self._inflight.get(key)
            owner = pending is None
            if owner:
                pending = Future()
                self._inflight[key] = pending

        if not owner:
            return pending.result()

        try:
            value = fetch()
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(key, None)
            pending.set_exception(exc)
            raise

        with self._lock:
            self._entries[key] = CacheEntry(value, time.time())
            self._inflight.pop(key, None)
        pending.set_result(value)

        if self._cache_file is not None:
            try:
                with self._lock:
                    self._save()
            except OSError as exc:
                logger.warning("Could not write cache file %s: %s", self._cache_file, exc)
        return value

    def invalidate(self, key: str) -> None:
        """Drop a single entry."""
        with self._lock:
            if self._entries.pop(key, None) is not None and self._cache_file is not None:
                self._save()

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()
            if self._cache_file is not None:
                self._save()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[arg-type]
            return entry is not None and not entry.is_expired(self._ttl)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _load(self) -> None:
        """Read persisted entries; an unreadable file leaves the cache empty."""
        assert self._cache_file is not None
        if not self._cache_file.exists():
            return
        try:
            with open(self._cache_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", self._cache_file, exc)
            return
        if not isinstance(data, dict):
            logger.warning("Ignoring cache file %s: expected a JSON object", self._cache_file)
            return
        for key, raw in data.items():
            if not isinstance(raw, dict) or not isinstance(raw.get("value"), str):
                logger.debug("Skipping malformed cache entry %s", key)
                continue
            created_at = raw.get("created_at", time.time())
            # bool is an int subclass but never a timestamp
            if isinstance(created_at, bool) or not isinstance(created_at, (int, float)):
                logger.debug("Skipping cache entry %s with bad created_at %r", key, created_at)
                continue
            self._entries[key] = CacheEntry(raw["value"], float(created_at))
        logger.debug("Loaded %d cached repository entries from %s", len(self._entries), self._cache_file)

    def _save(self) -> None:
        """Write all entries atomically. Caller holds the lock."""
        assert self._cache_file is not None
        payload = {
            key: {"value": entry.value, "created_at": entry.created_at}
            for key, entry in self._entries.items()
        }
        self._cache_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self._cache_file.parent), prefix=self._cache_file.name, suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self._cache_file)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
