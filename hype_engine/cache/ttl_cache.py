"""
HypeTrader — In-memory TTL Cache
──────────────────────────────────
Process-lifetime key → value store with per-entry expiry.
Expired entries are evicted lazily on read; ``purge_expired()`` lets the
background job sweep them as well. Nothing survives a restart.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

log = logging.getLogger("hype.cache")


@dataclass
class CacheEntry:
    value:      Any
    expires_at: float


class TTLCache:
    """
    One instance per pipeline. Keys are namespaced by the owner,
    e.g. ``stocktwits:sentiment:AAPL`` or ``hype:AAPL:24h``.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock   = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock    = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)

    def invalidate(self, prefix: Optional[str] = None) -> int:
        """Drop every key starting with ``prefix`` (everything if None)."""
        with self._lock:
            if prefix is None:
                count = len(self._entries)
                self._entries.clear()
            else:
                doomed = [k for k in self._entries if k.startswith(prefix)]
                for k in doomed:
                    del self._entries[k]
                count = len(doomed)
        log.info(f"Cache invalidated {count} entries (prefix={prefix!r})")
        return count

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            doomed = [k for k, e in self._entries.items() if now >= e.expires_at]
            for k in doomed:
                del self._entries[k]
        if doomed:
            log.debug(f"Purged {len(doomed)} expired cache entries")
        return len(doomed)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
