"""
HypeTrader — Source Adapter Base
──────────────────────────────────
All upstream data feeds inherit from SourceAdapter.

Each adapter wraps exactly one HTTP API and owns its own cache
namespace inside the shared TTLCache:

    "<provider>:<kind>:<SYMBOL>[:<params>]"

The fetch() contract:
  - returns a normalised result, or None when there is no data
  - never raises to the caller; failures are logged, not propagated
  - distinguishes "no data" from "rate limited" via fetch_with_status()
  - only successful results are cached

Throttling is recognised by HTTP 429, a provider-specific error message,
or an HTML page where JSON was expected (several providers serve an HTML
error page instead of a clean error when they throttle).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import httpx

from hype_engine.cache.ttl_cache import TTLCache
from hype_engine.errors import NoDataError, RateLimitedError
from hype_engine.models.score_payload import SourceStatus

log = logging.getLogger("hype.sources")

JSON_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
}

RATE_LIMIT_MARKERS = ("rate limit", "quota", "api call frequency", "resource_exhausted", "too many requests")


def looks_like_html(text: Optional[str]) -> bool:
    if not text:
        return False
    head = text.lstrip()[:512].lower()
    return "<!doctype" in head or "<html" in head


def mentions_rate_limit(message: Optional[str]) -> bool:
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in RATE_LIMIT_MARKERS)


class SourceAdapter(ABC):
    """
    Base class for every upstream feed.

    Subclasses must implement:
      - provider: str property  (cache namespace + log label)
      - kind: str property      (what the adapter fetches, e.g. "sentiment")
      - cache_ttl: int property (seconds)
      - _fetch(symbol) -> result, raising NoDataError / RateLimitedError

    fetch() handles caching and error recovery.
    """

    def __init__(self, client: httpx.AsyncClient, cache: TTLCache):
        self._client = client
        self._cache  = cache

    @property
    @abstractmethod
    def provider(self) -> str: ...

    @property
    @abstractmethod
    def kind(self) -> str: ...

    @property
    @abstractmethod
    def cache_ttl(self) -> int: ...

    @abstractmethod
    async def _fetch(self, symbol: str) -> Any: ...

    def cache_key(self, symbol: str) -> str:
        return f"{self.provider}:{self.kind}:{symbol.upper()}"

    async def fetch_with_status(self, symbol: str) -> Tuple[Optional[Any], SourceStatus]:
        symbol = symbol.upper().strip()
        key = self.cache_key(symbol)
        cached = self._cache.get(key)
        if cached is not None:
            return cached, SourceStatus.OK
        try:
            result = await self._fetch(symbol)
        except RateLimitedError as e:
            log.warning(f"{self.provider} throttled for {symbol}: {e.detail or 'rate limited'}")
            return None, SourceStatus.RATE_LIMITED
        except NoDataError as e:
            log.warning(f"{self.provider} no data for {symbol}: {e}")
            return None, SourceStatus.NO_DATA
        except httpx.TimeoutException:
            log.warning(f"{self.provider} timeout for {symbol}")
            return None, SourceStatus.NO_DATA
        except httpx.HTTPError as e:
            log.warning(f"{self.provider} request failed for {symbol}: {e}")
            return None, SourceStatus.NO_DATA
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            log.warning(f"{self.provider} unexpected payload for {symbol}: {e}")
            return None, SourceStatus.NO_DATA
        if result is None:
            return None, SourceStatus.NO_DATA
        self._cache.set(key, result, self.cache_ttl)
        return result, SourceStatus.OK

    async def fetch(self, symbol: str) -> Optional[Any]:
        """Public entry point. Returns cached result if fresh enough."""
        result, _ = await self.fetch_with_status(symbol)
        return result

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                        headers: Optional[Dict[str, str]] = None) -> Any:
        """
        GET and decode JSON. Raises RateLimitedError for throttling signals
        and NoDataError for anything else that isn't a usable JSON body.
        """
        r = await self._client.get(url, params=params, headers=headers or JSON_HEADERS)
        if r.status_code == 429:
            raise RateLimitedError(self.provider, "HTTP 429")
        body = r.text
        if looks_like_html(body):
            raise RateLimitedError(self.provider, f"HTML body (HTTP {r.status_code})")
        if r.status_code != 200:
            raise NoDataError(f"HTTP {r.status_code} from {url[:60]}")
        try:
            return r.json()
        except ValueError:
            raise NoDataError(f"unparseable body from {url[:60]}")
