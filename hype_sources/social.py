"""
HypeTrader — Social Sentiment Adapter (StockTwits)
────────────────────────────────────────────────────
Public endpoints, no key required.

  /streams/symbol/{SYMBOL}.json   latest messages for one ticker
  /trending/symbols.json          currently trending tickers

Produces:
  SocialSentiment   bullish/bearish tally over the returned messages
  TrendingCandidate trending ticker list for the ranker

Messages without a "Bullish"/"Bearish" tag count in neither bucket.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from hype_engine.cache.ttl_config import TTL
from hype_engine.errors import NoDataError, RateLimitedError
from hype_engine.numeric import round_half_up
from hype_sources.base import SourceAdapter, mentions_rate_limit

log = logging.getLogger("hype.sources.social")

STOCKTWITS_BASE_URL = "https://api.stocktwits.com/api/2"


@dataclass(frozen=True)
class SocialMessage:
    id:         int
    body:       str
    created_at: str
    sentiment:  Optional[str]       # "bullish" | "bearish" | None
    username:   str = ""
    followers:  int = 0


@dataclass(frozen=True)
class SocialSentiment:
    symbol:          str
    bullish:         int
    bearish:         int
    messages:        List[SocialMessage] = field(default_factory=list)
    watchlist_count: Optional[int] = None

    @property
    def mention_count(self) -> int:
        return len(self.messages)


@dataclass(frozen=True)
class TrendingCandidate:
    symbol:          str
    title:           str = ""
    watchlist_count: int = 0


def _dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _count(value) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _check_envelope(data: dict) -> None:
    """StockTwits wraps errors in a 200-less envelope: {"response": {"status": 4xx}, "errors": [...]}."""
    status = _dict(data.get("response")).get("status")
    if status == 429:
        raise RateLimitedError("stocktwits", "envelope status 429")
    if status != 200:
        errors = data.get("errors") if isinstance(data.get("errors"), list) else []
        message = "; ".join(str(e.get("message", "")) for e in errors if isinstance(e, dict))
        if mentions_rate_limit(message):
            raise RateLimitedError("stocktwits", message)
        raise NoDataError(f"StockTwits envelope status {status}")


class SocialSentimentAdapter(SourceAdapter):
    """Message-stream sentiment for one ticker, plus the trending list."""

    base_url = STOCKTWITS_BASE_URL

    @property
    def provider(self) -> str:
        return "stocktwits"

    @property
    def kind(self) -> str:
        return "sentiment"

    @property
    def cache_ttl(self) -> int:
        return TTL["social_sentiment"]

    async def _fetch(self, symbol: str) -> SocialSentiment:
        data = await self._get_json(f"{self.base_url}/streams/symbol/{symbol}.json")
        if not isinstance(data, dict):
            raise NoDataError("StockTwits stream is not an object")
        _check_envelope(data)

        bullish = 0
        bearish = 0
        messages = []
        raw_messages = data.get("messages") or []
        if not isinstance(raw_messages, list):
            raise NoDataError("StockTwits messages is not a list")
        for msg in raw_messages:
            if not isinstance(msg, dict):
                continue
            basic = _dict(_dict(msg.get("entities")).get("sentiment")).get("basic")
            if basic == "Bullish":
                bullish += 1
            elif basic == "Bearish":
                bearish += 1
            user = _dict(msg.get("user"))
            messages.append(SocialMessage(
                id=msg.get("id", 0),
                body=msg.get("body", "") or "",
                created_at=msg.get("created_at", "") or "",
                sentiment=basic.lower() if basic in ("Bullish", "Bearish") else None,
                username=user.get("username", "") or "",
                followers=_count(user.get("followers")) or 0,
            ))
        if raw_messages and not messages:
            raise NoDataError("StockTwits stream has no usable messages")

        return SocialSentiment(
            symbol=symbol,
            bullish=bullish,
            bearish=bearish,
            messages=messages,
            watchlist_count=_count(_dict(data.get("symbol")).get("watchlist_count")),
        )

    async def trending(self, limit: int = 30) -> List[TrendingCandidate]:
        """Trending tickers, cached for a minute. Empty list on any failure."""
        key = f"{self.provider}:trending"
        cached = self._cache.get(key)
        if cached is None:
            cached = await self._fetch_trending()
            if cached:
                self._cache.set(key, cached, TTL["social_trending"])
        return list(cached[:max(0, limit)]) if cached else []

    async def _fetch_trending(self) -> List[TrendingCandidate]:
        try:
            data = await self._get_json(f"{self.base_url}/trending/symbols.json")
            if not isinstance(data, dict):
                raise NoDataError("StockTwits trending is not an object")
            _check_envelope(data)
        except RateLimitedError as e:
            log.warning(f"StockTwits trending throttled: {e.detail}")
            return []
        except Exception as e:
            log.warning(f"StockTwits trending unavailable: {e}")
            return []

        candidates = []
        seen = set()
        symbols = data.get("symbols")
        for item in symbols if isinstance(symbols, list) else []:
            if not isinstance(item, dict):
                continue
            sym = str(item.get("symbol") or "").upper().strip()
            if not sym or sym in seen:
                continue
            seen.add(sym)
            candidates.append(TrendingCandidate(
                symbol=sym,
                title=item.get("title", "") or "",
                watchlist_count=_count(item.get("watchlist_count")) or 0,
            ))
        return candidates


def social_score(sentiment: Optional[SocialSentiment]) -> int:
    """
    Social component 0-100.

    Volume on a log scale (1 msg ≈ 12, 10 ≈ 42, 30 ≈ 60, capped at 80),
    scaled by how one-sided the tagged messages are, plus a small bonus
    for large watchlists.
    """
    if sentiment is None or sentiment.mention_count == 0:
        return 0

    volume_score = min(80.0, math.log10(sentiment.mention_count + 1) * 40)

    tagged = sentiment.bullish + sentiment.bearish
    bullish_ratio = sentiment.bullish / tagged if tagged > 0 else 0.5

    multiplier = 1.0
    if bullish_ratio > 0.7:
        multiplier = 1 + (bullish_ratio - 0.7) * 0.5      # up to +15%
    elif bullish_ratio < 0.4:
        multiplier = 0.8 + bullish_ratio * 0.5            # bearish penalty

    watchlist_bonus = 0.0
    if sentiment.watchlist_count and sentiment.watchlist_count > 0:
        watchlist_bonus = min(10.0, math.log10(sentiment.watchlist_count) * 3)

    return min(100, round_half_up(volume_score * multiplier + watchlist_bonus))
