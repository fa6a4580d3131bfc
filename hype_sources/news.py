"""
HypeTrader — News Sentiment Adapter (Alpha Vantage)
─────────────────────────────────────────────────────
NEWS_SENTIMENT function, one ticker per call.

Produces:
  NewsSentiment.overall_score   0-100, relevance-weighted mean
  NewsSentiment.articles        top 10 qualifying articles

Free tier: 25 requests/day. When the quota is hit Alpha Vantage still
answers 200, with an "Information" or "Note" key instead of a feed:
that is treated as rate limited, not as neutral news.

Scoring:
  - ticker-specific relevance (0.5 when the ticker isn't tagged)
  - articles below 0.3 relevance are dropped
  - provider score in [-1, 1] rescaled to [0, 100]
  - no qualifying articles → 50 ("no signal, assume neutral")

Setup:
  Set ALPHA_VANTAGE_API_KEY. Without it the adapter reports no data.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from hype_engine.cache.ttl_cache import TTLCache
from hype_engine.cache.ttl_config import TTL
from hype_engine.errors import NoDataError, RateLimitedError
from hype_engine.numeric import round_half_up
from hype_sources.base import SourceAdapter

log = logging.getLogger("hype.sources.news")

ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"
MIN_RELEVANCE     = 0.3
DEFAULT_RELEVANCE = 0.5
NEUTRAL_SCORE     = 50
FEED_LIMIT        = 50
MAX_ARTICLES      = 10


@dataclass(frozen=True)
class NewsArticle:
    title:           str
    url:             str
    source:          str
    published_at:    str
    sentiment_score: int        # 0-100
    sentiment_label: str        # "Bullish" | "Bearish" | "Neutral"
    relevance_score: float


@dataclass(frozen=True)
class NewsSentiment:
    symbol:        str
    overall_score: int
    articles:      List[NewsArticle] = field(default_factory=list)


def _label(score: int) -> str:
    if score >= 60:
        return "Bullish"
    if score <= 40:
        return "Bearish"
    return "Neutral"


def _to_float(value, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class NewsSentimentAdapter(SourceAdapter):
    """Relevance-weighted news sentiment for a ticker."""

    def __init__(self, client: httpx.AsyncClient, cache: TTLCache, api_key: Optional[str] = None):
        super().__init__(client, cache)
        self._api_key = api_key

    @property
    def provider(self) -> str:
        return "alphavantage"

    @property
    def kind(self) -> str:
        return "news"

    @property
    def cache_ttl(self) -> int:
        return TTL["news_sentiment"]

    def cache_key(self, symbol: str) -> str:
        return f"{self.provider}:{self.kind}:{symbol.upper()}:limit={FEED_LIMIT}"

    async def _fetch(self, symbol: str) -> NewsSentiment:
        if not self._api_key:
            raise NoDataError("ALPHA_VANTAGE_API_KEY not set")

        params = {
            "function": "NEWS_SENTIMENT",
            "tickers":  symbol,
            "limit":    FEED_LIMIT,
            "apikey":   self._api_key,
        }
        data = await self._get_json(ALPHA_VANTAGE_URL, params=params)
        if not isinstance(data, dict):
            raise NoDataError("Alpha Vantage body is not an object")

        # Quota / frequency notices come back as 200 with one of these keys
        notice = data.get("Information") or data.get("Note")
        if notice:
            raise RateLimitedError(self.provider, str(notice)[:120])
        if "Error Message" in data:
            raise NoDataError(str(data["Error Message"])[:120])

        feed = data.get("feed") or []
        if not isinstance(feed, list):
            raise NoDataError("Alpha Vantage feed is not a list")
        return score_feed(symbol, feed)


def score_feed(symbol: str, feed: list) -> NewsSentiment:
    """Turn a raw NEWS_SENTIMENT feed into a NewsSentiment."""
    articles = []
    weighted_total = 0.0
    relevance_total = 0.0

    for item in feed:
        if not isinstance(item, dict):
            continue
        ticker_entry = None
        entries = item.get("ticker_sentiment")
        for t in entries if isinstance(entries, list) else []:
            if isinstance(t, dict) and str(t.get("ticker") or "").upper() == symbol:
                ticker_entry = t
                break

        relevance = (
            _to_float(ticker_entry.get("relevance_score"), DEFAULT_RELEVANCE)
            if ticker_entry else DEFAULT_RELEVANCE
        )
        if relevance < MIN_RELEVANCE:
            continue

        if ticker_entry is not None:
            raw = _to_float(ticker_entry.get("ticker_sentiment_score"), 0.0)
        else:
            raw = _to_float(item.get("overall_sentiment_score"), 0.0)
        raw = max(-1.0, min(1.0, raw))

        normalized = round_half_up((raw + 1) * 50)
        articles.append(NewsArticle(
            title=item.get("title", "") or "",
            url=item.get("url", "") or "",
            source=item.get("source", "") or "",
            published_at=item.get("time_published", "") or "",
            sentiment_score=normalized,
            sentiment_label=_label(normalized),
            relevance_score=relevance,
        ))
        weighted_total  += normalized * relevance
        relevance_total += relevance

    overall = round_half_up(weighted_total / relevance_total) if relevance_total > 0 else NEUTRAL_SCORE
    return NewsSentiment(symbol=symbol, overall_score=overall, articles=articles[:MAX_ARTICLES])


def news_score(sentiment: Optional[NewsSentiment]) -> int:
    """News component 0-100. No data → neutral."""
    if sentiment is None:
        return NEUTRAL_SCORE
    return max(0, min(100, sentiment.overall_score))
