"""
Shared pytest fixtures for the HypeTrader test suite.

Provides:
  - ``clock``: a controllable clock shared by cache and momentum tracker.
  - ``StubSocial`` / ``StubNews`` / ``StubQuote``: adapters with scripted
    readings, so score arithmetic can be tested without HTTP.
  - ``scripted_scores``: makes the aggregator use each reading's
    ``component`` value directly as its 0-100 component score.
  - ``Router``: an ``httpx.MockTransport`` handler keyed by host + path,
    for tests that go through the real adapters.
"""

import json
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from hype_engine.cache.ttl_cache import TTLCache
from hype_engine.models.score_payload import PriceSnapshot, SourceStatus
from hype_engine.ranking.trending import TrendingRanker
from hype_engine.scoring import aggregator as aggregator_module
from hype_engine.scoring.aggregator import ScoreAggregator
from hype_engine.scoring.momentum import MomentumTracker
from hype_sources.social import TrendingCandidate


# ── Clock ─────────────────────────────────────────────────────────────────────

class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ── Scripted adapters ─────────────────────────────────────────────────────────

@dataclass
class SocialReading:
    component:     int
    bullish:       int = 0
    bearish:       int = 0
    mention_count: int = 0


@dataclass
class NewsReading:
    component: int


class _StubSource:
    def __init__(self, readings: Optional[Dict[str, object]] = None,
                 statuses: Optional[Dict[str, SourceStatus]] = None):
        self.readings = readings or {}
        self.statuses = statuses or {}
        self.calls: List[str] = []

    async def fetch_with_status(self, symbol: str) -> Tuple[Optional[object], SourceStatus]:
        self.calls.append(symbol)
        if symbol in self.statuses:
            return None, self.statuses[symbol]
        reading = self.readings.get(symbol)
        if reading is None:
            return None, SourceStatus.NO_DATA
        return reading, SourceStatus.OK


class StubSocial(_StubSource):
    def __init__(self, readings=None, statuses=None, trending_symbols: Optional[List[str]] = None):
        super().__init__(readings, statuses)
        self.trending_symbols = trending_symbols or []
        self.trending_limits: List[int] = []

    async def trending(self, limit: int = 30) -> List[TrendingCandidate]:
        self.trending_limits.append(limit)
        return [TrendingCandidate(symbol=s) for s in self.trending_symbols[:limit]]


class StubNews(_StubSource):
    pass


class StubQuote(_StubSource):
    pass


@pytest.fixture
def scripted_scores(monkeypatch):
    """Component score = reading.component; defaults mirror the real scorers."""
    monkeypatch.setattr(aggregator_module, "social_score", lambda r: r.component if r else 0)
    monkeypatch.setattr(aggregator_module, "news_score", lambda r: r.component if r else 50)


@dataclass
class Pipeline:
    social:     StubSocial
    news:       StubNews
    quote:      StubQuote
    cache:      TTLCache
    momentum:   MomentumTracker
    aggregator: ScoreAggregator
    ranker:     TrendingRanker


def build_pipeline(clock: Callable[[], float], social=None, news=None, quote=None) -> Pipeline:
    social = social or StubSocial()
    news = news or StubNews()
    quote = quote or StubQuote()
    cache = TTLCache(clock=clock)
    momentum = MomentumTracker(clock=clock)
    aggregator = ScoreAggregator(social, news, quote, cache, momentum, clock=clock)
    ranker = TrendingRanker(social, aggregator)
    return Pipeline(social, news, quote, cache, momentum, aggregator, ranker)


def price(value: float) -> PriceSnapshot:
    return PriceSnapshot(price=value, change=0.0, change_percent=0.0)


# ── HTTP stubs ────────────────────────────────────────────────────────────────

class Router:
    """
    ``httpx.MockTransport`` handler. Register responses by host and path
    prefix; unmatched requests get a 404. Every request is recorded.
    """

    def __init__(self):
        self.routes: List[Tuple[str, str, Callable[[httpx.Request], httpx.Response]]] = []
        self.requests: List[httpx.Request] = []

    def add(self, host: str, path_prefix: str, response) -> "Router":
        if callable(response):
            handler = response
        else:
            # fresh Response per request; a consumed one cannot be handed out twice
            handler = lambda request, r=response: httpx.Response(
                r.status_code, headers=r.headers, content=r.content,
            )
        self.routes.append((host, path_prefix, handler))
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for host, prefix, handler in self.routes:
            if request.url.host == host and request.url.path.startswith(prefix):
                return handler(request)
        return httpx.Response(404, json={"error": "not found"})

    def count(self, host: str, path_prefix: str = "/") -> int:
        return sum(
            1 for r in self.requests
            if r.url.host == host and r.url.path.startswith(path_prefix)
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def router() -> Router:
    return Router()


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(),
                          headers={"Content-Type": "application/json"})


def html_response(status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, text="<!DOCTYPE html><html><body>Too busy</body></html>",
                          headers={"Content-Type": "text/html"})


STOCKTWITS_HOST = "api.stocktwits.com"
ALPHAVANTAGE_HOST = "www.alphavantage.co"
YAHOO_HOST = "query1.finance.yahoo.com"
YAHOO_FALLBACK_HOST = "query2.finance.yahoo.com"
GEMINI_HOST = "generativelanguage.googleapis.com"


def stocktwits_stream(symbol: str, bullish: int, bearish: int, untagged: int = 0,
                      watchlist_count: Optional[int] = None) -> dict:
    messages = []
    tags = ["Bullish"] * bullish + ["Bearish"] * bearish + [None] * untagged
    for i, tag in enumerate(tags):
        messages.append({
            "id": 1000 + i,
            "body": f"${symbol} message {i}",
            "created_at": "2024-05-01T14:00:00Z",
            "user": {"username": f"trader{i}", "followers": i},
            "entities": {"sentiment": {"basic": tag} if tag else None},
        })
    symbol_info = {"symbol": symbol}
    if watchlist_count is not None:
        symbol_info["watchlist_count"] = watchlist_count
    return {"response": {"status": 200}, "symbol": symbol_info, "messages": messages}


def stocktwits_trending(symbols: List[str]) -> dict:
    return {
        "response": {"status": 200},
        "symbols": [{"symbol": s, "title": f"{s} Inc", "watchlist_count": 1000} for s in symbols],
    }


def yahoo_chart(price_value: float, prev_close: float, market_state: str = "REGULAR") -> dict:
    return {
        "chart": {
            "result": [{
                "meta": {
                    "regularMarketPrice": price_value,
                    "previousClose": prev_close,
                    "currency": "USD",
                    "marketState": market_state,
                },
            }],
            "error": None,
        }
    }


def gemini_text(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}
