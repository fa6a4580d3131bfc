"""
Tests for the FastAPI routes.

The engine is built over an httpx.MockTransport serving canned StockTwits
and Yahoo payloads; generation providers are scripted.
"""

import json
import random

import pytest
from fastapi.testclient import TestClient

from app import create_app, normalise_symbol
from hype_engine.config import Settings
from hype_engine.context import EngineContext
from hype_engine.generation.providers import AttemptOutcome, GenerationProvider, ProviderAttempt

from conftest import (
    STOCKTWITS_HOST, YAHOO_HOST, json_response, stocktwits_stream, stocktwits_trending, yahoo_chart,
)


class ScriptedProvider(GenerationProvider):

    def __init__(self, name, outcome, text=None, error=None):
        self.name = name
        self.outcome = outcome
        self.text = text
        self.error = error
        self.calls = 0

    @property
    def provider_id(self):
        return f"scripted:{self.name}"

    async def _call(self, system_text, turns):
        self.calls += 1
        return ProviderAttempt(self.provider_id, self.outcome, text=self.text, error=self.error)


class ExplodingProvider(ScriptedProvider):

    async def _call(self, system_text, turns):
        self.calls += 1
        return 1 / 0


def _market(router, trending=("AAPL", "TSLA")):
    router.add(STOCKTWITS_HOST, "/api/2/trending/symbols.json", json_response(stocktwits_trending(list(trending))))
    router.add(STOCKTWITS_HOST, "/api/2/streams/symbol/AAPL.json", json_response(stocktwits_stream("AAPL", 8, 2)))
    router.add(STOCKTWITS_HOST, "/api/2/streams/symbol/TSLA.json", json_response(stocktwits_stream("TSLA", 20, 5, 5)))
    router.add(YAHOO_HOST, "/v8/finance/chart/", json_response(yahoo_chart(150.0, 148.5)))
    return router


def _client(router, clock, providers=None):
    context = EngineContext.build(
        Settings(),
        client=router.client(),
        providers=providers if providers is not None else [],
        clock=clock,
        rng=random.Random(3),
    )
    return TestClient(create_app(context=context)), context


@pytest.fixture
def api(router, clock):
    client, _ = _client(_market(router), clock)
    return client


class TestIndex:

    def test_root(self, api):
        r = api.get("/")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    def test_health(self, api):
        body = api.get("/health").json()
        assert body["status"] == "healthy"
        assert body["generation_providers"] == []
        assert body["news_configured"] is False
        assert body["scheduler"]["running"] is False

    def test_cors_is_open(self, api):
        r = api.get("/health", headers={"Origin": "https://hypetrader.example"})
        assert r.headers["access-control-allow-origin"] in ("*", "https://hypetrader.example")


class TestSymbol:

    def test_score_payload(self, api):
        r = api.get("/symbol/aapl")
        assert r.status_code == 200
        body = r.json()
        assert body["symbol"] == "AAPL"
        assert 0 <= body["score"] <= 100
        assert body["sentiment_ratio"]["bullish"] == 80
        assert body["sources"] == {"social": "ok", "news": "no_data", "quote": "ok"}
        assert body["price"]["price"] == 150.0
        assert body["timeframe"] == "24h"

    def test_hype_alias(self, api):
        assert api.get("/hype/AAPL").json()["score"] == api.get("/symbol/AAPL").json()["score"]

    def test_timeframe(self, api):
        assert api.get("/symbol/AAPL?timeframe=1h").json()["timeframe"] == "1h"

    def test_bad_timeframe(self, api):
        r = api.get("/symbol/AAPL?timeframe=2d")
        assert r.status_code == 400
        assert "timeframe" in r.json()["error"]

    def test_normalise_symbol(self):
        assert normalise_symbol(" $tsla ") == "TSLA"
        assert normalise_symbol("LON:VOD") == "VOD.L"

    def test_malformed_stream_degrades(self, router, clock):
        router.add(STOCKTWITS_HOST, "/api/2/streams/symbol/ABCD.json",
                   json_response({"response": {"status": 200}, "messages": [None]}))
        router.add(YAHOO_HOST, "/v8/finance/chart/", json_response(yahoo_chart(10.0, 10.0)))
        client, _ = _client(router, clock)

        r = client.get("/symbol/ABCD")

        assert r.status_code == 200
        assert r.json()["sources"]["social"] == "no_data"
        assert r.json()["score"] == 20


class TestTrending:

    def test_ranked(self, api):
        body = api.get("/trending?limit=5").json()
        assert body["count"] == 2
        assert body["source"] == "all"
        assert [t["rank"] for t in body["tickers"]] == [1, 2]
        scores = [t["score"] for t in body["tickers"]]
        assert scores == sorted(scores, reverse=True)
        assert "lastUpdated" in body

    def test_limit_is_clamped(self, api):
        assert api.get("/trending?limit=0").json()["count"] == 1

    def test_source_is_echoed(self, api):
        r = api.get("/trending?source=reddit")
        assert r.status_code == 200
        assert r.json()["source"] == "reddit"

    def test_empty_feed(self, router, clock):
        router.add(STOCKTWITS_HOST, "/", json_response({}, status_code=503))
        client, _ = _client(router, clock)
        assert client.get("/trending").json()["tickers"] == []


class TestSuggest:

    def test_for_ticker(self, api):
        body = api.get("/suggest?ticker=AAPL&risk=aggressive&maxCapital=5000").json()
        assert body["symbol"] == "AAPL"
        assert body["strategy_type"] in ("buy_shares", "watch", "no_trade")
        assert body["disclaimer"]

    def test_top_pick(self, api):
        body = api.get("/suggest").json()
        assert body["symbol"] in ("AAPL", "TSLA")

    def test_invalid_risk(self, api):
        r = api.get("/suggest?ticker=AAPL&risk=yolo")
        assert r.status_code == 422
        assert "error" in r.json()

    def test_nothing_trending(self, router, clock):
        client, _ = _client(router, clock)
        r = client.get("/suggest")
        assert r.status_code == 404
        assert r.json() == {"error": "No trending tickers available right now"}


class TestDailyMoves:

    def test_get(self, api):
        body = api.get("/daily-moves").json()
        assert [s["category"] for s in body["slots"]] == ["best_bet", "defensive", "degen", "donk"]

    def test_post_with_positions(self, api):
        body = api.post("/daily-moves", json={"positions": "100 AAPL at $180"}).json()
        assert body["positions"] == ["AAPL"]
        assert len(body["slots"]) == 4

    def test_post_with_list(self, api):
        body = api.post("/daily-moves", json={"positions": ["tsla", "$aapl"]}).json()
        assert body["positions"] == ["TSLA", "AAPL"]

    def test_post_tolerates_garbage(self, api):
        r = api.post("/daily-moves", content=b"not json", headers={"Content-Type": "application/json"})
        assert r.status_code == 200
        assert r.json()["positions"] == []

    def test_post_tolerates_wrong_shape(self, api):
        r = api.post("/daily-moves", json={"positions": {"AAPL": 100}})
        assert r.status_code == 200


class TestChat:

    MESSAGES = {"messages": [{"role": "user", "content": "What's the move today?"}]}

    def test_streams_answer(self, router, clock):
        providers = [
            ScriptedProvider("a", AttemptOutcome.RATE_LIMITED, error="rate limited"),
            ScriptedProvider("b", AttemptOutcome.SUCCESS, text="Drop your positions.\n\nOr say surprise me."),
        ]
        client, _ = _client(router, clock, providers)

        r = client.post("/chat", json=self.MESSAGES)

        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/plain")
        lines = [line for line in r.text.split("\n") if line]
        assert all(line.startswith("0:") for line in lines)
        assert "".join(json.loads(line[2:]) for line in lines) == "Drop your positions.\n\nOr say surprise me."

    def test_all_rate_limited(self, router, clock):
        providers = [ScriptedProvider(n, AttemptOutcome.RATE_LIMITED, error="quota") for n in "abc"]
        client, _ = _client(router, clock, providers)

        r = client.post("/chat", json=self.MESSAGES)

        assert r.status_code == 429
        assert r.json()["rateLimited"] is True
        assert "error" in r.json()

    def test_hard_failure(self, router, clock):
        providers = [
            ScriptedProvider("a", AttemptOutcome.RATE_LIMITED, error="quota"),
            ScriptedProvider("b", AttemptOutcome.HARD_ERROR, error="API key not valid"),
        ]
        client, _ = _client(router, clock, providers)

        r = client.post("/chat", json=self.MESSAGES)

        assert r.status_code == 500
        assert "API key not valid" in r.json()["error"]

    def test_not_configured(self, router, clock):
        client, _ = _client(router, clock, providers=[])
        r = client.post("/chat", json=self.MESSAGES)
        assert r.status_code == 500
        assert r.json() == {"error": "API key not configured"}

    def test_provider_crash_falls_through(self, router, clock):
        providers = [
            ExplodingProvider("a", AttemptOutcome.SUCCESS),
            ScriptedProvider("b", AttemptOutcome.SUCCESS, text="still here"),
        ]
        client, _ = _client(router, clock, providers)

        r = client.post("/chat", json=self.MESSAGES)

        assert r.status_code == 200
        assert json.loads(r.text.strip()[2:]) == "still here"

    def test_only_provider_crashes(self, router, clock):
        client, _ = _client(router, clock, [ExplodingProvider("a", AttemptOutcome.SUCCESS)])

        r = client.post("/chat", json=self.MESSAGES)

        assert r.status_code == 500
        assert "ZeroDivisionError" in r.json()["error"]

    def test_empty_messages(self, router, clock):
        provider = ScriptedProvider("a", AttemptOutcome.SUCCESS, text="hi")
        client, _ = _client(router, clock, [provider])

        r = client.post("/chat", json={"messages": []})

        assert r.status_code == 400
        assert provider.calls == 0


class TestCacheAdmin:

    def test_clear_by_prefix(self, router, clock):
        client, context = _client(_market(router), clock)
        client.get("/symbol/AAPL")
        client.get("/symbol/TSLA")

        r = client.delete("/cache?prefix=hype:")

        assert r.json() == {"cleared": 2}
        assert "stocktwits:sentiment:AAPL" in context.cache

    def test_clear_all(self, router, clock):
        client, context = _client(_market(router), clock)
        client.get("/symbol/AAPL")
        assert client.delete("/cache").json() == {"cleared": 3}
        assert len(context.cache) == 0
