"""
Tests for the daily moves slate.

Tests cover:
- Four slots in fixed order with disjoint pool assignment
- Per-slot strategy type, risk tolerance and options estimate
- Fallbacks when pools are empty, placeholders when nothing trends
- Covered-call ideas for held positions
"""

import random

import pytest

from hype_engine.decisions import DecisionEngine, estimate_options
from hype_engine.decisions.daily_moves import DONK_SUGGESTIONS
from hype_engine.models.recommendation import PlayCategory, StrategyType

from conftest import NewsReading, SocialReading, StubNews, StubQuote, StubSocial, build_pipeline, price

pytestmark = pytest.mark.usefixtures("scripted_scores")


def _engine(clock, social, news, trending, quotes=None, seed=7):
    p = build_pipeline(
        clock,
        social=StubSocial(social, trending_symbols=trending),
        news=StubNews(news),
        quote=StubQuote(quotes or {}),
    )
    return p, DecisionEngine(p.aggregator, p.ranker, rng=random.Random(seed))


@pytest.fixture
def full_slate(clock):
    social = {
        "DEG":  SocialReading(100, bullish=9, bearish=1, mention_count=30),   # 90, accelerating
        "BEST": SocialReading(70, bullish=8, bearish=2, mention_count=20),    # 70, 80% bullish
        "HELD": SocialReading(60, bullish=7, bearish=3, mention_count=15),    # 60, 70% bullish
        "DEF":  SocialReading(50),                                            # 50, 50/50
    }
    news = {"DEG": NewsReading(75), "BEST": NewsReading(70), "HELD": NewsReading(60), "DEF": NewsReading(50)}
    p, engine = _engine(clock, social, news, ["DEF", "HELD", "BEST", "DEG"], quotes={"DEG": price(200.0)})
    p.momentum.observe("DEG", 60)
    return p, engine


class TestDailySlate:

    @pytest.mark.asyncio
    async def test_four_slots_in_order(self, full_slate):
        _, engine = full_slate
        slate = await engine.produce_daily_slate()

        assert [s.category for s in slate.slots] == [
            PlayCategory.BEST_BET, PlayCategory.DEFENSIVE, PlayCategory.DEGEN, PlayCategory.DONK,
        ]
        assert [s.symbol for s in slate.slots] == ["BEST", "DEF", "DEG", None]

    @pytest.mark.asyncio
    async def test_slot_details(self, full_slate):
        _, engine = full_slate
        best, defensive, degen, donk = (await engine.produce_daily_slate()).slots

        assert best.strategy_type == StrategyType.BUY_CALLS
        assert best.decision.strategy == "Buy - Steady Hype"
        assert best.options.suggested_strike == "~$105 (5% OTM)"
        assert best.options.suggested_expiry == "2-3 weeks out"
        assert best.score_snapshot["score"] == 70

        assert defensive.strategy_type == StrategyType.SELL_CASH_SECURED_PUTS
        assert defensive.options.direction == "neutral"
        assert defensive.options.suggested_strike == "~$90 (10% below current)"

        assert degen.strategy_type == StrategyType.BUY_CALLS
        assert degen.score_snapshot["momentum"] == "accelerating"
        assert degen.decision.strategy == "Speculative Buy - Ride the Wave"
        assert degen.options.suggested_strike == "~$210 (5% OTM)"
        assert degen.options.suggested_expiry == "1-2 weeks out"

        assert donk.strategy_type == StrategyType.NO_TRADE
        assert donk.play in DONK_SUGGESTIONS
        assert donk.score_snapshot is None

    @pytest.mark.asyncio
    async def test_donk_is_seeded(self, full_slate):
        _, engine = full_slate
        expected = random.Random(7).choice(DONK_SUGGESTIONS)
        assert (await engine.produce_daily_slate()).slots[3].play == expected

    @pytest.mark.asyncio
    async def test_position_plays_for_strong_holdings(self, full_slate):
        _, engine = full_slate
        slate = await engine.produce_daily_slate("100 HELD at $50, 20 NOPE, some DEF")

        assert slate.positions == ["HELD", "NOPE", "DEF"]
        assert len(slate.slots) == 4
        assert [p.symbol for p in slate.position_plays] == ["HELD"]
        play = slate.position_plays[0]
        assert play.strategy_type == StrategyType.SELL_COVERED_CALLS
        assert play.options.direction == "bullish"

    @pytest.mark.asyncio
    async def test_empty_pools_fall_back_to_unused_entries(self, clock):
        social = {"LOW": SocialReading(0), "LESS": SocialReading(10)}
        news = {"LOW": NewsReading(50), "LESS": NewsReading(50)}
        _, engine = _engine(clock, social, news, ["LOW", "LESS"])

        best, defensive, degen, _ = (await engine.produce_daily_slate()).slots

        assert best.symbol == "LESS"        # top ranked
        assert defensive.symbol == "LOW"    # lowest score still unused
        assert degen.symbol == "LESS"       # nothing unused left, reuse the highest score

    @pytest.mark.asyncio
    async def test_nothing_trending_gives_placeholders(self, clock):
        _, engine = _engine(clock, {}, {}, [])
        slate = await engine.produce_daily_slate()

        assert len(slate.slots) == 4
        for slot in slate.slots[:3]:
            assert slot.symbol is None
            assert slot.strategy_type == StrategyType.NO_TRADE
        assert slate.slots[3].category == PlayCategory.DONK
        assert slate.position_plays == []

    @pytest.mark.asyncio
    async def test_to_dict(self, full_slate):
        _, engine = full_slate
        payload = (await engine.produce_daily_slate(["held"])).to_dict()

        assert [s["category"] for s in payload["slots"]] == ["best_bet", "defensive", "degen", "donk"]
        assert payload["positions"] == ["HELD"]
        assert payload["position_plays"][0]["strategy_type"] == "sell_covered_calls"


class TestEstimateOptions:

    def test_bullish(self):
        est = estimate_options(50.0, "bullish", "long")
        assert est.suggested_strike == "~$53 (5% OTM)"
        assert est.suggested_expiry == "4-6 weeks out"

    def test_bearish(self):
        est = estimate_options(200.0, "bearish", "medium")
        assert est.suggested_strike == "~$190 (5% OTM)"
        assert est.suggested_expiry == "2-4 weeks out"

    def test_unknown_price_uses_100(self):
        assert estimate_options(None, "neutral").suggested_strike == "~$90 (10% below current)"
