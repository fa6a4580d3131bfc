"""
HypeTrader — Daily Moves
──────────────────────────
"What's the move today?": a fixed four-slot slate built from the
current trending set:

    1. BEST BET    score 60-85, accelerating or stable, ≥65% bullish
    2. DEFENSIVE   score 40-60, stable
    3. DEGEN       score ≥80, accelerating
    4. DONK        a joke. Never touches market data.

Each trending ticker lands in at most one pool (checked degen → best bet
→ defensive). An empty pool falls back to the best unused ticker for that
slot: top-ranked for best bet, lowest score for defensive, highest score
for degen. Held positions that are trending strongly get an extra
covered-call idea in ``position_plays``.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from hype_engine.decisions.positions import parse_positions
from hype_engine.decisions.suggester import evaluate
from hype_engine.models.recommendation import (
    OptionsEstimate, PlayCategory, RecommendationSlate, RiskTolerance, SlateSlot, StrategyType,
)
from hype_engine.models.score_payload import Momentum, TrendingEntry
from hype_engine.numeric import round_half_up
from hype_engine.ranking.trending import TrendingRanker
from hype_engine.scoring.aggregator import ScoreAggregator

log = logging.getLogger("hype.decisions.daily")

SLATE_SIZE        = 10
FALLBACK_PRICE    = 100.0

DONK_SUGGESTIONS = [
    "Buy 47 cases of Monster Energy and flip them at a music festival",
    "Acquire a struggling car wash and rename it 'Tendies & Suds'",
    "Corner the market on 1st edition Charizards",
    "Sell your Magic: The Gathering collection (finally)",
    "Invest in a taco truck outside the SEC building",
    "Start a GoFundMe for your trading losses",
    "Buy vintage Air Jordans and hold for the cultural appreciation",
    "Hoard Pokemon cards from Costco like it's a hedge fund strategy",
    "Put it all in a vending machine empire",
    "Become a part-owner of a struggling minor league baseball team",
    "Buy every Beanie Baby on eBay - they're due for a comeback",
    "Start a premium Discord server for 'trading alpha'",
    "Invest in a hot dog cart near Wall Street",
    "Corner the market on vintage Pyrex bowls",
    "Buy a storage unit at auction - what could go wrong?",
]

_EXPIRY = {
    "bullish": {"short": "1-2 weeks out", "medium": "2-3 weeks out", "long": "4-6 weeks out"},
    "bearish": {"short": "1-2 weeks out", "medium": "2-4 weeks out", "long": "4-6 weeks out"},
}


def estimate_options(price: Optional[float], direction: str, timeframe: str = "medium") -> OptionsEstimate:
    """Rough strike/expiry guidance from the current price (100 when unknown)."""
    price = price or FALLBACK_PRICE
    if direction == "bullish":
        return OptionsEstimate(
            direction=direction,
            suggested_strike=f"~${round_half_up(price * 1.05)} (5% OTM)",
            suggested_expiry=_EXPIRY["bullish"].get(timeframe, _EXPIRY["bullish"]["medium"]),
            notes="Slightly OTM calls capture upside while limiting premium cost",
        )
    if direction == "bearish":
        return OptionsEstimate(
            direction=direction,
            suggested_strike=f"~${round_half_up(price * 0.95)} (5% OTM)",
            suggested_expiry=_EXPIRY["bearish"].get(timeframe, _EXPIRY["bearish"]["medium"]),
            notes="OTM puts for hedging or bearish bets",
        )
    return OptionsEstimate(
        direction="neutral",
        suggested_strike=f"~${round_half_up(price * 0.90)} (10% below current)",
        suggested_expiry="4-6 weeks out",
        notes="Collect premium while waiting for a better entry point",
    )


# ── Pools ─────────────────────────────────────────────────────

def _is_degen(e: TrendingEntry) -> bool:
    return e.score >= 80 and e.momentum == Momentum.ACCELERATING


def _is_best_bet(e: TrendingEntry) -> bool:
    return (
        60 <= e.score <= 85
        and e.momentum in (Momentum.ACCELERATING, Momentum.STABLE)
        and e.bullish_percent >= 65
    )


def _is_defensive(e: TrendingEntry) -> bool:
    return 40 <= e.score <= 60 and e.momentum == Momentum.STABLE


POOL_ORDER = [
    (PlayCategory.DEGEN,     _is_degen),
    (PlayCategory.BEST_BET,  _is_best_bet),
    (PlayCategory.DEFENSIVE, _is_defensive),
]


def partition(trending: List[TrendingEntry]) -> Dict[PlayCategory, List[TrendingEntry]]:
    """Disjoint candidate pools. Each entry goes to the first pool it matches."""
    pools: Dict[PlayCategory, List[TrendingEntry]] = {cat: [] for cat, _ in POOL_ORDER}
    for entry in trending:
        for category, predicate in POOL_ORDER:
            if predicate(entry):
                pools[category].append(entry)
                break
    return pools


FALLBACK_ORDER: Dict[PlayCategory, Callable[[List[TrendingEntry]], List[TrendingEntry]]] = {
    PlayCategory.BEST_BET:  lambda t: sorted(t, key=lambda e: e.rank),
    PlayCategory.DEFENSIVE: lambda t: sorted(t, key=lambda e: e.score),
    PlayCategory.DEGEN:     lambda t: sorted(t, key=lambda e: e.score, reverse=True),
}

# ── Slot templates ────────────────────────────────────────────

SLOT_RISK_TOLERANCE = {
    PlayCategory.BEST_BET:  RiskTolerance.MODERATE,
    PlayCategory.DEFENSIVE: RiskTolerance.CONSERVATIVE,
    PlayCategory.DEGEN:     RiskTolerance.AGGRESSIVE,
}


def _play_template(category: PlayCategory, entry: TrendingEntry) -> dict:
    if category == PlayCategory.BEST_BET:
        return {
            "play": "Buy shares OR buy calls (2-3 weeks out, ~5% OTM)",
            "strategy_type": StrategyType.BUY_CALLS,
            "rationale": (
                f"Strong momentum with {entry.bullish_percent}% bullish sentiment. "
                "Social volume is elevated but not overheated."
            ),
            "risk": "Momentum could stall if sentiment shifts",
            "direction": "bullish", "timeframe": "medium",
        }
    if category == PlayCategory.DEFENSIVE:
        return {
            "play": "Sell cash-secured puts (4-6 weeks out, ~10% OTM) OR buy shares with tight stop",
            "strategy_type": StrategyType.SELL_CASH_SECURED_PUTS,
            "rationale": (
                f"Stable sentiment at {entry.bullish_percent}% bullish. "
                "Collect premium or get a discount entry."
            ),
            "risk": "Limited upside, but controlled downside",
            "direction": "neutral", "timeframe": "long",
        }
    return {
        "play": "Buy calls (1-2 weeks out, ATM or slightly OTM)",
        "strategy_type": StrategyType.BUY_CALLS,
        "rationale": (
            f"Maximum hype at {entry.score}/100. Social media is going bonkers. Pure momentum play."
        ),
        "risk": "Could lose it all. This is gambling, not investing.",
        "direction": "bullish", "timeframe": "short",
    }


def _empty_slot(category: PlayCategory) -> SlateSlot:
    return SlateSlot(
        category=category,
        play="No trade",
        strategy_type=StrategyType.NO_TRADE,
        rationale="No trending data available right now. Check back when the feeds recover.",
        risk="None - sitting out",
    )


class DailySlateBuilder:

    def __init__(self, aggregator: ScoreAggregator, ranker: TrendingRanker,
                 rng: Optional[random.Random] = None, slate_size: int = SLATE_SIZE):
        self.aggregator = aggregator
        self.ranker     = ranker
        self._rng       = rng or random.Random()
        self.slate_size = slate_size

    def donk(self) -> SlateSlot:
        return SlateSlot(
            category=PlayCategory.DONK,
            play=self._rng.choice(DONK_SUGGESTIONS),
            strategy_type=StrategyType.NO_TRADE,
            rationale="Not financial advice. Not even advice.",
            risk="Your dignity",
        )

    async def produce_daily_slate(self, positions=None) -> RecommendationSlate:
        held = parse_positions(positions)
        trending = await self.ranker.rank(self.slate_size)
        pools = partition(trending)

        chosen: Dict[PlayCategory, Optional[TrendingEntry]] = {}
        used = set()
        for category in (PlayCategory.BEST_BET, PlayCategory.DEFENSIVE, PlayCategory.DEGEN):
            pick = next((e for e in pools[category] if e.symbol not in used), None)
            chosen[category] = pick
            if pick:
                used.add(pick.symbol)

        for category in (PlayCategory.BEST_BET, PlayCategory.DEFENSIVE, PlayCategory.DEGEN):
            if chosen[category] is not None or not trending:
                continue
            ordered = FALLBACK_ORDER[category](trending)
            pick = next((e for e in ordered if e.symbol not in used), ordered[0])
            chosen[category] = pick
            used.add(pick.symbol)

        slots = []
        for category in (PlayCategory.BEST_BET, PlayCategory.DEFENSIVE, PlayCategory.DEGEN):
            entry = chosen[category]
            slots.append(await self._market_slot(category, entry) if entry else _empty_slot(category))
        slots.append(self.donk())

        position_plays = await self._position_plays(held, trending)
        log.info(
            "Daily slate: " + ", ".join(f"{s.category.value}={s.symbol or '-'}" for s in slots[:3])
            + f" (+{len(position_plays)} position plays)"
        )
        return RecommendationSlate(
            slots=slots,
            position_plays=position_plays,
            positions=held,
            generated_at=datetime.now(timezone.utc).isoformat(),
        )

    async def _market_slot(self, category: PlayCategory, entry: TrendingEntry) -> SlateSlot:
        composite = await self.aggregator.compute_score(entry.symbol)
        template = _play_template(category, entry)
        price = composite.price.price if composite.price else None
        return SlateSlot(
            category=category,
            symbol=entry.symbol,
            play=template["play"],
            strategy_type=template["strategy_type"],
            rationale=template["rationale"],
            risk=template["risk"],
            score_snapshot=composite.to_dict(),
            decision=evaluate(composite, SLOT_RISK_TOLERANCE[category]),
            options=estimate_options(price, template["direction"], template["timeframe"]),
        )

    async def _position_plays(self, held: List[str], trending: List[TrendingEntry]) -> List[SlateSlot]:
        by_symbol = {e.symbol: e for e in trending}
        plays = []
        for symbol in held:
            entry = by_symbol.get(symbol)
            if entry is None or entry.score < 50 or entry.bullish_percent < 60:
                continue
            composite = await self.aggregator.compute_score(symbol)
            price = composite.price.price if composite.price else None
            estimate = estimate_options(price, "bullish", "medium")
            plays.append(SlateSlot(
                category=PlayCategory.BEST_BET,
                symbol=symbol,
                play="Sell covered calls (2-4 weeks out, 5-8% OTM) against your position",
                strategy_type=StrategyType.SELL_COVERED_CALLS,
                rationale=f"You're already holding {symbol}. Generate income by selling calls against it.",
                risk="Caps upside if the stock moons",
                score_snapshot=composite.to_dict(),
                decision=evaluate(composite, RiskTolerance.MODERATE),
                options=OptionsEstimate(
                    direction=estimate.direction,
                    suggested_strike=estimate.suggested_strike,
                    suggested_expiry=estimate.suggested_expiry,
                    notes="Sell calls against your existing shares for income",
                ),
            ))
        return plays
