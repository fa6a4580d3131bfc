"""
HypeTrader — Decision Engine
──────────────────────────────
Glue between the score pipeline and the pure decision rules: fetch a
CompositeScore, run it through the rule table, or build the daily slate.
"""

import logging
import random
from typing import Optional

from hype_engine.decisions.daily_moves import DailySlateBuilder
from hype_engine.decisions.suggester import evaluate
from hype_engine.models.recommendation import Recommendation, RecommendationSlate, RiskTolerance
from hype_engine.ranking.trending import TrendingRanker
from hype_engine.scoring.aggregator import ScoreAggregator

log = logging.getLogger("hype.decisions")


class DecisionEngine:

    def __init__(self, aggregator: ScoreAggregator, ranker: TrendingRanker,
                 rng: Optional[random.Random] = None):
        self.aggregator = aggregator
        self.ranker     = ranker
        self.slate      = DailySlateBuilder(aggregator, ranker, rng=rng)

    async def decide(self, symbol: str, risk: RiskTolerance = RiskTolerance.MODERATE,
                     max_capital: Optional[float] = None) -> Recommendation:
        composite = await self.aggregator.compute_score(symbol)
        recommendation = evaluate(composite, risk, max_capital)
        log.info(f"{composite.symbol}: {recommendation.strategy} ({risk.value})")
        return recommendation

    async def top_suggestion(self, risk: RiskTolerance = RiskTolerance.MODERATE,
                             max_capital: Optional[float] = None) -> Optional[Recommendation]:
        """Suggestion for the best trending ticker, or None if nothing is trending."""
        pick = await self.ranker.top_pick()
        if pick is None:
            return None
        return await self.decide(pick.symbol, risk, max_capital)

    async def produce_daily_slate(self, positions=None) -> RecommendationSlate:
        return await self.slate.produce_daily_slate(positions)
