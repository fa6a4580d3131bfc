"""
HypeTrader — Trending Ranker
──────────────────────────────
Pulls the trending list from the social feed, scores every candidate
with the aggregator and re-ranks by composite score.

Candidates are scored in batches of 5: batches run one after another,
calls inside a batch run concurrently. That keeps the upstream fan-out
bounded: a 30-ticker pass never fires 90 simultaneous requests.
"""

import asyncio
import logging
from typing import List, Optional

from hype_engine.models.score_payload import Momentum, TrendingEntry
from hype_engine.scoring.aggregator import ScoreAggregator
from hype_sources.social import SocialSentimentAdapter

log = logging.getLogger("hype.ranker")

BATCH_SIZE     = 5
MAX_CANDIDATES = 30
MIN_LIMIT      = 1
MAX_LIMIT      = 50


def clamp_limit(limit: int) -> int:
    return max(MIN_LIMIT, min(MAX_LIMIT, int(limit)))


class TrendingRanker:

    def __init__(self, social: SocialSentimentAdapter, aggregator: ScoreAggregator,
                 batch_size: int = BATCH_SIZE):
        self.social      = social
        self.aggregator  = aggregator
        self.batch_size  = max(1, batch_size)

    async def rank(self, limit: int = 10) -> List[TrendingEntry]:
        limit = clamp_limit(limit)
        candidates = await self.social.trending(min(limit * 2, MAX_CANDIDATES))
        if not candidates:
            log.info("No trending candidates available")
            return []

        entries: List[TrendingEntry] = []
        for start in range(0, len(candidates), self.batch_size):
            batch = candidates[start:start + self.batch_size]
            scores = await asyncio.gather(
                *[self.aggregator.compute_score(c.symbol) for c in batch]
            )
            entries.extend(TrendingEntry.from_score(s) for s in scores)

        # list.sort is stable: equal scores keep trending-feed order
        entries.sort(key=lambda e: e.score, reverse=True)
        for i, entry in enumerate(entries, start=1):
            entry.rank = i

        log.info(f"Ranked {len(entries)} candidates, returning top {min(limit, len(entries))}")
        return entries[:limit]

    async def top_pick(self, limit: int = 5) -> Optional[TrendingEntry]:
        """Highest-ranked accelerating ticker, else the top-ranked one."""
        ranked = await self.rank(limit)
        if not ranked:
            return None
        for entry in ranked:
            if entry.momentum == Momentum.ACCELERATING:
                return entry
        return ranked[0]
