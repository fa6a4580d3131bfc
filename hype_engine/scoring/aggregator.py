"""
HypeTrader — Score Aggregator
───────────────────────────────
Runs every source adapter in parallel and merges their readings into a
single CompositeScore.

    composite = round(social × 0.6 + news × 0.4), clamped to 0-100

A dead upstream never fails the computation: a missing social reading
counts as 0 (no measured attention), a missing news reading as 50
(neutral). The ``sources`` map on the result records which readings were
real and which were defaults, so "no data" is never mistaken for a
genuine zero.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from hype_engine.cache.ttl_cache import TTLCache
from hype_engine.cache.ttl_config import TTL
from hype_engine.errors import InvalidRequestError
from hype_engine.models.score_payload import (
    CompositeScore, Momentum, SentimentRatio, SourceStatus, hype_level,
)
from hype_engine.numeric import clamp, round_half_up
from hype_engine.scoring.momentum import MomentumTracker
from hype_sources.news import NewsSentimentAdapter, news_score
from hype_sources.quote import QuoteAdapter
from hype_sources.social import SocialSentimentAdapter, social_score

log = logging.getLogger("hype.aggregator")

WEIGHTS = {
    "social": 0.6,   # real-time chatter
    "news":   0.4,
}

TIMEFRAMES = ("1h", "4h", "24h", "7d")
DEFAULT_TIMEFRAME = "24h"


def build_rationale(symbol: str, score: int, momentum: Momentum, bullish_percent: int) -> str:
    level = hype_level(score)
    if level == "extreme":
        text = f"{symbol} is on fire right now. "
    elif level == "high":
        text = f"{symbol} is generating serious buzz. "
    elif level == "medium":
        text = f"{symbol} has moderate social interest. "
    else:
        text = f"{symbol} is relatively quiet on social media. "

    if momentum == Momentum.ACCELERATING:
        text += "Interest is picking up fast. "
    elif momentum == Momentum.DECELERATING:
        text += "Hype appears to be cooling off. "
    else:
        text += "Sentiment is holding steady. "

    if bullish_percent >= 70:
        text += f"Strong bullish sentiment at {bullish_percent}%."
    elif bullish_percent >= 55:
        text += f"Leaning bullish at {bullish_percent}%."
    elif bullish_percent <= 40:
        text += f"Bearish undertones with only {bullish_percent}% bullish."
    else:
        text += f"Mixed sentiment at {bullish_percent}% bullish."

    if score >= 90 and momentum == Momentum.ACCELERATING:
        text += " Caution: could be approaching a local top."
    return text


def blend(social: int, news: int) -> int:
    return int(clamp(round_half_up(social * WEIGHTS["social"] + news * WEIGHTS["news"])))


class ScoreAggregator:

    def __init__(
        self,
        social: SocialSentimentAdapter,
        news: NewsSentimentAdapter,
        quote: Optional[QuoteAdapter],
        cache: TTLCache,
        momentum: MomentumTracker,
        clock: Callable[[], float] = time.time,
    ):
        self.social    = social
        self.news      = news
        self.quote     = quote
        self._cache    = cache
        self._momentum = momentum
        self._clock    = clock

    @staticmethod
    def cache_key(symbol: str, timeframe: str) -> str:
        return f"hype:{symbol}:{timeframe}"

    async def compute_score(self, symbol: str, timeframe: str = DEFAULT_TIMEFRAME) -> CompositeScore:
        symbol = symbol.upper().strip()
        if timeframe not in TIMEFRAMES:
            raise InvalidRequestError(f"Unsupported timeframe {timeframe!r}, expected one of {', '.join(TIMEFRAMES)}")
        if not symbol:
            raise InvalidRequestError("Symbol is required")
        key = self.cache_key(symbol, timeframe)
        cached: Optional[CompositeScore] = self._cache.get(key)
        if cached is not None:
            self._momentum.touch(symbol, cached.score)
            return cached

        quote_call = self.quote.fetch_with_status(symbol) if self.quote else _no_quote()
        (social_data, social_status), (news_data, news_status), (price, quote_status) = await asyncio.gather(
            self.social.fetch_with_status(symbol),
            self.news.fetch_with_status(symbol),
            quote_call,
        )

        social_component = social_score(social_data)
        news_component   = news_score(news_data)
        composite        = blend(social_component, news_component)

        if social_data is not None:
            ratio = SentimentRatio.from_tally(social_data.bullish, social_data.bearish)
            mentions = social_data.mention_count
        else:
            ratio = SentimentRatio.from_tally(0, 0)
            mentions = 0

        momentum = self._momentum.observe(symbol, composite)

        result = CompositeScore(
            symbol=symbol,
            score=composite,
            breakdown={"social": social_component, "news": news_component},
            mention_count=mentions,
            sentiment_ratio=ratio,
            momentum=momentum,
            rationale=build_rationale(symbol, composite, momentum, ratio.bullish),
            computed_at=datetime.fromtimestamp(self._clock(), tz=timezone.utc).isoformat(),
            timeframe=timeframe,
            price=price,
            sources={
                "social": social_status.value,
                "news":   news_status.value,
                "quote":  quote_status.value,
            },
        )
        log.info(
            f"{symbol}: score={composite} (social={social_component}/{social_status.value}, "
            f"news={news_component}/{news_status.value}) momentum={momentum.value}"
        )

        self._cache.set(key, result, TTL["hype_score"])
        return result


async def _no_quote():
    return None, SourceStatus.NO_DATA
