"""
HypeTrader — Score Payload Models
───────────────────────────────────
Canonical structure of a composite hype score and a trending row.
This is what /symbol/{symbol} and /trending return.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Optional

from hype_engine.numeric import round_half_up


class Momentum(str, Enum):
    ACCELERATING = "accelerating"
    STABLE       = "stable"
    DECELERATING = "decelerating"


class SourceStatus(str, Enum):
    OK           = "ok"
    NO_DATA      = "no_data"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class PriceSnapshot:
    price:          float
    change:         float
    change_percent: float
    currency:       str = "USD"
    market_state:   str = "CLOSED"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SentimentRatio:
    bullish: int
    bearish: int
    neutral: int = 0

    @classmethod
    def from_tally(cls, bullish: int, bearish: int) -> "SentimentRatio":
        """Percentages from a raw message tally. Empty tally → 50/50."""
        total = bullish + bearish
        if total <= 0:
            return cls(bullish=50, bearish=50)
        bull_pct = round_half_up(bullish / total * 100)
        return cls(bullish=bull_pct, bearish=100 - bull_pct)

    def to_dict(self) -> dict:
        return {"bullish": self.bullish, "bearish": self.bearish, "neutral": self.neutral}


def hype_level(score: int) -> str:
    if score >= 90:
        return "extreme"
    if score >= 70:
        return "high"
    if score >= 50:
        return "medium"
    return "low"


@dataclass(frozen=True)
class CompositeScore:
    """
    One computation for one symbol. Immutable; the next computation
    for the same symbol produces a new object rather than mutating this one.
    """
    symbol:          str
    score:           int
    breakdown:       Dict[str, int]
    mention_count:   int
    sentiment_ratio: SentimentRatio
    momentum:        Momentum
    rationale:       str
    computed_at:     str                       # ISO-8601 UTC
    timeframe:       str = "24h"
    price:           Optional[PriceSnapshot] = None
    sources:         Dict[str, str] = field(default_factory=dict)

    @property
    def level(self) -> str:
        return hype_level(self.score)

    @property
    def bullish_percent(self) -> int:
        return self.sentiment_ratio.bullish

    def to_dict(self) -> dict:
        return {
            "symbol":          self.symbol,
            "score":           self.score,
            "level":           self.level,
            "breakdown":       dict(self.breakdown),
            "mention_count":   self.mention_count,
            "sentiment_ratio": self.sentiment_ratio.to_dict(),
            "momentum":        self.momentum.value,
            "price":           self.price.to_dict() if self.price else None,
            "rationale":       self.rationale,
            "computed_at":     self.computed_at,
            "timeframe":       self.timeframe,
            "sources":         dict(self.sources),
        }


@dataclass
class TrendingEntry:
    symbol:          str
    score:           int
    momentum:        Momentum
    mention_count:   int
    bullish_percent: int
    rank:            int = 0     # presentation only, reassigned on every ranking pass

    @classmethod
    def from_score(cls, composite: CompositeScore) -> "TrendingEntry":
        return cls(
            symbol=composite.symbol,
            score=composite.score,
            momentum=composite.momentum,
            mention_count=composite.mention_count,
            bullish_percent=composite.bullish_percent,
        )

    def to_dict(self) -> dict:
        return {
            "symbol":          self.symbol,
            "score":           self.score,
            "momentum":        self.momentum.value,
            "mention_count":   self.mention_count,
            "bullish_percent": self.bullish_percent,
            "rank":            self.rank,
        }
