from .score_payload import (
    CompositeScore, Momentum, PriceSnapshot, SentimentRatio, SourceStatus,
    TrendingEntry, hype_level,
)
from .recommendation import (
    Allocation, Confidence, OptionsEstimate, PlayCategory, Recommendation,
    RecommendationSlate, RiskTolerance, SlateSlot, StrategyType,
)

__all__ = [
    "CompositeScore", "Momentum", "PriceSnapshot", "SentimentRatio", "SourceStatus",
    "TrendingEntry", "hype_level",
    "Allocation", "Confidence", "OptionsEstimate", "PlayCategory", "Recommendation",
    "RecommendationSlate", "RiskTolerance", "SlateSlot", "StrategyType",
]
