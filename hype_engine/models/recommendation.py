"""
HypeTrader — Recommendation Models
────────────────────────────────────
What /suggest and /daily-moves return.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RiskTolerance(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE     = "moderate"
    AGGRESSIVE   = "aggressive"


class StrategyType(str, Enum):
    BUY_SHARES             = "buy_shares"
    SELL_SHARES            = "sell_shares"
    HOLD                   = "hold"
    WATCH                  = "watch"
    NO_TRADE               = "no_trade"
    BUY_CALLS              = "buy_calls"
    SELL_COVERED_CALLS     = "sell_covered_calls"
    SELL_CASH_SECURED_PUTS = "sell_cash_secured_puts"


class Confidence(str, Enum):
    HIGH   = "high"
    MEDIUM = "medium"
    LOW    = "low"


class PlayCategory(str, Enum):
    BEST_BET  = "best_bet"
    DEFENSIVE = "defensive"
    DEGEN     = "degen"
    DONK      = "donk"


@dataclass(frozen=True)
class Allocation:
    fraction: float
    amount:   float

    def to_dict(self) -> dict:
        return {"fraction": self.fraction, "amount": round(self.amount, 2)}


@dataclass
class Recommendation:
    symbol:        str
    score:         int
    momentum:      str
    strategy:      str
    strategy_type: StrategyType
    rationale:     str
    confidence:    Confidence
    risks:         List[str]
    disclaimer:    str
    allocation:    Optional[Allocation] = None

    def to_dict(self) -> dict:
        return {
            "symbol":        self.symbol,
            "score":         self.score,
            "momentum":      self.momentum,
            "strategy":      self.strategy,
            "strategy_type": self.strategy_type.value,
            "rationale":     self.rationale,
            "confidence":    self.confidence.value,
            "risks":         list(self.risks),
            "allocation":    self.allocation.to_dict() if self.allocation else None,
            "disclaimer":    self.disclaimer,
        }


@dataclass(frozen=True)
class OptionsEstimate:
    direction:        str      # "bullish" | "bearish" | "neutral"
    suggested_strike: str
    suggested_expiry: str
    notes:            str

    def to_dict(self) -> dict:
        return {
            "direction":        self.direction,
            "suggested_strike": self.suggested_strike,
            "suggested_expiry": self.suggested_expiry,
            "notes":            self.notes,
        }


@dataclass
class SlateSlot:
    category:       PlayCategory
    play:           str
    strategy_type:  StrategyType
    rationale:      str
    risk:           str
    symbol:         Optional[str] = None
    score_snapshot: Optional[Dict[str, Any]] = None    # CompositeScore.to_dict()
    decision:       Optional[Recommendation] = None
    options:        Optional[OptionsEstimate] = None

    def to_dict(self) -> dict:
        return {
            "category":       self.category.value,
            "symbol":         self.symbol,
            "play":           self.play,
            "strategy_type":  self.strategy_type.value,
            "rationale":      self.rationale,
            "risk":           self.risk,
            "score_snapshot": self.score_snapshot,
            "decision":       self.decision.to_dict() if self.decision else None,
            "options":        self.options.to_dict() if self.options else None,
        }


@dataclass
class RecommendationSlate:
    slots:          List[SlateSlot]               # always four: best_bet, defensive, degen, donk
    generated_at:   str
    position_plays: List[SlateSlot] = field(default_factory=list)
    positions:      List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "slots":          [s.to_dict() for s in self.slots],
            "position_plays": [s.to_dict() for s in self.position_plays],
            "positions":      list(self.positions),
            "generated_at":   self.generated_at,
        }
