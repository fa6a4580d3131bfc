"""
HypeTrader — Position Suggester
─────────────────────────────────
Deterministic rule table: (score, momentum, bullish %, risk tolerance)
→ strategy, rationale, risks, confidence.

Rows are evaluated top to bottom and the first match wins:

    score < 30                               no trade
    score ≥ 90 and accelerating              speculative buy (aggressive) / watch only
    score ≥ 70                               momentum / scale-in / wait / steady buy
    score ≥ 50                               early mover / accumulate / hold-watch
    score ≥ 30                               speculative watch / no trade

If a capital figure is supplied and the row is a buy, an allocation is
attached: conservative 25%, moderate 50%, aggressive 75%.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from hype_engine.models.recommendation import (
    Allocation, Confidence, Recommendation, RiskTolerance, StrategyType,
)
from hype_engine.models.score_payload import CompositeScore, Momentum

DISCLAIMER = (
    "This is sentiment-based analysis, not financial advice. Social media hype does not "
    "guarantee price movement. Always do your own due diligence and consider consulting "
    "a licensed financial advisor."
)

ALLOCATION_FRACTION = {
    RiskTolerance.CONSERVATIVE: 0.25,
    RiskTolerance.MODERATE:     0.50,
    RiskTolerance.AGGRESSIVE:   0.75,
}


@dataclass(frozen=True)
class Rule:
    name:       str
    matches:    Callable[[CompositeScore, RiskTolerance], bool]
    strategy:   str
    kind:       StrategyType
    confidence: Confidence
    rationale:  str            # formatted with symbol, score, bullish
    risks:      List[str]


def _accel(s: CompositeScore) -> bool:
    return s.momentum == Momentum.ACCELERATING


RULES: List[Rule] = [
    Rule(
        "low_interest",
        lambda s, r: s.score < 30,
        "No Trade - Low Interest", StrategyType.NO_TRADE, Confidence.LOW,
        "{symbol} isn't generating much social buzz right now. Without a real hype signal "
        "there's no sentiment-driven entry. I'd sit this one out and wait for some action.",
        ["Low liquidity periods", "Lack of momentum"],
    ),
    Rule(
        "extreme_aggressive",
        lambda s, r: s.score >= 90 and _accel(s) and r == RiskTolerance.AGGRESSIVE,
        "Speculative Buy - Ride the Wave", StrategyType.BUY_SHARES, Confidence.MEDIUM,
        "{symbol} is cooking with a {score} hype score and accelerating momentum. This is peak "
        "degen territory. If you play it, use a tight stop, because when the music stops it stops fast.",
        ["Potential blow-off top imminent", "Extreme volatility expected",
         "Could reverse sharply", "FOMO-driven buying may be exhausted"],
    ),
    Rule(
        "extreme_watch",
        lambda s, r: s.score >= 90 and _accel(s),
        "Watch Only - Too Hot", StrategyType.WATCH, Confidence.HIGH,
        "{symbol} sits at a {score} hype score and it's still accelerating. Everyone is bullish, "
        "which is exactly when I get nervous. It could keep running, but the risk-reward for a new "
        "entry isn't there. If you're not in already, wait for a pullback.",
        ["Likely near local top", "Risk of sharp reversal", "Late to the party"],
    ),
    Rule(
        "high_accel_conservative",
        lambda s, r: s.score >= 70 and _accel(s) and r == RiskTolerance.CONSERVATIVE,
        "Small Position - Scale In", StrategyType.BUY_SHARES, Confidence.MEDIUM,
        "{symbol} has strong momentum at {score} and accelerating. For a conservative play, take "
        "a small starter position, a quarter of your usual size, and see how it develops. Don't chase.",
        ["Momentum could stall", "Partial position may underperform if it keeps running"],
    ),
    Rule(
        "high_accel",
        lambda s, r: s.score >= 70 and _accel(s),
        "Buy - Momentum Play", StrategyType.BUY_SHARES, Confidence.HIGH,
        "{symbol} is running hot at {score} with {bullish}% bullish sentiment. The momentum is real. "
        "I'd get in here with a stop 5-8% below entry. Let winners run, protect the downside.",
        ["Chasing momentum", "Potential for quick reversal", "High volatility"],
    ),
    Rule(
        "high_decel",
        lambda s, r: s.score >= 70 and s.momentum == Momentum.DECELERATING,
        "Wait for Clarity", StrategyType.WATCH, Confidence.MEDIUM,
        "{symbol} still carries a solid {score} hype score, but momentum is fading. Could be a pause "
        "before another leg up or the start of a pullback. Wait for momentum to return or for a dip.",
        ["Trend reversal possible", "Dead cat bounce risk"],
    ),
    Rule(
        "high_stable",
        lambda s, r: s.score >= 70,
        "Buy - Steady Hype", StrategyType.BUY_SHARES, Confidence.HIGH,
        "{symbol} has consistent interest at {score} with stable momentum. Not the explosive setup, "
        "but a solid one with decent risk-reward.",
        ["Could consolidate", "Needs catalyst for next move"],
    ),
    Rule(
        "medium_accel",
        lambda s, r: s.score >= 50 and _accel(s),
        "Early Mover - Buy", StrategyType.BUY_SHARES, Confidence.MEDIUM,
        "{symbol} is starting to pick up steam at {score} and climbing. Could be the early innings "
        "of a bigger move. I like getting in before the crowd shows up.",
        ["Hype may not sustain", "Could be false breakout", "Need to monitor closely"],
    ),
    Rule(
        "medium_bullish",
        lambda s, r: s.score >= 50 and s.bullish_percent >= 65,
        "Accumulate - Bullish Setup", StrategyType.BUY_SHARES, Confidence.MEDIUM,
        "{symbol} has moderate attention at {score} but sentiment is {bullish}% bullish. The bulls "
        "are in control even on modest volume. Good spot to start building a position.",
        ["Low volume may persist", "Needs catalyst"],
    ),
    Rule(
        "medium_mixed",
        lambda s, r: s.score >= 50,
        "Hold/Watch", StrategyType.WATCH, Confidence.LOW,
        "{symbol} is in no-man's land. A {score} hype score isn't bad but it isn't special, and "
        "sentiment is mixed. Wait for a clearer signal or look elsewhere.",
        ["Sideways action likely", "No clear catalyst"],
    ),
    Rule(
        "low_accel",
        lambda s, r: _accel(s),
        "Speculative Watch", StrategyType.WATCH, Confidence.LOW,
        "{symbol} is showing signs of life. Hype is low at {score} but picking up. Put it on the "
        "watchlist and see if this turns into something real.",
        ["Early signal may be noise", "Need confirmation", "Limited liquidity"],
    ),
    Rule(
        "low_flat",
        lambda s, r: True,
        "No Trade - Insufficient Signal", StrategyType.NO_TRADE, Confidence.LOW,
        "{symbol} doesn't have the social momentum for a clear signal. A score of {score} isn't "
        "compelling. Save your powder for better setups.",
        ["Opportunity cost", "Dead money"],
    ),
]


def match_rule(composite: CompositeScore, risk: RiskTolerance) -> Rule:
    for rule in RULES:
        if rule.matches(composite, risk):
            return rule
    raise AssertionError("decision table has no fallback row")


def evaluate(composite: CompositeScore, risk: RiskTolerance = RiskTolerance.MODERATE,
             max_capital: Optional[float] = None) -> Recommendation:
    """Pure function of one CompositeScore and a risk tolerance."""
    rule = match_rule(composite, risk)
    rationale = rule.rationale.format(
        symbol=composite.symbol, score=composite.score, bullish=composite.bullish_percent,
    )

    allocation = None
    if max_capital and max_capital > 0 and rule.kind == StrategyType.BUY_SHARES:
        fraction = ALLOCATION_FRACTION[risk]
        allocation = Allocation(fraction=fraction, amount=max_capital * fraction)
        rationale += (
            f" With your {max_capital:,.0f} budget, I'd allocate around "
            f"{allocation.amount:,.0f} to this play."
        )

    return Recommendation(
        symbol=composite.symbol,
        score=composite.score,
        momentum=composite.momentum.value,
        strategy=rule.strategy,
        strategy_type=rule.kind,
        rationale=rationale,
        confidence=rule.confidence,
        risks=list(rule.risks),
        disclaimer=DISCLAIMER,
        allocation=allocation,
    )

