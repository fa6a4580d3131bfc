from .engine import DecisionEngine
from .daily_moves import DailySlateBuilder, estimate_options
from .positions import parse_positions
from .suggester import DISCLAIMER, evaluate

__all__ = [
    "DecisionEngine", "DailySlateBuilder", "estimate_options",
    "parse_positions", "DISCLAIMER", "evaluate",
]
