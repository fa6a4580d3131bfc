"""Rounding helpers shared by the adapters and the aggregator."""

import math


def round_half_up(value: float) -> int:
    """0.5 always rounds up (Python's round() uses banker's rounding)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, lo: float = 0, hi: float = 100):
    return max(lo, min(hi, value))
