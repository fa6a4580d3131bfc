"""
HypeTrader — Momentum Tracker
───────────────────────────────
Process-wide history of the last score per symbol. Momentum compares a
fresh score with that history, but only when the previous reading is
younger than the look-back window (4 hours). Entries are never deleted;
stale ones are simply ignored.
"""

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from hype_engine.cache.ttl_config import MOMENTUM_WINDOW_S
from hype_engine.models.score_payload import Momentum

ACCELERATION_THRESHOLD = 10


class MomentumTracker:

    def __init__(self, window_s: float = MOMENTUM_WINDOW_S,
                 clock: Callable[[], float] = time.time):
        self._window_s = window_s
        self._clock    = clock
        self._history: Dict[str, Tuple[int, float]] = {}   # symbol -> (last_score, last_computed_at)
        self._lock     = threading.Lock()

    def observe(self, symbol: str, score: int) -> Momentum:
        """Classify ``score`` against history, then record it."""
        with self._lock:
            now = self._clock()
            previous = self._history.get(symbol)
            self._history[symbol] = (score, now)

        if previous is None:
            return Momentum.STABLE
        last_score, last_at = previous
        if now - last_at > self._window_s:
            return Momentum.STABLE

        delta = score - last_score
        if delta > ACCELERATION_THRESHOLD:
            return Momentum.ACCELERATING
        if delta < -ACCELERATION_THRESHOLD:
            return Momentum.DECELERATING
        return Momentum.STABLE

    def touch(self, symbol: str, score: int) -> None:
        """Advance history without classifying (used on cache hits)."""
        with self._lock:
            self._history[symbol] = (score, self._clock())

    def last(self, symbol: str) -> Optional[Tuple[int, float]]:
        with self._lock:
            return self._history.get(symbol)

    def __len__(self) -> int:
        return len(self._history)
