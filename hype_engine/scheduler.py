"""
HypeTrader — Trending Warm-up
───────────────────────────────
Optional background job that re-ranks the trending set on an interval so
the first /trending or /daily-moves call after a quiet spell is served
from cache, and sweeps expired cache entries on the same tick.

Enabled with TRENDING_WARM_INTERVAL > 0 (seconds).
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from hype_engine.cache.ttl_cache import TTLCache
from hype_engine.ranking.trending import TrendingRanker

log = logging.getLogger("hype.scheduler")

JOB_ID = "trending_warm"


class TrendingWarmer:

    def __init__(self, ranker: TrendingRanker, cache: TTLCache,
                 interval_s: int, limit: int = 10):
        self.ranker     = ranker
        self.cache      = cache
        self.interval_s = interval_s
        self.limit      = limit
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def enabled(self) -> bool:
        return self.interval_s > 0

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def warm(self) -> int:
        """One warm-up pass. Returns how many tickers were ranked."""
        try:
            ranked = await self.ranker.rank(self.limit)
            purged = self.cache.purge_expired()
        except Exception as e:
            log.error(f"Trending warm-up failed: {e}")
            return 0
        log.info(f"Warm-up ranked {len(ranked)} tickers, purged {purged} expired cache entries")
        return len(ranked)

    def start(self) -> None:
        if not self.enabled:
            log.info("Trending warm-up disabled (TRENDING_WARM_INTERVAL=0)")
            return
        if self.running:
            log.warning("Trending warm-up already running, ignoring start call")
            return

        self._scheduler = AsyncIOScheduler(timezone="UTC")
        self._scheduler.add_job(
            self.warm,
            "interval",
            seconds          = self.interval_s,
            id               = JOB_ID,
            name             = "Trending warm-up",
            max_instances    = 1,
            coalesce         = True,
            replace_existing = True,
        )
        self._scheduler.start()
        log.info(f"Trending warm-up every {self.interval_s}s (top {self.limit})")

    def shutdown(self) -> None:
        if self.running:
            self._scheduler.shutdown(wait=False)
            log.info("Trending warm-up stopped")
        self._scheduler = None

    def status(self) -> dict:
        if not self.running:
            return {"running": False, "interval_s": self.interval_s}
        job = self._scheduler.get_job(JOB_ID)
        nxt = job.next_run_time if job else None
        return {
            "running":    True,
            "interval_s": self.interval_s,
            "next_run":   nxt.isoformat() if nxt else None,
        }
