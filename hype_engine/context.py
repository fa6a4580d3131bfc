"""
HypeTrader — Engine Context
─────────────────────────────
Everything the HTTP layer needs, wired once at startup:

    httpx.AsyncClient ─┬─ SocialSentimentAdapter ─┐
                       ├─ NewsSentimentAdapter ───┼─ ScoreAggregator ─ TrendingRanker ─ DecisionEngine
                       ├─ QuoteAdapter ───────────┘
                       └─ GeminiProvider ×N ─┐
    anthropic.Anthropic ── AnthropicProvider ─┴─ GenerationCascade

Tests build a fresh context per case, usually over an httpx.MockTransport.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import anthropic
import httpx

from hype_engine.cache.ttl_cache import TTLCache
from hype_engine.config import Settings
from hype_engine.decisions.engine import DecisionEngine
from hype_engine.generation.cascade import GenerationCascade, build_providers
from hype_engine.generation.providers import GenerationProvider
from hype_engine.ranking.trending import TrendingRanker
from hype_engine.scheduler import TrendingWarmer
from hype_engine.scoring.aggregator import ScoreAggregator
from hype_engine.scoring.momentum import MomentumTracker
from hype_sources.news import NewsSentimentAdapter
from hype_sources.quote import QuoteAdapter
from hype_sources.social import SocialSentimentAdapter

log = logging.getLogger("hype.context")

HTTP_LIMITS = httpx.Limits(max_connections=50, max_keepalive_connections=20)


@dataclass
class EngineContext:
    settings:   Settings
    client:     httpx.AsyncClient
    cache:      TTLCache
    momentum:   MomentumTracker
    social:     SocialSentimentAdapter
    news:       NewsSentimentAdapter
    quote:      QuoteAdapter
    aggregator: ScoreAggregator
    ranker:     TrendingRanker
    decisions:  DecisionEngine
    cascade:    GenerationCascade
    warmer:     TrendingWarmer
    owns_client: bool = True

    @classmethod
    def build(
        cls,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        anthropic_client: Optional["anthropic.Anthropic"] = None,
        providers: Optional[List[GenerationProvider]] = None,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ) -> "EngineContext":
        settings = settings or Settings.from_env()
        owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(
                timeout=settings.request_timeout, limits=HTTP_LIMITS, follow_redirects=True,
            )

        cache    = TTLCache(clock=clock)
        momentum = MomentumTracker(clock=clock)
        social   = SocialSentimentAdapter(client, cache)
        news     = NewsSentimentAdapter(client, cache, api_key=settings.alpha_vantage_key)
        quote    = QuoteAdapter(client, cache)

        aggregator = ScoreAggregator(social, news, quote, cache, momentum, clock=clock)
        ranker     = TrendingRanker(social, aggregator)
        decisions  = DecisionEngine(aggregator, ranker, rng=rng)

        if providers is None:
            providers = build_providers(settings, client, anthropic_client)
        cascade = GenerationCascade(providers)

        warmer = TrendingWarmer(
            ranker, cache,
            interval_s=settings.trending_warm_interval,
            limit=settings.trending_warm_limit,
        )

        log.info(
            f"Engine ready: news={'on' if settings.alpha_vantage_key else 'off'}, "
            f"generation={cascade.provider_ids or 'none'}"
        )
        return cls(
            settings=settings, client=client, cache=cache, momentum=momentum,
            social=social, news=news, quote=quote,
            aggregator=aggregator, ranker=ranker, decisions=decisions,
            cascade=cascade, warmer=warmer, owns_client=owns_client,
        )

    async def aclose(self) -> None:
        self.warmer.shutdown()
        if self.owns_client:
            await self.client.aclose()
