"""
HypeTrader — Engine
─────────────────────
Composite hype scoring, trending ranking, trade suggestions and the
generation fallback cascade. Source adapters live in ``hype_sources``.

    from hype_engine.context import EngineContext
    ctx = EngineContext.build(Settings.from_env())
    score = await ctx.aggregator.compute_score("AAPL")
"""

__version__ = "0.3.0"
