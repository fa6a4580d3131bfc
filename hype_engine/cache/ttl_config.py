"""
HypeTrader — TTL Configuration
────────────────────────────────
Single source of truth for all cache durations.
Organised by data type: how fast the upstream changes and how much
quota each call burns.
"""

# ── Per data-type TTL (seconds) ───────────────────────────────

TTL = {
    "social_trending":  60,        # 1 minute  (trending list churns fast)
    "social_sentiment": 2 * 60,    # 2 minutes
    "news_sentiment":   5 * 60,    # 5 minutes (Alpha Vantage 25/day free tier)
    "quote":            60,        # 1 minute
    "hype_score":       2 * 60,    # 2 minutes (composite)
}

# ── Momentum look-back window ─────────────────────────────────
# A previous score older than this is ignored for momentum purposes.
MOMENTUM_WINDOW_S = 4 * 3600
