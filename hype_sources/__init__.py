"""
HypeTrader Source Adapters
────────────────────────────
One adapter per upstream feed. Each returns a normalised result or
None, never an exception.

    from hype_sources import SocialSentimentAdapter
    sentiment = await SocialSentimentAdapter(client, cache).fetch("AAPL")
"""

from .base import SourceAdapter, looks_like_html, mentions_rate_limit
from .news import NewsArticle, NewsSentiment, NewsSentimentAdapter, news_score
from .quote import QuoteAdapter
from .social import (
    SocialMessage, SocialSentiment, SocialSentimentAdapter, TrendingCandidate, social_score,
)

__all__ = [
    "SourceAdapter", "looks_like_html", "mentions_rate_limit",
    "NewsArticle", "NewsSentiment", "NewsSentimentAdapter", "news_score",
    "QuoteAdapter",
    "SocialMessage", "SocialSentiment", "SocialSentimentAdapter", "TrendingCandidate", "social_score",
]
