"""
HypeTrader — Quote Adapter (Yahoo Finance)
────────────────────────────────────────────
Uses only the v8/chart endpoint, which still works without auth.
query1 first, query2 as fallback.
"""

import logging
from typing import Optional

import httpx

from hype_engine.cache.ttl_config import TTL
from hype_engine.errors import NoDataError, RateLimitedError
from hype_engine.models.score_payload import PriceSnapshot
from hype_sources.base import SourceAdapter

log = logging.getLogger("hype.sources.quote")

YAHOO_URL          = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"
YAHOO_FALLBACK_URL = "https://query2.finance.yahoo.com/v8/finance/chart/{symbol}"


def parse_chart(data: dict) -> Optional[PriceSnapshot]:
    chart = data.get("chart")
    result = chart.get("result") if isinstance(chart, dict) else None
    if not isinstance(result, list) or not result or not isinstance(result[0], dict):
        return None
    meta = result[0].get("meta")
    if not isinstance(meta, dict):
        return None
    price = meta.get("regularMarketPrice") or meta.get("previousClose")
    if not price:
        return None
    prev_close = meta.get("previousClose") or meta.get("chartPreviousClose") or price
    market_state = meta.get("marketState", "CLOSED")
    if market_state == "PRE":
        price = meta.get("preMarketPrice") or price
    elif market_state == "POST":
        price = meta.get("postMarketPrice") or price
    change = float(price) - float(prev_close)
    change_pct = (change / float(prev_close) * 100) if prev_close else 0.0
    return PriceSnapshot(
        price=round(float(price), 4),
        change=round(change, 4),
        change_percent=round(change_pct, 4),
        currency=meta.get("currency", "USD"),
        market_state=market_state,
    )


class QuoteAdapter(SourceAdapter):
    """Latest price and day change."""

    @property
    def provider(self) -> str:
        return "yahoo"

    @property
    def kind(self) -> str:
        return "quote"

    @property
    def cache_ttl(self) -> int:
        return TTL["quote"]

    async def _fetch(self, symbol: str) -> PriceSnapshot:
        last_error: Exception = NoDataError(f"no chart data for {symbol}")
        for url in (YAHOO_URL.format(symbol=symbol), YAHOO_FALLBACK_URL.format(symbol=symbol)):
            try:
                data = await self._get_json(url)
            except (RateLimitedError, NoDataError, httpx.HTTPError) as e:
                last_error = e
                continue
            snapshot = parse_chart(data) if isinstance(data, dict) else None
            if snapshot is not None:
                return snapshot
        raise last_error
