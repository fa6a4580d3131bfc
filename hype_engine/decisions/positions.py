"""
HypeTrader — Position Parsing
───────────────────────────────
Best-effort ticker extraction from whatever the user typed about their
holdings. Not a grammar. Examples that should all work:

    "100 AAPL at $180, 50 NVDA at $750"   → AAPL, NVDA
    "AAPL 100 shares, NVDA 50"            → AAPL, NVDA
    "holding TSLA and some GME"           → TSLA, GME
    "long MSFT, short SPY"                → MSFT, SPY
    ["aapl", "$nvda"]                     → AAPL, NVDA

Rules:
  - a token is 1-5 letters with an optional class suffix (BRK.B)
  - in free text it must be written in upper case or carry a "$" prefix
  - a list element that is a single bare token is accepted in any case
  - common acronyms, trading slang and side words are not tickers
  - order preserved, duplicates dropped
"""

import re
from typing import Iterable, List, Optional, Union

TICKER_BLACKLIST = frozenset({
    "I", "A", "CEO", "IPO", "ETF", "DD", "YOLO", "FOMO", "IMO", "ATH", "EOD", "PM", "AM",
    "US", "UK", "GDP", "SEC", "FDA", "EPS", "PE", "PS", "PB", "ROI", "ROE", "GAAP", "YOY",
    "QOQ", "MOM", "WSB", "NYSE", "SP", "DOW", "CPI", "PPI", "NFP", "FOMC", "FED", "IV",
    "DTE", "OTM", "ITM", "ATM", "LEAPS", "CSP", "CC", "TA", "FA", "MA", "RSI", "MACD",
    "EMA", "SMA", "VWAP", "LOL", "WTF", "OMG", "FYI", "TBH", "IIRC", "AFAIK", "TL", "DR",
    "USD",
})

# Words people put next to tickers that are never tickers themselves
NON_TICKER_WORDS = frozenset({
    "LONG", "SHORT", "CALL", "CALLS", "PUT", "PUTS", "SHARE", "SHARES", "HOLD", "HOLDS",
    "BUY", "SELL", "AT", "AND", "OR", "THE", "OF", "IN", "ON", "MY", "ME", "TO", "SOME",
    "WITH", "ALSO", "PLUS",
})

_BARE_TOKEN = re.compile(r"^\$?([A-Za-z]{1,5}(?:\.[A-Za-z]{1,2})?)$")
_TEXT_TOKEN = re.compile(r"(?<![A-Za-z0-9$])(\$?)([A-Za-z]{1,5}(?:\.[A-Za-z]{1,2})?)(?![A-Za-z0-9])")


def _is_ticker(symbol: str) -> bool:
    base = symbol.split(".")[0]
    return base not in TICKER_BLACKLIST and base not in NON_TICKER_WORDS


def _from_text(text: str) -> Iterable[str]:
    for match in _TEXT_TOKEN.finditer(text):
        dollar, token = match.group(1), match.group(2)
        if not dollar and token != token.upper():
            continue
        symbol = token.upper()
        if _is_ticker(symbol):
            yield symbol


def parse_positions(raw: Optional[Union[str, List[str]]]) -> List[str]:
    if not raw:
        return []

    found: List[str] = []
    items = [raw] if isinstance(raw, str) else list(raw)
    for item in items:
        if not isinstance(item, str):
            continue
        bare = _BARE_TOKEN.match(item.strip())
        if bare and not isinstance(raw, str):
            symbol = bare.group(1).upper()
            if _is_ticker(symbol):
                found.append(symbol)
            continue
        found.extend(_from_text(item))

    seen = set()
    unique = []
    for symbol in found:
        if symbol not in seen:
            seen.add(symbol)
            unique.append(symbol)
    return unique
