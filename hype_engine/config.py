"""
HypeTrader — Configuration
────────────────────────────
Every setting comes from the environment (``.env`` is loaded first).
Components never read ``os.environ`` themselves; they receive a
``Settings`` instance or plain constructor arguments.

    ALPHA_VANTAGE_API_KEY         news sentiment (Alpha Vantage)
    GOOGLE_GENERATIVE_AI_API_KEY  Gemini (GEMINI_API_KEY also accepted)
    ANTHROPIC_API_KEY             Anthropic fallback models
    GEMINI_MODELS                 comma list, priority order
    ANTHROPIC_MODELS              comma list, tried after Gemini
    REQUEST_TIMEOUT               per-call upstream timeout, seconds
    TRENDING_WARM_INTERVAL        background trending refresh, seconds (0 = off)
    TRENDING_WARM_LIMIT           how many tickers the warm-up ranks
    LOG_LEVEL                     INFO by default
    PORT                          uvicorn port
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_GEMINI_MODELS = [
    "gemini-2.0-flash",
    "gemini-2.5-flash",
    "gemini-2.0-flash-lite",
]
DEFAULT_ANTHROPIC_MODELS = [
    "claude-sonnet-4-20250514",
]


def _split_list(raw: Optional[str], default: List[str]) -> List[str]:
    if not raw:
        return list(default)
    items = [s.strip() for s in raw.split(",") if s.strip()]
    return items or list(default)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass
class Settings:
    alpha_vantage_key:      Optional[str] = None
    google_api_key:         Optional[str] = None
    anthropic_api_key:      Optional[str] = None
    gemini_models:          List[str] = field(default_factory=lambda: list(DEFAULT_GEMINI_MODELS))
    anthropic_models:       List[str] = field(default_factory=lambda: list(DEFAULT_ANTHROPIC_MODELS))
    request_timeout:        float = 8.0
    trending_warm_interval: int = 0
    trending_warm_limit:    int = 10
    log_level:              str = "INFO"
    port:                   int = 8000

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            alpha_vantage_key=os.getenv("ALPHA_VANTAGE_API_KEY") or None,
            google_api_key=(
                os.getenv("GOOGLE_GENERATIVE_AI_API_KEY") or os.getenv("GEMINI_API_KEY") or None
            ),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            gemini_models=_split_list(os.getenv("GEMINI_MODELS"), DEFAULT_GEMINI_MODELS),
            anthropic_models=_split_list(os.getenv("ANTHROPIC_MODELS"), DEFAULT_ANTHROPIC_MODELS),
            request_timeout=_env_float("REQUEST_TIMEOUT", 8.0),
            trending_warm_interval=_env_int("TRENDING_WARM_INTERVAL", 0),
            trending_warm_limit=_env_int("TRENDING_WARM_LIMIT", 10),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=_env_int("PORT", 8000),
        )

    @property
    def has_generation_credentials(self) -> bool:
        return bool(self.google_api_key or self.anthropic_api_key)
