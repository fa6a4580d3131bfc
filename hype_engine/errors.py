"""
HypeTrader — Error Taxonomy
─────────────────────────────
NoData        upstream unreachable or malformed. Absorbed by the adapters,
              never surfaced to a caller.
RateLimited   upstream throttling (429, quota message, HTML-instead-of-JSON).
HardError     missing credential, unexpected schema, empty generation.
Generation*   what the cascade raises once every provider is exhausted.
"""

from typing import List, Optional


class HypeError(Exception):
    """Base exception for everything raised by the engine."""
    pass


class NoDataError(HypeError):
    """Upstream returned nothing usable."""
    pass


class RateLimitedError(HypeError):
    """Upstream is throttling us."""

    def __init__(self, provider: str, detail: str = ""):
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider} rate limited{': ' + detail if detail else ''}")


class HardError(HypeError):
    """Request-level failure that retrying the same call will not fix."""
    pass


class ConfigurationError(HardError):
    """Raised when a required credential or setting is missing."""
    pass


class InvalidRequestError(HypeError):
    """Bad client input. Mapped to HTTP 400."""
    pass


class GenerationError(HypeError):
    """Every provider in the cascade failed."""

    def __init__(self, message: str, attempts: Optional[List] = None, last_error: Optional[str] = None):
        super().__init__(message)
        self.attempts = attempts or []
        self.last_error = last_error


class GenerationRateLimitedError(GenerationError):
    """Every attempt was classified as rate limited. Caller should retry later."""
    pass


class GenerationFailedError(GenerationError):
    """At least one attempt failed hard."""
    pass
