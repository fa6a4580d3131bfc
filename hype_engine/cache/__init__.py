from .ttl_cache import TTLCache, CacheEntry
from .ttl_config import TTL, MOMENTUM_WINDOW_S

__all__ = ["TTLCache", "CacheEntry", "TTL", "MOMENTUM_WINDOW_S"]
