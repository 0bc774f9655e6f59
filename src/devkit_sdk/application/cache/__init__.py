"""Application cache – TTL store and key factory."""
from devkit_sdk.application.cache.keys import CacheKey
from devkit_sdk.application.cache.ttl import CacheEntry, TtlCache

__all__ = ["CacheEntry", "CacheKey", "TtlCache"]
