"""
Provider chain with an in-memory cache.

The chain answers from a bounded TTL cache first, then asks each provider in
order and remembers the first success. A ``PRIVATE_IP`` answer stops the chain
because no other provider can do better.
"""

from __future__ import annotations

from typing import List

from cachetools import TTLCache

from fauxdash.core.logging_config import get_logger

from .base import GeoIPErrorCode, GeoIPProvider, GeoIPResult, GeoLocation

logger = get_logger(__name__)

MEMORY_CACHE_SIZE = 10_000
MEMORY_CACHE_TTL = 60 * 60 * 24

_memory_cache: TTLCache = TTLCache(maxsize=MEMORY_CACHE_SIZE, ttl=MEMORY_CACHE_TTL)


def get_cached_location(ip: str) -> GeoLocation | None:
    return _memory_cache.get(ip)


def cache_location(ip: str, location: GeoLocation) -> None:
    _memory_cache[ip] = location


def clear_memory_cache() -> None:
    """Drop every in-memory lookup."""
    _memory_cache.clear()


class ChainProvider(GeoIPProvider):
    """Tries providers in order until one succeeds."""

    name = "chain"

    def __init__(self, providers: List[GeoIPProvider]) -> None:
        self.providers = providers

    @property
    def provider_names(self) -> List[str]:
        return [provider.name for provider in self.providers]

    async def is_available(self) -> bool:
        for provider in self.providers:
            if await provider.is_available():
                return True
        return False

    async def lookup(self, ip: str) -> GeoIPResult:
        cached = get_cached_location(ip)
        if cached is not None:
            return GeoIPResult.ok(cached)

        for provider in self.providers:
            result = await provider.lookup(ip)
            if result.success and result.data is not None:
                cache_location(ip, result.data)
                return result
            if result.error is not None and result.error.code == GeoIPErrorCode.PRIVATE_IP:
                return result
            logger.debug(
                f"GeoIP provider {provider.name} failed: {result.error.code.value if result.error else 'unknown'}"
            )

        return GeoIPResult.fail(GeoIPErrorCode.PROVIDER_UNAVAILABLE, "All providers failed")

    async def close(self) -> None:
        for provider in self.providers:
            await provider.close()
