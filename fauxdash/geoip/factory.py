"""
GeoIP provider factory.

Builds the provider chain from the effective global settings. The chain is
kept between requests (so the MaxMind reader stays open) and rebuilt only
when the relevant settings change.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel

from fauxdash.core.logging_config import get_logger

from .base import DisabledProvider, GeoIPProvider
from .chain import ChainProvider, clear_memory_cache
from .ipinfo import IpInfoProvider
from .maxmind import DEFAULT_DATABASE_PATH, MaxMindProvider

logger = get_logger(__name__)


class GeoIPOptions(BaseModel):
    """Settings that shape the provider chain."""

    enabled: bool = False
    provider: str = "maxmind"
    maxmind_path: str = DEFAULT_DATABASE_PATH
    ipinfo_token: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls, values: Mapping[str, Any]) -> "GeoIPOptions":
        """Read options from a typed settings mapping (``geoipEnabled``, ``geoipProvider``, ...)."""
        return cls(
            enabled=bool(values.get("geoipEnabled", False)),
            provider=str(values.get("geoipProvider") or "maxmind"),
            maxmind_path=str(values.get("geoipMaxmindPath") or DEFAULT_DATABASE_PATH),
            ipinfo_token=values.get("geoipIpinfoToken") or None,
        )


def create_geoip_provider(options: GeoIPOptions) -> GeoIPProvider:
    """Create a provider for the given options.

    Disabled options give a provider that always reports
    ``PROVIDER_UNAVAILABLE``. Otherwise both backends are chained with the
    configured one first.

    Args:
        options: GeoIP options

    Returns:
        Provider instance
    """
    if not options.enabled:
        return DisabledProvider()

    maxmind = MaxMindProvider(database_path=options.maxmind_path)
    ipinfo = IpInfoProvider(token=options.ipinfo_token)

    if options.provider == "ipinfo":
        return ChainProvider([ipinfo, maxmind])
    return ChainProvider([maxmind, ipinfo])


class GeoIPProviderRegistry:
    """Holds the live provider and swaps it when options change."""

    def __init__(self) -> None:
        self._options: Optional[GeoIPOptions] = None
        self._provider: Optional[GeoIPProvider] = None

    async def get(self, options: GeoIPOptions) -> GeoIPProvider:
        if self._provider is None or options != self._options:
            if self._provider is not None:
                await self._provider.close()
            logger.info(f"Building GeoIP provider (enabled={options.enabled}, primary={options.provider})")
            self._provider = create_geoip_provider(options)
            self._options = options
        return self._provider

    async def reset(self) -> None:
        if self._provider is not None:
            await self._provider.close()
        self._provider = None
        self._options = None
        clear_memory_cache()


geoip_registry = GeoIPProviderRegistry()
