"""
GeoIP lookups: provider interface, MaxMind and ipinfo.io backends, a caching
provider chain and client address helpers.
"""

from .base import (
    DisabledProvider,
    GeoIPError,
    GeoIPErrorCode,
    GeoIPProvider,
    GeoIPResult,
    GeoLocation,
)
from .chain import ChainProvider, clear_memory_cache
from .factory import GeoIPOptions, create_geoip_provider, geoip_registry
from .ip_utils import get_client_ip, hash_ip, is_private_ip
from .ipinfo import IpInfoProvider
from .maxmind import MaxMindProvider

__all__ = [
    "ChainProvider",
    "DisabledProvider",
    "GeoIPError",
    "GeoIPErrorCode",
    "GeoIPOptions",
    "GeoIPProvider",
    "GeoIPResult",
    "GeoLocation",
    "IpInfoProvider",
    "MaxMindProvider",
    "clear_memory_cache",
    "create_geoip_provider",
    "geoip_registry",
    "get_client_ip",
    "hash_ip",
    "is_private_ip",
]
