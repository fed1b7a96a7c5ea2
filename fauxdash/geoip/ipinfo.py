"""
ipinfo.io provider.

Uses the public REST API over httpx. A token is optional; without one the
free anonymous endpoint is used.
"""

from __future__ import annotations

from typing import Optional

import httpx

from fauxdash.core.logging_config import get_logger

from .base import PRIVATE_IP_MESSAGE, GeoIPErrorCode, GeoIPProvider, GeoIPResult, GeoLocation
from .ip_utils import is_private_ip

logger = get_logger(__name__)

COUNTRY_NAMES = {
    "US": "United States",
    "GB": "United Kingdom",
    "CA": "Canada",
    "AU": "Australia",
    "DE": "Germany",
    "FR": "France",
    "JP": "Japan",
    "CN": "China",
    "IN": "India",
    "BR": "Brazil",
    "MX": "Mexico",
    "ES": "Spain",
    "IT": "Italy",
    "NL": "Netherlands",
    "SE": "Sweden",
    "NO": "Norway",
    "DK": "Denmark",
    "FI": "Finland",
    "PL": "Poland",
    "RU": "Russia",
    "KR": "South Korea",
    "SG": "Singapore",
    "HK": "Hong Kong",
    "NZ": "New Zealand",
    "IE": "Ireland",
    "CH": "Switzerland",
    "AT": "Austria",
    "BE": "Belgium",
    "PT": "Portugal",
    "ZA": "South Africa",
}

DEFAULT_RETRY_AFTER = 60


def parse_loc(loc: Optional[str]) -> tuple[Optional[float], Optional[float]]:
    """Split ipinfo's ``"lat,lng"`` field into floats."""
    if not loc:
        return None, None
    parts = loc.split(",")
    if len(parts) != 2:
        return None, None
    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        return None, None


class IpInfoProvider(GeoIPProvider):
    """Lookups against the ipinfo.io REST API."""

    name = "ipinfo"

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = "https://ipinfo.io",
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.token = token or None
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def build_url(self, ip: str) -> str:
        if self.token:
            return f"{self.base_url}/{ip}?token={self.token}"
        return f"{self.base_url}/{ip}/json"

    async def is_available(self) -> bool:
        return True

    async def lookup(self, ip: str) -> GeoIPResult:
        if is_private_ip(ip):
            return GeoIPResult.fail(GeoIPErrorCode.PRIVATE_IP, PRIVATE_IP_MESSAGE)

        try:
            if self._client is not None:
                response = await self._client.get(self.build_url(ip), headers={"Accept": "application/json"})
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.build_url(ip), headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.warning(f"ipinfo request failed: {e}")
            return GeoIPResult.fail(GeoIPErrorCode.LOOKUP_FAILED, str(e))

        if response.status_code == 429:
            try:
                retry_after = int(response.headers.get("Retry-After", DEFAULT_RETRY_AFTER))
            except ValueError:
                retry_after = DEFAULT_RETRY_AFTER
            return GeoIPResult.fail(GeoIPErrorCode.RATE_LIMITED, retry_after=retry_after)

        if not response.is_success:
            return GeoIPResult.fail(GeoIPErrorCode.LOOKUP_FAILED, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            return GeoIPResult.fail(GeoIPErrorCode.LOOKUP_FAILED, f"Invalid JSON: {e}")

        latitude, longitude = parse_loc(data.get("loc"))
        country = data.get("country") or "XX"
        return GeoIPResult.ok(
            GeoLocation(
                country=country,
                country_name=COUNTRY_NAMES.get(country, country),
                city=data.get("city") or None,
                region=data.get("region") or None,
                latitude=latitude,
                longitude=longitude,
                timezone=data.get("timezone") or None,
            )
        )
