"""
MaxMind GeoLite2 / GeoIP2 provider.

Reads a local ``.mmdb`` city database through the ``geoip2`` reader. The file
is opened on first use; a failed open is remembered so every later lookup
reports ``DATABASE_NOT_FOUND`` without touching the filesystem again.
"""

from __future__ import annotations

from typing import Any, Optional

import geoip2.database
import geoip2.errors

from fauxdash.core.logging_config import get_logger

from .base import PRIVATE_IP_MESSAGE, GeoIPErrorCode, GeoIPProvider, GeoIPResult, GeoLocation
from .ip_utils import is_private_ip

logger = get_logger(__name__)

DEFAULT_DATABASE_PATH = "/data/GeoLite2-City.mmdb"


class MaxMindProvider(GeoIPProvider):
    """Lookups against a local MaxMind city database."""

    name = "maxmind"

    def __init__(self, database_path: Optional[str] = None, reader: Any = None) -> None:
        """
        Args:
            database_path: Path to the ``.mmdb`` file
            reader: Pre-opened reader, mainly for tests
        """
        self.database_path = database_path or DEFAULT_DATABASE_PATH
        self._reader = reader
        self._init_error: Optional[Exception] = None

    def _ensure_reader(self):
        if self._reader is not None:
            return self._reader
        if self._init_error is not None:
            raise self._init_error
        try:
            self._reader = geoip2.database.Reader(self.database_path)
            logger.info(f"Opened MaxMind database at {self.database_path}")
        except (OSError, ValueError) as e:
            self._init_error = e
            logger.warning(f"MaxMind database unavailable at {self.database_path}: {e}")
            raise
        return self._reader

    async def is_available(self) -> bool:
        try:
            self._ensure_reader()
            return True
        except (OSError, ValueError):
            return False

    async def lookup(self, ip: str) -> GeoIPResult:
        if is_private_ip(ip):
            return GeoIPResult.fail(GeoIPErrorCode.PRIVATE_IP, PRIVATE_IP_MESSAGE)

        try:
            reader = self._ensure_reader()
        except (OSError, ValueError):
            return GeoIPResult.fail(GeoIPErrorCode.DATABASE_NOT_FOUND, path=self.database_path)

        try:
            response = reader.city(ip)
        except geoip2.errors.AddressNotFoundError:
            return GeoIPResult.fail(GeoIPErrorCode.LOOKUP_FAILED, "No data found for IP")
        except ValueError as e:
            return GeoIPResult.fail(GeoIPErrorCode.INVALID_IP, str(e))
        except Exception as e:
            logger.error(f"MaxMind lookup failed for address: {e}", exc_info=True)
            return GeoIPResult.fail(GeoIPErrorCode.LOOKUP_FAILED, str(e))

        subdivision = response.subdivisions.most_specific if response.subdivisions else None
        return GeoIPResult.ok(
            GeoLocation(
                country=response.country.iso_code or "XX",
                country_name=response.country.name or "Unknown",
                city=response.city.name or None,
                region=(subdivision.name if subdivision is not None else None) or None,
                latitude=response.location.latitude,
                longitude=response.location.longitude,
                timezone=response.location.time_zone or None,
            )
        )

    async def close(self) -> None:
        if self._reader is not None and hasattr(self._reader, "close"):
            self._reader.close()
        self._reader = None
