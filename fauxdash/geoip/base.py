"""
GeoIP provider types and interfaces.

Providers never raise for expected failures. Every lookup returns a
:class:`GeoIPResult` that either carries a :class:`GeoLocation` or a
:class:`GeoIPError` with a machine-readable code, so callers can tell a rate
limit apart from a missing database without catching exceptions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class GeoLocation(BaseModel):
    """Where an address is, as far as a provider can tell."""

    country: str = Field(default="XX", description="ISO 3166-1 alpha-2 code, XX when unknown")
    country_name: str = Field(default="Unknown")
    city: Optional[str] = None
    region: Optional[str] = Field(default=None, description="State or province")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None


class GeoIPErrorCode(str, Enum):
    """Failure categories reported by providers."""

    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    INVALID_IP = "INVALID_IP"
    RATE_LIMITED = "RATE_LIMITED"
    DATABASE_NOT_FOUND = "DATABASE_NOT_FOUND"
    LOOKUP_FAILED = "LOOKUP_FAILED"
    PRIVATE_IP = "PRIVATE_IP"


class GeoIPError(BaseModel):
    """Why a lookup did not produce a location."""

    code: GeoIPErrorCode
    message: Optional[str] = None
    retry_after: Optional[int] = Field(default=None, description="Seconds, for RATE_LIMITED")
    path: Optional[str] = Field(default=None, description="Database path, for DATABASE_NOT_FOUND")


class GeoIPResult(BaseModel):
    """Outcome of a lookup: ``data`` on success, ``error`` otherwise."""

    success: bool
    data: Optional[GeoLocation] = None
    error: Optional[GeoIPError] = None

    @classmethod
    def ok(cls, data: GeoLocation) -> "GeoIPResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: GeoIPErrorCode, message: Optional[str] = None, **details) -> "GeoIPResult":
        return cls(success=False, error=GeoIPError(code=code, message=message, **details))


PRIVATE_IP_MESSAGE = "Cannot geolocate private IP addresses"


class GeoIPProvider(ABC):
    """Interface every GeoIP backend implements."""

    name: str = "base"

    @abstractmethod
    async def lookup(self, ip: str) -> GeoIPResult:
        """Resolve an address to a location.

        Args:
            ip: IPv4 or IPv6 address as text

        Returns:
            GeoIPResult with either data or an error
        """

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether the backend can currently answer lookups."""

    async def close(self) -> None:
        """Release any held resources."""


class DisabledProvider(GeoIPProvider):
    """Stand-in used when geolocation is switched off."""

    name = "disabled"

    async def lookup(self, ip: str) -> GeoIPResult:
        return GeoIPResult.fail(GeoIPErrorCode.PROVIDER_UNAVAILABLE, "GeoIP is disabled")

    async def is_available(self) -> bool:
        return False
