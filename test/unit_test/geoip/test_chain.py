from typing import List, Optional

import pytest

from fauxdash.geoip import (
    ChainProvider,
    GeoIPErrorCode,
    GeoIPProvider,
    GeoIPResult,
    GeoLocation,
)

pytestmark = pytest.mark.asyncio


class ScriptedProvider(GeoIPProvider):
    def __init__(self, name: str, result: GeoIPResult, available: bool = True) -> None:
        self.name = name
        self.result = result
        self.available = available
        self.calls: List[str] = []
        self.closed = False

    async def lookup(self, ip: str) -> GeoIPResult:
        self.calls.append(ip)
        return self.result

    async def is_available(self) -> bool:
        return self.available

    async def close(self) -> None:
        self.closed = True


def _fail(code: GeoIPErrorCode, message: Optional[str] = None) -> GeoIPResult:
    return GeoIPResult.fail(code, message)


PARIS = GeoLocation(country="FR", country_name="France", city="Paris")


async def test_falls_through_to_next_provider_and_caches():
    first = ScriptedProvider("maxmind", _fail(GeoIPErrorCode.DATABASE_NOT_FOUND))
    second = ScriptedProvider("ipinfo", GeoIPResult.ok(PARIS))
    chain = ChainProvider([first, second])

    assert (await chain.lookup("8.8.8.8")).data == PARIS
    assert (await chain.lookup("8.8.8.8")).data == PARIS

    assert first.calls == ["8.8.8.8"]
    assert second.calls == ["8.8.8.8"]


async def test_private_address_stops_the_chain():
    first = ScriptedProvider("maxmind", _fail(GeoIPErrorCode.PRIVATE_IP))
    second = ScriptedProvider("ipinfo", GeoIPResult.ok(PARIS))

    result = await ChainProvider([first, second]).lookup("10.0.0.1")

    assert result.error.code == GeoIPErrorCode.PRIVATE_IP
    assert second.calls == []


async def test_all_providers_failing():
    chain = ChainProvider(
        [
            ScriptedProvider("maxmind", _fail(GeoIPErrorCode.DATABASE_NOT_FOUND)),
            ScriptedProvider("ipinfo", _fail(GeoIPErrorCode.RATE_LIMITED)),
        ]
    )

    result = await chain.lookup("8.8.8.8")
    assert result.error.code == GeoIPErrorCode.PROVIDER_UNAVAILABLE
    assert result.error.message == "All providers failed"


async def test_availability_names_and_close():
    first = ScriptedProvider("maxmind", GeoIPResult.ok(PARIS), available=False)
    second = ScriptedProvider("ipinfo", GeoIPResult.ok(PARIS), available=True)
    chain = ChainProvider([first, second])

    assert chain.provider_names == ["maxmind", "ipinfo"]
    assert await chain.is_available() is True
    assert await ChainProvider([first]).is_available() is False

    await chain.close()
    assert first.closed and second.closed
