from datetime import timedelta

import pytest
from sqlmodel import select

from fauxdash.core.database import utc_now
from fauxdash.core.database.entities import GeoCache, Pageview
from fauxdash.geoip import GeoIPErrorCode, GeoIPProvider, GeoIPResult, GeoLocation, geoip_registry, hash_ip
from fauxdash.server.services.pageview_service import enrich_pageview, record_pageview


class FakeProvider(GeoIPProvider):
    name = "fake"

    def __init__(self, result: GeoIPResult) -> None:
        self.result = result
        self.lookups = []

    async def lookup(self, ip: str) -> GeoIPResult:
        self.lookups.append(ip)
        return self.result

    async def is_available(self) -> bool:
        return True


@pytest.fixture
def use_provider(monkeypatch):
    def _install(result: GeoIPResult) -> FakeProvider:
        provider = FakeProvider(result)

        async def fake_get(options):
            return provider

        monkeypatch.setattr(geoip_registry, "get", fake_get)
        return provider

    return _install


async def _reload(session_maker, pageview_id):
    async with session_maker() as fresh:
        return await fresh.get(Pageview, pageview_id)


@pytest.mark.asyncio
async def test_record_pageview_hashes_address(session):
    pageview = await record_pageview(session, "/home", "203.0.113.9", "agent/1.0")
    assert pageview.id is not None
    assert pageview.ip_hash == hash_ip("203.0.113.9")
    assert "203.0.113.9" not in pageview.model_dump_json()
    assert pageview.geo_enriched is False


@pytest.mark.asyncio
async def test_enrich_uses_provider_and_fills_cache(session, session_maker, use_provider):
    provider = use_provider(GeoIPResult.ok(GeoLocation(country="JP", country_name="Japan", city="Tokyo")))
    pageview = await record_pageview(session, "/", "8.8.4.4", None)

    await enrich_pageview(session_maker, pageview.id, "8.8.4.4")

    stored = await _reload(session_maker, pageview.id)
    assert (stored.country, stored.country_name, stored.city, stored.geo_enriched) == ("JP", "Japan", "Tokyo", True)
    assert provider.lookups == ["8.8.4.4"]

    async with session_maker() as fresh:
        cached = (await fresh.execute(select(GeoCache))).scalars().one()
    assert cached.ip_hash == hash_ip("8.8.4.4")
    assert cached.provider == "fake"
    assert cached.expires_at > utc_now() + timedelta(days=29)


@pytest.mark.asyncio
async def test_enrich_prefers_cache(session, session_maker, use_provider):
    provider = use_provider(GeoIPResult.ok(GeoLocation(country="JP")))
    session.add(
        GeoCache(ip_hash=hash_ip("8.8.4.4"), country="NL", country_name="Netherlands", expires_at=utc_now() + timedelta(hours=1))
    )
    await session.commit()
    pageview = await record_pageview(session, "/", "8.8.4.4", None)

    await enrich_pageview(session_maker, pageview.id, "8.8.4.4")

    assert (await _reload(session_maker, pageview.id)).country == "NL"
    assert provider.lookups == []


@pytest.mark.asyncio
async def test_enrich_marks_failed_lookup(session, session_maker, use_provider):
    use_provider(GeoIPResult.fail(GeoIPErrorCode.RATE_LIMITED, retry_after=30))
    pageview = await record_pageview(session, "/", "8.8.4.4", None)

    await enrich_pageview(session_maker, pageview.id, "8.8.4.4")

    stored = await _reload(session_maker, pageview.id)
    assert stored.geo_enriched is True
    assert stored.country is None


@pytest.mark.asyncio
async def test_enrich_skips_private_addresses(session, session_maker, use_provider):
    provider = use_provider(GeoIPResult.ok(GeoLocation(country="JP")))
    pageview = await record_pageview(session, "/", "10.1.2.3", None)

    await enrich_pageview(session_maker, pageview.id, "10.1.2.3")

    assert (await _reload(session_maker, pageview.id)).geo_enriched is True
    assert provider.lookups == []


@pytest.mark.asyncio
async def test_enrich_never_raises(session_maker, monkeypatch):
    async def broken_get(options):
        raise RuntimeError("provider exploded")

    monkeypatch.setattr(geoip_registry, "get", broken_get)

    await enrich_pageview(session_maker, 12345, "8.8.4.4")

    def broken_factory():
        raise RuntimeError("no database")

    await enrich_pageview(broken_factory, 1, "8.8.4.4")
