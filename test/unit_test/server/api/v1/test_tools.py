from datetime import timedelta
from pathlib import Path

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select

from fauxdash.core.database import utc_now
from fauxdash.core.database.entities import GeoCache, Setting
from fauxdash.server.api.v1.tools import vacuum_db

pytestmark = pytest.mark.asyncio


async def test_prune_orphans(admin_client: AsyncClient, favicon_directory: Path):
    category = (await admin_client.post("/api/v1/categories", json={"name": "Media"})).json()
    await admin_client.post(
        "/api/v1/bookmarks",
        json={
            "name": "Tube",
            "url": "https://tube.mock",
            "category_id": category["id"],
            "icon": "favicon:/api/v1/favicons/serve/tube_mock_1.png",
        },
    )
    for name in ("tube_mock_1.png", "tube_mock_1_original.png", "tube_mock_1_inverted.png", "old_site_2.png"):
        (favicon_directory / name).write_bytes(b"x" * 2048)

    response = await admin_client.post("/api/v1/tools/prune-orphans")
    assert response.status_code == 200
    assert response.json() == {"total_files": 4, "removed": 1, "space_freed": "2.00 KB"}
    assert sorted(p.name for p in favicon_directory.iterdir()) == [
        "tube_mock_1.png",
        "tube_mock_1_inverted.png",
        "tube_mock_1_original.png",
    ]


async def test_clear_caches(admin_client: AsyncClient, session, session_maker):
    session.add_all(
        [
            GeoCache(ip_hash="old", country="DE", expires_at=utc_now() - timedelta(days=1)),
            GeoCache(ip_hash="fresh", country="FR", expires_at=utc_now() + timedelta(days=1)),
        ]
    )
    await session.commit()

    await admin_client.get("/api/v1/settings")
    session.add(Setting(key="siteTitle", value="Behind the cache"))
    await session.commit()
    assert (await admin_client.get("/api/v1/settings")).json()["siteTitle"] == "Faux|Dash"

    response = await admin_client.post("/api/v1/cache/clear")
    assert response.status_code == 200
    assert response.json() == {"cleared": ["categories", "settings", "geoip"]}

    assert (await admin_client.get("/api/v1/settings")).json()["siteTitle"] == "Behind the cache"
    async with session_maker() as fresh:
        remaining = (await fresh.execute(select(GeoCache.ip_hash))).scalars().all()
    assert remaining == ["fresh"]


async def test_tools_require_admin(user_client: AsyncClient):
    response = await user_client.post("/api/v1/cache/clear")
    assert response.status_code == 403


async def test_vacuum_file_database(tmp_path: Path):
    db_path = tmp_path / "fauxdash.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    try:
        async with async_sessionmaker(engine, class_=AsyncSession)() as session:
            result = await vacuum_db(session=session)
    finally:
        await engine.dispose()

    assert result.success is True
    assert result.size_before > 0
    assert result.size_after is not None
    assert result.size_after > 0
