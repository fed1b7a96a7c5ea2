"""
Unit tests for FastAPI application lifespan management.

Startup creates missing tables; a failing database must not keep the server
from starting. Shutdown releases the GeoIP provider.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI

from fauxdash.core.database import session as db_session
from fauxdash.server.main import lifespan

pytestmark = pytest.mark.asyncio


class TestLifespan:
    async def test_startup_initializes_database_and_shutdown_resets_geoip(self):
        with (
            patch("fauxdash.server.main.init_db", new_callable=AsyncMock) as mock_init_db,
            patch("fauxdash.server.main.geoip_registry") as mock_registry,
        ):
            mock_registry.reset = AsyncMock()

            async with lifespan(FastAPI()):
                mock_init_db.assert_awaited_once()
                mock_registry.reset.assert_not_awaited()

            mock_registry.reset.assert_awaited_once()

    async def test_database_failure_is_logged_not_raised(self, caplog):
        with (
            patch("fauxdash.server.main.init_db", new_callable=AsyncMock, side_effect=RuntimeError("disk full")),
            patch("fauxdash.server.main.geoip_registry") as mock_registry,
        ):
            mock_registry.reset = AsyncMock()
            caplog.set_level("ERROR", logger="fauxdash.server.main")

            async with lifespan(FastAPI()):
                pass

        assert "Database initialization failed: disk full" in caplog.text


class TestInitDb:
    async def test_creates_tables_when_enabled(self):
        with (
            patch.object(db_session.settings, "database_create_tables", True),
            patch("fauxdash.core.database.session.create_all", new_callable=AsyncMock) as mock_create_all,
        ):
            await db_session.init_db()

        mock_create_all.assert_awaited_once_with(db_session.engine)

    async def test_skips_when_migrations_manage_schema(self):
        with (
            patch.object(db_session.settings, "database_create_tables", False),
            patch("fauxdash.core.database.session.create_all", new_callable=AsyncMock) as mock_create_all,
        ):
            await db_session.init_db()

        mock_create_all.assert_not_awaited()
