"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
signed cookie sessions), registers exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from fauxdash.core.database import init_db
from fauxdash.core.logging_config import get_logger, setup_logging
from fauxdash.geoip import geoip_registry

from .api.v1 import (
    analytics,
    auth,
    backup,
    bookmarks,
    categories,
    favicons,
    geoip,
    health,
    pageviews,
    service_categories,
    services,
    settings as settings_api,
    setup,
    tools,
    users,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables on startup and releases the GeoIP provider
    (database reader, HTTP client) on shutdown.
    """
    # Startup
    try:
        logger.info("Starting up FauxDash Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down FauxDash Server...")
    await geoip_registry.reset()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    FauxDash Server API

    Backend of a self-hosted start page: bookmarks and services grouped into
    categories, appearance settings, visit and click analytics, favicon
    fetching, CSV import/export and backups.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)

# The cookie outlives the longest remember-me choice; the session itself
# carries the real expiry.
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session.secret,
    session_cookie=settings.session.cookie_name,
    max_age=constant.MAX_REMEMBER_DAYS * 86400,
    same_site="lax",
    https_only=settings.session.https_only,
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(setup.router, prefix=f"{constant.API_V1_STR}/setup", tags=["setup"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{constant.API_V1_STR}/user", tags=["user"])
app.include_router(categories.router, prefix=f"{constant.API_V1_STR}/categories", tags=["categories"])
app.include_router(bookmarks.router, prefix=f"{constant.API_V1_STR}/bookmarks", tags=["bookmarks"])
app.include_router(
    service_categories.router, prefix=f"{constant.API_V1_STR}/service-categories", tags=["service-categories"]
)
app.include_router(services.router, prefix=f"{constant.API_V1_STR}/services", tags=["services"])
app.include_router(settings_api.router, prefix=f"{constant.API_V1_STR}/settings", tags=["settings"])
app.include_router(pageviews.router, prefix=f"{constant.API_V1_STR}/pageview", tags=["pageviews"])
app.include_router(analytics.router, prefix=f"{constant.API_V1_STR}/analytics", tags=["analytics"])
app.include_router(favicons.router, prefix=f"{constant.API_V1_STR}/favicons", tags=["favicons"])
app.include_router(geoip.router, prefix=f"{constant.API_V1_STR}/geoip", tags=["geoip"])
app.include_router(backup.router, prefix=constant.API_V1_STR, tags=["backup"])
app.include_router(tools.router, prefix=constant.API_V1_STR, tags=["tools"])


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "fauxdash.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
