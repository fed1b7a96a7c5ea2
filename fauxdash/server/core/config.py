"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.

Runtime preferences that administrators edit through the API (site title, GeoIP
provider choice, SMTP credentials, ...) live in the ``settings`` table instead.
The values here are process-level: where the database is, how sessions are
signed, and fallbacks for the SMTP and GeoIP integrations.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///./data/fauxdash.db",
        alias="DATABASE_URL",
        description="Async SQLAlchemy connection URL",
    )
    create_tables: bool = Field(
        default=True,
        alias="DATABASE_CREATE_TABLES",
        description="Create missing tables on startup (disable when Alembic owns the schema)",
    )

    model_config = {"populate_by_name": True}


class SessionConfig(BaseModel):
    """Signed cookie session configuration."""

    secret: str = Field(
        default="change-me-to-a-long-random-string",
        alias="SESSION_SECRET",
        description="Secret key used to sign the session cookie",
    )
    max_age_days: int = Field(
        default=2, alias="SESSION_MAX_AGE_DAYS", description="Default session lifetime in days"
    )
    cookie_name: str = Field(default="fauxdash_session", alias="SESSION_COOKIE_NAME", description="Cookie name")
    https_only: bool = Field(
        default=False, alias="SESSION_HTTPS_ONLY", description="Only send the session cookie over HTTPS"
    )

    model_config = {"populate_by_name": True}


class GeoIPConfig(BaseModel):
    """GeoIP fallbacks used when the settings table has no value."""

    maxmind_path: str = Field(
        default="./data/GeoLite2-City.mmdb",
        alias="GEOIP_MAXMIND_PATH",
        description="Path to the MaxMind GeoLite2-City database",
    )
    data_dir: str = Field(
        default="./data", alias="GEOIP_DATA_DIR", description="Directory that receives uploaded MaxMind databases"
    )
    ipinfo_token: Optional[str] = Field(
        default=None, alias="GEOIP_IPINFO_TOKEN", description="ipinfo.io API token (optional)"
    )
    ip_hash_salt: str = Field(
        default="fauxdash-default-salt-please-change",
        alias="IP_HASH_SALT",
        description="Salt mixed into visitor IP hashes",
    )

    model_config = {"populate_by_name": True}


class SMTPConfig(BaseModel):
    """SMTP fallbacks used when the settings table has no value."""

    host: Optional[str] = Field(default=None, alias="SMTP_HOST", description="SMTP server host")
    port: int = Field(default=587, alias="SMTP_PORT", description="SMTP server port")
    username: Optional[str] = Field(default=None, alias="SMTP_USERNAME", description="SMTP login user")
    password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD", description="SMTP login password")
    encryption: str = Field(default="tls", alias="SMTP_ENCRYPTION", description="Encryption mode (tls, ssl, none)")
    from_email: Optional[str] = Field(default=None, alias="SMTP_FROM_EMAIL", description="Sender address")
    from_name: str = Field(default="Faux|Dash", alias="SMTP_FROM_NAME", description="Sender display name")

    model_config = {"populate_by_name": True}


class FaviconConfig(BaseModel):
    """Favicon storage configuration."""

    directory: str = Field(
        default="./data/favicons", alias="FAVICON_DIR", description="Directory where fetched favicons are stored"
    )
    fetch_timeout: float = Field(
        default=10.0, alias="FAVICON_FETCH_TIMEOUT", description="Per-source fetch timeout in seconds"
    )

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # FauxDash Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="FauxDash server host address to bind to",
        alias="FAUXDASH_SERVER_HOST",
    )
    server_port: int = Field(
        default=3000,
        description="FauxDash server port number",
        alias="FAUXDASH_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="FauxDash server logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="FAUXDASH_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="FAUXDASH_LOG_FORMAT",
    )
    public_base_url: str = Field(
        default="http://localhost:3000",
        description="Externally reachable base URL, used in emailed links",
        alias="PUBLIC_BASE_URL",
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/fauxdash.db",
        description="Async SQLAlchemy connection URL for application database",
        alias="DATABASE_URL",
    )
    database_create_tables: bool = Field(default=True, alias="DATABASE_CREATE_TABLES")

    # =====================================================================
    # Session Configuration
    # =====================================================================
    session_secret: str = Field(default="change-me-to-a-long-random-string", alias="SESSION_SECRET")
    session_max_age_days: int = Field(default=2, alias="SESSION_MAX_AGE_DAYS")
    session_cookie_name: str = Field(default="fauxdash_session", alias="SESSION_COOKIE_NAME")
    session_https_only: bool = Field(default=False, alias="SESSION_HTTPS_ONLY")

    # =====================================================================
    # GeoIP / Privacy Configuration
    # =====================================================================
    geoip_maxmind_path: str = Field(default="./data/GeoLite2-City.mmdb", alias="GEOIP_MAXMIND_PATH")
    geoip_data_dir: str = Field(default="./data", alias="GEOIP_DATA_DIR")
    geoip_ipinfo_token: Optional[str] = Field(default=None, alias="GEOIP_IPINFO_TOKEN")
    ip_hash_salt: str = Field(default="fauxdash-default-salt-please-change", alias="IP_HASH_SALT")

    # =====================================================================
    # SMTP Configuration
    # =====================================================================
    smtp_host: Optional[str] = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: Optional[str] = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD")
    smtp_encryption: str = Field(default="tls", alias="SMTP_ENCRYPTION")
    smtp_from_email: Optional[str] = Field(default=None, alias="SMTP_FROM_EMAIL")
    smtp_from_name: str = Field(default="Faux|Dash", alias="SMTP_FROM_NAME")

    # =====================================================================
    # Favicon Configuration
    # =====================================================================
    favicon_dir: str = Field(default="./data/favicons", alias="FAVICON_DIR")
    favicon_fetch_timeout: float = Field(default=10.0, alias="FAVICON_FETCH_TIMEOUT")

    # =====================================================================
    # CORS Configuration
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def database(self) -> DatabaseConfig:
        """Get database configuration from environment variables."""
        return DatabaseConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def session(self) -> SessionConfig:
        """Get session cookie configuration from environment variables."""
        return SessionConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def geoip(self) -> GeoIPConfig:
        """Get GeoIP fallback configuration from environment variables."""
        return GeoIPConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def smtp(self) -> SMTPConfig:
        """Get SMTP fallback configuration from environment variables."""
        return SMTPConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def favicons(self) -> FaviconConfig:
        """Get favicon storage configuration from environment variables."""
        return FaviconConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
