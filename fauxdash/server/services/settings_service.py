"""
Settings Service.

Dashboard preferences are stored as string key/value rows, globally
(``user_id`` NULL) and per user. This module turns those rows into the typed
settings document the API returns:

1. start from the global rows
2. overlay the user's rows, except for global-only keys
3. fill gaps from environment fallbacks, then typed defaults
4. mask secrets, replacing them with ``""`` plus a ``<key>Set`` flag
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from cachetools import TTLCache
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database.repositories import SettingRepository
from fauxdash.core.logging_config import get_logger

from ..core.config import settings as app_settings

logger = get_logger(__name__)

SETTING_DEFAULTS: Dict[str, Any] = {
    # Search
    "searchEnabled": True,
    "searchInHeader": False,
    "searchEngine": "duckduckgo",
    "customSearchName": "",
    "customSearchUrl": "",
    # Theme and branding
    "defaultTheme": "system",
    "themeColor": "Slate",
    "siteTitle": "Faux|Dash",
    "siteTitleEnabled": True,
    "siteTitleUseGradient": True,
    "siteTitleGradientFrom": "#0f172a",
    "siteTitleGradientTo": "#475569",
    "siteTitleColor": "#0f172a",
    "siteFavicon": "",
    "siteFaviconType": "default",
    "headerLogoEnabled": False,
    "headerLogoPath": "",
    "headerLogoType": "none",
    "headerLogoPosition": "left",
    "headerLogoHeight": 40,
    "backgroundImage": "",
    "backgroundDisplayMode": "cover",
    "backgroundOpacity": 100,
    "backgroundShowLoggedOut": False,
    # Greeting and clock
    "welcomeMessage": "Welcome back",
    "welcomeMessageEnabled": True,
    "welcomeMessageTimeBased": False,
    "welcomeMessageMorning": "Good Morning",
    "welcomeMessageAfternoon": "Good Afternoon",
    "welcomeMessageEvening": "Good Evening",
    "dateTimeEnabled": False,
    "dateTimePosition": "left",
    "dateTimeDisplayMode": "text",
    "dateFormat": "EEEE, MMMM d, yyyy",
    "timeEnabled": False,
    "timeFormat": "12",
    "showSeconds": False,
    # Layout
    "showDescriptions": False,
    "servicesPosition": "above",
    "servicesIconSize": 32,
    "servicesFontSize": 16,
    "servicesDescriptionSpacing": 4,
    "servicesItemSpacing": 8,
    "servicesColumns": 4,
    "bookmarksIconSize": 32,
    "bookmarksFontSize": 14,
    "bookmarksColumns": 4,
    "descriptionSpacing": 2,
    "itemSpacing": 4,
    "sectionOrder": "services-first",
    # Homepage content
    "homepageDescriptionEnabled": False,
    "homepageDescription": "",
    "homepageGraphicEnabled": False,
    "homepageGraphicPath": "",
    "homepageGraphicMaxWidth": 200,
    "homepageGraphicHAlign": "center",
    "homepageGraphicVAlign": "center",
    "homepageGraphicPosition": "above",
    "homepageGraphicHideWhenLoggedIn": False,
    # Defaults for new items
    "defaultBookmarkCategoryEnabled": True,
    "defaultBookmarkCategoryRequiresAuth": False,
    "defaultBookmarkCategoryItemsToShow": None,
    "defaultBookmarkCategoryShowItemCount": False,
    "defaultBookmarkCategoryAutoExpanded": False,
    "defaultBookmarkCategoryShowOpenAll": False,
    "defaultBookmarkCategorySortBy": "order",
    "defaultServiceCategoryEnabled": True,
    "defaultServiceCategoryRequiresAuth": False,
    "defaultServiceCategoryItemsToShow": None,
    "defaultServiceCategoryShowItemCount": False,
    "defaultServiceCategoryAutoExpanded": False,
    "defaultServiceCategoryShowOpenAll": False,
    "defaultServiceCategorySortBy": "order",
    "defaultBookmarkEnabled": True,
    "defaultBookmarkRequiresAuth": False,
    "defaultServiceEnabled": True,
    "defaultServiceRequiresAuth": False,
    # Authentication
    "disablePasswordLogin": False,
    # GeoIP
    "geoipEnabled": False,
    "geoipProvider": "maxmind",
    "geoipMaxmindPath": "",
    "geoipMaxmindLicenseKey": "",
    "geoipMaxmindAccountId": "",
    "geoipIpinfoToken": "",
    "geoipCacheDuration": 60 * 60 * 24 * 30,
    # SMTP
    "smtpProvider": "none",
    "smtpHost": "",
    "smtpPort": 587,
    "smtpUsername": "",
    "smtpPassword": "",
    "smtpEncryption": "tls",
    "smtpFromEmail": "",
    "smtpFromName": "Faux|Dash",
    "smtpVerified": False,
    # Maintenance
    "logLevel": "info",
    "lastBackupDate": "",
}

SECRET_KEYS = frozenset({"smtpPassword", "geoipIpinfoToken", "geoipMaxmindLicenseKey"})

GLOBAL_ONLY_PREFIXES = ("smtp", "geoip")
GLOBAL_ONLY_KEYS = frozenset({"disablePasswordLogin", "lastBackupDate", "logLevel"})

PUBLIC_KEYS = (
    "disablePasswordLogin",
    "defaultTheme",
    "themeColor",
    "siteTitle",
    "siteTitleEnabled",
    "homepageDescriptionEnabled",
    "homepageDescription",
    "homepageGraphicEnabled",
    "homepageGraphicPath",
    "homepageGraphicMaxWidth",
    "homepageGraphicHAlign",
    "homepageGraphicVAlign",
    "homepageGraphicPosition",
)

LOG_LEVELS = ("debug", "info", "warn", "error")


class UnknownSettingError(ValueError):
    """Raised when a write names a key outside ``SETTING_DEFAULTS``."""


def is_global_only(key: str) -> bool:
    return key in GLOBAL_ONLY_KEYS or key.startswith(GLOBAL_ONLY_PREFIXES)


def env_fallbacks() -> Dict[str, str]:
    """Values from the process environment used when no row exists."""
    smtp = app_settings.smtp
    geoip = app_settings.geoip
    values = {
        "geoipMaxmindPath": geoip.maxmind_path,
        "geoipIpinfoToken": geoip.ipinfo_token or "",
        "smtpHost": smtp.host or "",
        "smtpPort": str(smtp.port),
        "smtpUsername": smtp.username or "",
        "smtpPassword": smtp.password or "",
        "smtpEncryption": smtp.encryption,
        "smtpFromEmail": smtp.from_email or "",
        "smtpFromName": smtp.from_name,
    }
    return {key: value for key, value in values.items() if value}


def coerce_value(raw: Optional[str], default: Any) -> Any:
    """Convert a stored string to the type of its default.

    Booleans that default to True are only false for ``"false"``; booleans
    that default to False are only true for ``"true"``. Integers fall back to
    the default when unparsable.
    """
    if isinstance(default, bool):
        if default:
            return raw != "false"
        return raw == "true"
    if isinstance(default, int) or default is None:
        if raw is None or raw == "":
            return default
        try:
            return int(raw)
        except ValueError:
            return default
    return raw or default


def serialize_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def merge_rows(global_rows: Mapping[str, str], user_rows: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    merged = dict(global_rows)
    for key, value in (user_rows or {}).items():
        if not is_global_only(key):
            merged[key] = value
    return merged


def resolve_settings(raw: Mapping[str, str]) -> Dict[str, Any]:
    """Apply environment fallbacks and typed defaults to raw string values."""
    fallbacks = env_fallbacks()
    resolved: Dict[str, Any] = {}
    for key, default in SETTING_DEFAULTS.items():
        value = raw.get(key) or fallbacks.get(key)
        resolved[key] = coerce_value(value, default)
    return resolved


def mask_secrets(values: Mapping[str, Any]) -> Dict[str, Any]:
    masked = dict(values)
    for key in SECRET_KEYS:
        masked[f"{key}Set"] = bool(masked.get(key))
        masked[key] = ""
    return masked


def public_view(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: values[key] for key in PUBLIC_KEYS}


class GlobalSettingsCache:
    """Read-through cache of the global rows with a short TTL."""

    def __init__(self, ttl: float = 30.0) -> None:
        self._cache: TTLCache = TTLCache(maxsize=1, ttl=ttl)

    async def get(self, session: AsyncSession) -> Dict[str, str]:
        rows = self._cache.get("global")
        if rows is None:
            rows = await SettingRepository(session).get_map(None)
            self._cache["global"] = rows
        return dict(rows)

    def invalidate(self) -> None:
        self._cache.clear()


global_settings_cache = GlobalSettingsCache()


async def get_global_settings(session: AsyncSession) -> Dict[str, Any]:
    """Typed global settings, unmasked. For server-side use only."""
    return resolve_settings(await global_settings_cache.get(session))


async def get_effective_settings(session: AsyncSession, user_id: Optional[int]) -> Dict[str, Any]:
    """Typed settings for one user, with secrets masked."""
    global_rows = await global_settings_cache.get(session)
    user_rows = await SettingRepository(session).get_map(user_id) if user_id is not None else {}
    return mask_secrets(resolve_settings(merge_rows(global_rows, user_rows)))


def prepare_updates(payload: Mapping[str, Any]) -> Dict[str, str]:
    """Validate and stringify a settings write.

    ``<secret>Set`` flags are ignored, and so is an empty string for a secret
    key, since that is what a masked read returns. Send null to clear a secret.

    Args:
        payload: Keys and typed values from the client

    Returns:
        Mapping of key to stored string

    Raises:
        UnknownSettingError: If any key is not a known setting
    """
    unknown = sorted(
        key
        for key in payload
        if key not in SETTING_DEFAULTS and not (key.endswith("Set") and key[:-3] in SECRET_KEYS)
    )
    if unknown:
        raise UnknownSettingError(f"Unknown setting(s): {', '.join(unknown)}")

    updates: Dict[str, str] = {}
    for key, value in payload.items():
        if key not in SETTING_DEFAULTS:
            continue
        if key in SECRET_KEYS and value == "":
            continue
        updates[key] = serialize_value(value)
    return updates


async def save_settings(session: AsyncSession, updates: Mapping[str, str], user_id: Optional[int]) -> int:
    """Upsert rows (global when ``user_id`` is None) and drop the cached globals."""
    written = await SettingRepository(session).upsert_many(dict(updates), user_id)
    global_settings_cache.invalidate()
    logger.info(f"Saved {written} setting(s) for {'global scope' if user_id is None else f'user {user_id}'}")
    return written
