"""
Database entities, one module per table family.
"""

from .analytics import AnalyticsDaily, BookmarkClick, Pageview, ServiceClick
from .categories import SORT_OPTIONS, Category, ServiceCategory
from .geo_cache import GeoCache
from .items import Bookmark, Service
from .settings import Setting
from .users import PasswordResetToken, User

__all__ = [
    "AnalyticsDaily",
    "Bookmark",
    "BookmarkClick",
    "Category",
    "GeoCache",
    "Pageview",
    "PasswordResetToken",
    "SORT_OPTIONS",
    "Service",
    "ServiceCategory",
    "ServiceClick",
    "Setting",
    "User",
]
