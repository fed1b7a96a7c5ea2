"""
Data access layer, one repository per table family.
"""

from .analytics import AnalyticsRepository
from .base import AsyncBaseRepository, QueryBuilder, SQLModelRepository
from .categories import CategoryRepository
from .geo_cache import GeoCacheRepository
from .items import BookmarkRepository, LinkRepository, ServiceRepository
from .settings import SettingRepository
from .users import PasswordResetTokenRepository, UserRepository

__all__ = [
    "AnalyticsRepository",
    "AsyncBaseRepository",
    "BookmarkRepository",
    "CategoryRepository",
    "GeoCacheRepository",
    "LinkRepository",
    "PasswordResetTokenRepository",
    "QueryBuilder",
    "SQLModelRepository",
    "ServiceRepository",
    "SettingRepository",
    "UserRepository",
]
