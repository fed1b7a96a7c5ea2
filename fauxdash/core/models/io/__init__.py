"""
I/O models for API requests and responses.

These Pydantic schemas define the contract between API endpoints and clients.
They are kept separate from database entities so the API can evolve
independently of the tables.

Modules:
- admin: CSV import, backup, maintenance and GeoIP test results
- analytics: Analytics response documents and pageview input
- auth: Setup, login, password reset and profile models
- categories: Category models
- favicons: Favicon fetch and variant models
- items: Bookmark and service models
"""

from .admin import (
    CacheClearResponse,
    GeoIPTestResponse,
    GeoIPUploadResponse,
    ImportResult,
    PruneResponse,
    RestoreResponse,
    VacuumResponse,
)
from .analytics import (
    ClicksDataset,
    ClicksResponse,
    FaviconFile,
    FaviconFileGroup,
    FaviconStatsResponse,
    GeoLocationCount,
    GeoResponse,
    HeatmapCell,
    HeatmapResponse,
    PageviewCreate,
    RollupResponse,
    StatsResponse,
    SummaryResponse,
    SummaryWindow,
    TopCountry,
    TopItem,
    TopItemsResponse,
    TrendValue,
)
from .auth import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    PasswordChange,
    ProfileUpdate,
    ResetPasswordRequest,
    SetupInit,
    SetupStatus,
    SmtpStatus,
    TokenStatus,
    UserRead,
)
from .categories import CategoryCreate, CategoryRead, CategoryUpdate
from .favicons import (
    ColorResponse,
    FaviconBatchItem,
    FaviconBatchRequest,
    FaviconBatchResponse,
    FaviconColorRequest,
    FaviconFetchRequest,
    FaviconFetchResponse,
    FaviconVariantRequest,
    GrayscaleResponse,
    InvertResponse,
    MonotoneResponse,
)
from .items import (
    BookmarkCreate,
    BookmarkRead,
    BookmarkUpdate,
    CategoryWithBookmarks,
    ClickResponse,
    ServiceCategoryWithServices,
    ServiceCreate,
    ServiceRead,
    ServiceUpdate,
)

__all__ = [
    "BookmarkCreate",
    "BookmarkRead",
    "BookmarkUpdate",
    "CacheClearResponse",
    "CategoryCreate",
    "CategoryRead",
    "CategoryUpdate",
    "CategoryWithBookmarks",
    "ClickResponse",
    "ClicksDataset",
    "ClicksResponse",
    "ColorResponse",
    "FaviconBatchItem",
    "FaviconBatchRequest",
    "FaviconBatchResponse",
    "FaviconColorRequest",
    "FaviconFetchRequest",
    "FaviconFetchResponse",
    "FaviconFile",
    "FaviconFileGroup",
    "FaviconStatsResponse",
    "FaviconVariantRequest",
    "ForgotPasswordRequest",
    "GeoIPTestResponse",
    "GeoIPUploadResponse",
    "GeoLocationCount",
    "GeoResponse",
    "GrayscaleResponse",
    "HeatmapCell",
    "HeatmapResponse",
    "ImportResult",
    "InvertResponse",
    "LoginRequest",
    "MessageResponse",
    "MonotoneResponse",
    "PageviewCreate",
    "PasswordChange",
    "ProfileUpdate",
    "PruneResponse",
    "ResetPasswordRequest",
    "RestoreResponse",
    "RollupResponse",
    "ServiceCategoryWithServices",
    "ServiceCreate",
    "ServiceRead",
    "ServiceUpdate",
    "SetupInit",
    "SetupStatus",
    "SmtpStatus",
    "StatsResponse",
    "SummaryResponse",
    "SummaryWindow",
    "TokenStatus",
    "TopCountry",
    "TopItem",
    "TopItemsResponse",
    "TrendValue",
    "UserRead",
    "VacuumResponse",
]
