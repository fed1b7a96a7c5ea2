"""
I/O models for admin tools: CSV import, backup restore, maintenance and GeoIP test.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ImportResult(BaseModel):
    imported: int = 0
    skipped: int = 0
    categories_created: int = 0
    errors: List[str] = Field(default_factory=list)


class RestoreResponse(BaseModel):
    success: bool
    bookmarks_created: int
    services_created: int
    bookmark_categories_created: int
    service_categories_created: int
    settings_restored: int
    analytics_restored: int
    errors: List[str]


class PruneResponse(BaseModel):
    total_files: int
    removed: int
    space_freed: str


class VacuumResponse(BaseModel):
    success: bool
    size_before: Optional[int] = None
    size_after: Optional[int] = None


class CacheClearResponse(BaseModel):
    cleared: List[str]


class GeoIPTestResponse(BaseModel):
    ip: str
    provider: str
    providers: List[str] = Field(default_factory=list)
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None
    duration_ms: float


class GeoIPUploadResponse(BaseModel):
    success: bool = True
    message: str
    path: str = Field(description="Value to store in the geoipMaxmindPath setting")
    filename: str
