"""
Favicon I/O models.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class FaviconFetchRequest(BaseModel):
    url: str = Field(min_length=1, description="Site URL, or the icon URL itself when direct")
    is_direct_favicon_url: bool = Field(default=False, description="Fetch only the given URL")


class FaviconFetchResponse(BaseModel):
    success: bool
    path: Optional[str] = Field(default=None, description="Serve path of the stored PNG")
    filename: Optional[str] = None
    domain: Optional[str] = None


class FaviconVariantRequest(BaseModel):
    filename: str = Field(min_length=1, description="Stored favicon file name or serve path")


class GrayscaleResponse(BaseModel):
    black: str
    white: str


class InvertResponse(BaseModel):
    path: str


class MonotoneResponse(BaseModel):
    path: str = Field(description="Serve path stem; append _black.png or _white.png")
    cached: bool = False


class FaviconColorRequest(FaviconVariantRequest):
    color: str = Field(min_length=1, max_length=32, description="#rrggbb or a theme colour name")
    item_url: Optional[str] = Field(default=None, description="Site to fetch from again when the source is unreadable")


class ColorResponse(BaseModel):
    path: str
    cached: bool = False


class FaviconBatchRequest(BaseModel):
    ids: List[int] = Field(min_length=1, description="Bookmark or service ids")
    type: Literal["bookmark", "service"]


class FaviconBatchItem(BaseModel):
    id: int
    success: bool
    path: Optional[str] = Field(default=None, description="New icon reference, favicon:<serve path>")
    error: Optional[str] = None


class FaviconBatchResponse(BaseModel):
    success: bool = True
    results: List[FaviconBatchItem]
    total: int
    successful: int
