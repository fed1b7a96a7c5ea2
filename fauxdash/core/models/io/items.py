"""
Bookmark and service I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .categories import CategoryRead


class LinkRead(BaseModel):
    id: int
    name: str
    url: str
    description: Optional[str] = None
    icon: Optional[str] = None
    order: int
    is_visible: bool
    requires_auth: bool
    click_count: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookmarkRead(LinkRead):
    """Schema for reading a bookmark from API."""

    category_id: int


class ServiceRead(LinkRead):
    """Schema for reading a service from API."""

    category_id: Optional[int] = None


class LinkCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    url: str = Field(min_length=1, description="Target URL")
    description: Optional[str] = None
    icon: Optional[str] = Field(default=None, description="Icon reference, e.g. 'favicon:/api/v1/favicons/serve/x.png'")
    order: int = 0
    is_visible: bool = True
    requires_auth: bool = False


class BookmarkCreate(LinkCreate):
    """Schema for creating a bookmark via API."""

    category_id: int = Field(description="Owning category id")


class ServiceCreate(LinkCreate):
    """Schema for creating a service via API."""

    category_id: Optional[int] = Field(default=None, description="Owning service category id, or none")


class LinkUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    url: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    order: Optional[int] = None
    is_visible: Optional[bool] = None
    requires_auth: Optional[bool] = None

    @field_validator("name", "url", "order", "is_visible", "requires_auth")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("cannot be null")
        return value


class BookmarkUpdate(LinkUpdate):
    category_id: Optional[int] = None


class ServiceUpdate(LinkUpdate):
    category_id: Optional[int] = None


class CategoryWithBookmarks(CategoryRead):
    """A category with the bookmarks visible to the caller."""

    bookmarks: List[BookmarkRead] = Field(default_factory=list)


class ServiceCategoryWithServices(CategoryRead):
    """A service category with the services visible to the caller."""

    services: List[ServiceRead] = Field(default_factory=list)


class ClickResponse(BaseModel):
    success: bool = True
