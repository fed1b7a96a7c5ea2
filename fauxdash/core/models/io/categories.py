"""
Category I/O models for API requests and responses.

Bookmark categories and service categories share one set of schemas; the
nested ``*WithBookmarks`` / ``*WithServices`` variants live in ``items``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CategoryRead(BaseModel):
    """Schema for reading a category from API."""

    id: int
    name: str
    icon: Optional[str] = None
    order: int
    columns: int
    is_visible: bool
    requires_auth: bool
    items_to_show: Optional[int] = None
    show_item_count: bool
    auto_expanded: bool
    show_open_all: bool
    sort_by: str = Field(description="order, name_asc, name_desc, clicks_asc or clicks_desc")
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    """Schema for creating a category via API."""

    name: str = Field(min_length=1, max_length=255, description="Category title")
    icon: Optional[str] = Field(default=None, description="Icon reference")
    order: int = Field(default=0, description="Position on the page, ascending")
    columns: int = Field(default=1, ge=1, le=12)
    is_visible: bool = True
    requires_auth: bool = Field(default=False, description="Hide from anonymous visitors")
    items_to_show: Optional[int] = Field(default=5, ge=1)
    show_item_count: bool = True
    auto_expanded: bool = False
    show_open_all: bool = False
    sort_by: str = Field(default="order", max_length=32)


class CategoryUpdate(BaseModel):
    """Schema for updating a category via API."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    icon: Optional[str] = None
    order: Optional[int] = None
    columns: Optional[int] = Field(default=None, ge=1, le=12)
    is_visible: Optional[bool] = None
    requires_auth: Optional[bool] = None
    items_to_show: Optional[int] = Field(default=None, ge=1)
    show_item_count: Optional[bool] = None
    auto_expanded: Optional[bool] = None
    show_open_all: Optional[bool] = None
    sort_by: Optional[str] = Field(default=None, max_length=32)

    @field_validator(
        "name",
        "order",
        "columns",
        "is_visible",
        "requires_auth",
        "show_item_count",
        "auto_expanded",
        "show_open_all",
        "sort_by",
    )
    @classmethod
    def _not_null(cls, value):
        """Only ``icon`` and ``items_to_show`` may be cleared with an explicit null."""
        if value is None:
            raise ValueError("cannot be null")
        return value
