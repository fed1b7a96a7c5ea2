"""
Category entity models.

Bookmarks and services are grouped into two independent sets of categories
that share the same display options.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, utc_now

SORT_OPTIONS = ("order", "name_asc", "name_desc", "clicks_asc", "clicks_desc")


class CategoryBase(Base):
    """Display options shared by bookmark and service categories."""

    name: str = Field(max_length=255, description="Category title")
    icon: Optional[str] = Field(default=None, max_length=255, description="Icon reference")
    order: int = Field(default=0, description="Position on the page, ascending")
    columns: int = Field(default=1, description="Number of item columns")
    is_visible: bool = Field(default=True)
    requires_auth: bool = Field(default=False, description="Hidden from anonymous visitors")
    items_to_show: Optional[int] = Field(default=5, description="Items shown before 'show more'")
    show_item_count: bool = Field(default=True)
    auto_expanded: bool = Field(default=False)
    show_open_all: bool = Field(default=False, description="Offer an 'open all' action")
    sort_by: str = Field(default="order", max_length=32, description="One of order, name_asc, name_desc, clicks_asc, clicks_desc")


class Category(CategoryBase, table=True):
    """Bookmark category.

    Table: categories
    """

    __tablename__ = "categories"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(sa_type=DateTime, default_factory=utc_now)
    updated_at: datetime = Field(
        sa_type=DateTime, default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}
    )


class ServiceCategory(CategoryBase, table=True):
    """Service category.

    Table: service_categories
    """

    __tablename__ = "service_categories"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(sa_type=DateTime, default_factory=utc_now)
    updated_at: datetime = Field(
        sa_type=DateTime, default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}
    )
