"""
Bookmark and service entity models.

Both are links shown on the start page. Bookmarks always belong to a category;
services may float outside any service category.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class LinkBase(Base):
    """Fields shared by bookmarks and services."""

    name: str = Field(max_length=255)
    url: str = Field(description="Target URL")
    description: Optional[str] = Field(default=None)
    icon: Optional[str] = Field(default=None, description="Icon reference, e.g. 'favicon:/api/v1/favicons/serve/x.png'")
    order: int = Field(default=0)
    is_visible: bool = Field(default=True)
    requires_auth: bool = Field(default=False)


class Bookmark(LinkBase, table=True):
    """Bookmark link.

    Table: bookmarks
    """

    __tablename__ = "bookmarks"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="categories.id", index=True)
    click_count: int = Field(default=0)
    created_at: datetime = Field(sa_type=DateTime, default_factory=utc_now)
    updated_at: datetime = Field(
        sa_type=DateTime, default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}
    )


class Service(LinkBase, table=True):
    """Self-hosted service link.

    Table: services
    """

    __tablename__ = "services"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: Optional[int] = Field(default=None, foreign_key="service_categories.id", index=True)
    click_count: int = Field(default=0)
    created_at: datetime = Field(sa_type=DateTime, default_factory=utc_now)
    updated_at: datetime = Field(
        sa_type=DateTime, default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}
    )
