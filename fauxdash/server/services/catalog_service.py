"""
Catalog Service.

Builds the home page listings: visible categories in display order, each
carrying its visible items sorted by the category's ``sort_by`` option.
Listings are cached per audience (anonymous or signed in) and every content
mutation must call ``invalidate_catalog``.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence, TypeVar

from cachetools import TTLCache
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database.entities import Bookmark, Category, Service, ServiceCategory
from fauxdash.core.database.repositories import BookmarkRepository, CategoryRepository, ServiceRepository
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import (
    BookmarkRead,
    CategoryWithBookmarks,
    ServiceCategoryWithServices,
    ServiceRead,
)

logger = get_logger(__name__)

CATALOG_CACHE_TTL = 300

ItemType = TypeVar("ItemType", Bookmark, Service)

_SORTERS: Dict[str, Callable[[Sequence], List]] = {
    "order": lambda items: sorted(items, key=lambda i: (i.order, i.id)),
    "name_asc": lambda items: sorted(items, key=lambda i: (i.name.lower(), i.id)),
    "name_desc": lambda items: sorted(items, key=lambda i: (i.name.lower(), i.id), reverse=True),
    "clicks_asc": lambda items: sorted(items, key=lambda i: (i.click_count, i.order, i.id)),
    "clicks_desc": lambda items: sorted(items, key=lambda i: (-i.click_count, i.order, i.id)),
}

_catalog_cache: TTLCache = TTLCache(maxsize=16, ttl=CATALOG_CACHE_TTL)


def sort_items(items: Sequence[ItemType], sort_by: str) -> List[ItemType]:
    """Sort items by a category ``sort_by`` option; unknown options sort by ``order``."""
    return _SORTERS.get(sort_by, _SORTERS["order"])(items)


def audience(include_auth: bool) -> str:
    return "auth" if include_auth else "public"


def invalidate_catalog() -> None:
    """Drop every cached listing."""
    _catalog_cache.clear()
    logger.debug("Catalog cache invalidated")


async def list_bookmark_categories(session: AsyncSession, include_auth: bool) -> List[CategoryWithBookmarks]:
    """Visible bookmark categories with their visible bookmarks.

    Args:
        session: Database session
        include_auth: Include entries restricted to signed-in users

    Returns:
        Categories in display order
    """
    key = f"bookmarks:{audience(include_auth)}"
    cached = _catalog_cache.get(key)
    if cached is not None:
        return list(cached)

    categories = await CategoryRepository(session, Category).list_visible(include_auth)
    bookmarks = await BookmarkRepository(session).list_for_categories([c.id for c in categories], include_auth)

    by_category: Dict[int, List[Bookmark]] = {}
    for bookmark in bookmarks:
        by_category.setdefault(bookmark.category_id, []).append(bookmark)

    listing = [
        CategoryWithBookmarks.model_validate(category).model_copy(
            update={
                "bookmarks": [
                    BookmarkRead.model_validate(b)
                    for b in sort_items(by_category.get(category.id, []), category.sort_by)
                ]
            }
        )
        for category in categories
    ]
    _catalog_cache[key] = listing
    return list(listing)


async def list_service_categories(
    session: AsyncSession, include_auth: bool
) -> List[ServiceCategoryWithServices]:
    """Visible service categories with their visible services."""
    key = f"services:{audience(include_auth)}"
    cached = _catalog_cache.get(key)
    if cached is not None:
        return list(cached)

    categories = await CategoryRepository(session, ServiceCategory).list_visible(include_auth)
    services = await ServiceRepository(session).list_for_categories([c.id for c in categories], include_auth)

    by_category: Dict[int, List[Service]] = {}
    for service in services:
        by_category.setdefault(service.category_id, []).append(service)

    listing = [
        ServiceCategoryWithServices.model_validate(category).model_copy(
            update={
                "services": [
                    ServiceRead.model_validate(s)
                    for s in sort_items(by_category.get(category.id, []), category.sort_by)
                ]
            }
        )
        for category in categories
    ]
    _catalog_cache[key] = listing
    return list(listing)
