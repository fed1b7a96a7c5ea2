"""
Category repository.

One implementation serves both bookmark categories and service categories,
which share every column. Deleting a bookmark category removes its bookmarks;
deleting a service category leaves its services uncategorized.
"""

from __future__ import annotations

from typing import Generic, List, Type, TypeVar

from sqlalchemy import delete as sa_delete
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.analytics import BookmarkClick
from ..entities.categories import Category, ServiceCategory
from ..entities.items import Bookmark, Service
from .base import SQLModelRepository

CategoryType = TypeVar("CategoryType", Category, ServiceCategory)


class CategoryRepository(SQLModelRepository[CategoryType], Generic[CategoryType]):
    """Repository for a category table."""

    default_order = "order"

    def __init__(self, session: AsyncSession, model: Type[CategoryType] = Category) -> None:
        super().__init__(session, model)

    async def list_visible(self, include_auth: bool) -> List[CategoryType]:
        """List visible categories in display order.

        Args:
            include_auth: Include categories restricted to signed-in users

        Returns:
            Categories ordered by ``order`` then id
        """
        stmt = select(self.model).where(self.model.is_visible == True)  # noqa: E712
        if not include_auth:
            stmt = stmt.where(self.model.requires_auth == False)  # noqa: E712
        stmt = stmt.order_by(self.model.order, self.model.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, entity_id: int) -> bool:
        category = await self.get_by_id(entity_id)
        if category is None:
            return False
        if self.model is Category:
            bookmark_ids = select(Bookmark.id).where(Bookmark.category_id == entity_id)
            await self.session.execute(sa_delete(BookmarkClick).where(BookmarkClick.bookmark_id.in_(bookmark_ids)))
            await self.session.execute(sa_delete(Bookmark).where(Bookmark.category_id == entity_id))
        else:
            await self.session.execute(
                update(Service).where(Service.category_id == entity_id).values(category_id=None)
            )
        await self.session.delete(category)
        await self.session.commit()
        return True

    async def delete_all(self) -> None:
        await self.session.execute(sa_delete(self.model))
        await self.session.commit()

