"""
Bookmark and service repositories.

Besides CRUD, the repository records clicks: the item's ``click_count`` is
incremented in SQL and a click row carrying the time breakdown is inserted in
the same transaction.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, Iterable, List, Optional, TypeVar

from sqlalchemy import delete as sa_delete
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from fauxdash.analytics.periods import day_of_week

from ..base import utc_now
from ..entities.analytics import BookmarkClick, ServiceClick
from ..entities.items import Bookmark, Service
from .base import SQLModelRepository

ItemType = TypeVar("ItemType", Bookmark, Service)


class LinkRepository(SQLModelRepository[ItemType], Generic[ItemType]):
    """Shared implementation for bookmark and service tables."""

    default_order = "order"
    click_model: type
    click_fk: str

    async def list_for_categories(
        self, category_ids: Iterable[int], include_auth: bool
    ) -> List[ItemType]:
        """List visible items belonging to any of the given categories."""
        ids = list(category_ids)
        if not ids:
            return []
        stmt = select(self.model).where(
            (self.model.category_id.in_(ids)) & (self.model.is_visible == True)  # noqa: E712
        )
        if not include_auth:
            stmt = stmt.where(self.model.requires_auth == False)  # noqa: E712
        stmt = stmt.order_by(self.model.order, self.model.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_ids(self, item_ids: Iterable[int]) -> List[ItemType]:
        ids = list(item_ids)
        if not ids:
            return []
        stmt = select(self.model).where(self.model.id.in_(ids)).order_by(self.model.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_visible(self, include_auth: bool) -> List[ItemType]:
        stmt = select(self.model).where(self.model.is_visible == True)  # noqa: E712
        if not include_auth:
            stmt = stmt.where(self.model.requires_auth == False)  # noqa: E712
        stmt = stmt.order_by(self.model.order, self.model.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def record_click(self, item_id: int, moment: Optional[datetime] = None) -> bool:
        """Increment the click counter and store a click event.

        Args:
            item_id: Bookmark or service id
            moment: Click time, defaults to now (UTC)

        Returns:
            False if the item does not exist
        """
        moment = moment or utc_now()
        result = await self.session.execute(
            update(self.model)
            .where(self.model.id == item_id)
            .values(click_count=self.model.click_count + 1)
        )
        if not result.rowcount:
            await self.session.rollback()
            return False

        click = self.click_model(
            **{self.click_fk: item_id},
            clicked_at=moment,
            hour_of_day=moment.hour,
            day_of_week=day_of_week(moment),
            day_of_month=moment.day,
        )
        self.session.add(click)
        await self.session.commit()
        return True

    async def list_icons(self) -> List[str]:
        result = await self.session.execute(select(self.model.icon).where(self.model.icon.is_not(None)))
        return [icon for icon in result.scalars().all() if icon]

    async def delete_all(self) -> None:
        await self.session.execute(sa_delete(self.click_model))
        await self.session.execute(sa_delete(self.model))
        await self.session.commit()


class BookmarkRepository(LinkRepository[Bookmark]):
    """Repository for bookmarks."""

    click_model = BookmarkClick
    click_fk = "bookmark_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Bookmark)

    async def delete(self, entity_id: int) -> bool:
        await self.session.execute(sa_delete(BookmarkClick).where(BookmarkClick.bookmark_id == entity_id))
        return await super().delete(entity_id)


class ServiceRepository(LinkRepository[Service]):
    """Repository for services."""

    click_model = ServiceClick
    click_fk = "service_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Service)

    async def delete(self, entity_id: int) -> bool:
        await self.session.execute(sa_delete(ServiceClick).where(ServiceClick.service_id == entity_id))
        return await super().delete(entity_id)
