"""
Settings repository.

Values are stored as text; typing and defaults are applied by the settings
service layer.
"""

from __future__ import annotations

from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.settings import Setting
from .base import SQLModelRepository


class SettingRepository(SQLModelRepository[Setting]):
    """Repository for global and per-user key/value settings."""

    default_order = "key"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Setting)

    async def get_map(self, user_id: Optional[int] = None) -> Dict[str, str]:
        """Load settings for one scope as a plain dict.

        Args:
            user_id: User id, or None for the global scope

        Returns:
            Mapping of key to stored value (None becomes "")
        """
        stmt = select(Setting)
        if user_id is None:
            stmt = stmt.where(Setting.user_id.is_(None))
        else:
            stmt = stmt.where(Setting.user_id == user_id)
        result = await self.session.execute(stmt)
        return {row.key: row.value or "" for row in result.scalars().all()}

    async def upsert_many(self, values: Dict[str, str], user_id: Optional[int] = None) -> int:
        """Insert or update several keys in one transaction.

        Args:
            values: Mapping of key to string value
            user_id: User id, or None for the global scope

        Returns:
            Number of keys written
        """
        for key, value in values.items():
            row = await self._get_row(key, user_id)
            if row is None:
                self.session.add(Setting(user_id=user_id, key=key, value=value))
            else:
                row.value = value
                row.updated_at = utc_now()
                self.session.add(row)
        await self.session.commit()
        return len(values)

    async def upsert(self, key: str, value: str, user_id: Optional[int] = None) -> None:
        await self.upsert_many({key: value}, user_id)

    async def _get_row(self, key: str, user_id: Optional[int]) -> Optional[Setting]:
        stmt = select(Setting).where(Setting.key == key)
        if user_id is None:
            stmt = stmt.where(Setting.user_id.is_(None))
        else:
            stmt = stmt.where(Setting.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()
