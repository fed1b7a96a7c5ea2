"""
Key/value setting entity.

A row with ``user_id`` NULL is a global setting; a row with a user id overrides
the global value for that user.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class Setting(Base, table=True):
    """Persistent setting value, stored as text.

    Table: settings
    """

    __tablename__ = "settings"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    key: str = Field(max_length=128, index=True)
    value: Optional[str] = Field(default=None)
    created_at: datetime = Field(sa_type=DateTime, default_factory=utc_now)
    updated_at: datetime = Field(
        sa_type=DateTime, default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}
    )
