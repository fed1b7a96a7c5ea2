"""Timestamp columns store naive UTC values on every table."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import DateTime
from sqlmodel import SQLModel

from fauxdash.core.database.base import utc_now
from fauxdash.core.database.entities import (
    BookmarkClick,
    Category,
    Pageview,
    PasswordResetToken,
    Setting,
    User,
)
from fauxdash.core.database.repositories import (
    CategoryRepository,
    GeoCacheRepository,
    PasswordResetTokenRepository,
    UserRepository,
)


def _datetime_columns():
    for table in SQLModel.metadata.sorted_tables:
        for column in table.columns:
            if isinstance(column.type, DateTime):
                yield f"{table.name}.{column.name}", column


def test_utc_now_is_naive():
    assert utc_now().tzinfo is None


@pytest.mark.parametrize("name,column", list(_datetime_columns()))
def test_datetime_columns_are_plain_sqlalchemy_datetime(name, column):
    assert type(column.type) is DateTime, name
    assert column.type.timezone is False, name


def test_every_timestamp_field_is_mapped():
    names = {name for name, _ in _datetime_columns()}
    assert {
        "users.created_at",
        "users.updated_at",
        "password_reset_tokens.expires_at",
        "categories.created_at",
        "pageviews.timestamp",
        "bookmark_clicks.clicked_at",
        "settings.updated_at",
        "geo_cache.expires_at",
    } <= names


@pytest.mark.asyncio
async def test_inserts_with_default_timestamps(in_memory_session):
    user = await UserRepository(in_memory_session).create(User(email="a@fauxdash.net", username="a"))
    category = await CategoryRepository(in_memory_session).create(Category(name="Media"))

    assert user.id is not None
    assert category.id is not None
    assert user.created_at.tzinfo is None
    assert category.updated_at.tzinfo is None

    in_memory_session.add_all(
        [
            Pageview(path="/", ip_hash="abc"),
            BookmarkClick(bookmark_id=1, hour_of_day=3, day_of_week=2, day_of_month=4),
            Setting(key="siteTitle", value="Home"),
        ]
    )
    await in_memory_session.commit()


@pytest.mark.asyncio
async def test_inserts_with_explicit_expiry(in_memory_session):
    user = await UserRepository(in_memory_session).create(User(email="b@fauxdash.net", username="b"))
    expires = utc_now() + timedelta(hours=1)

    token = await PasswordResetTokenRepository(in_memory_session).create(
        PasswordResetToken(user_id=user.id, token="t" * 64, expires_at=expires)
    )
    assert token.expires_at == expires

    row = await GeoCacheRepository(in_memory_session).upsert("hash", {"country": "GB"}, "maxmind", expires)
    assert row.expires_at == expires
