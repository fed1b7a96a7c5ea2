from types import SimpleNamespace

import pytest

from fauxdash.core.database.entities import Bookmark, Category, Service, ServiceCategory
from fauxdash.server.services.catalog_service import (
    invalidate_catalog,
    list_bookmark_categories,
    list_service_categories,
    sort_items,
)


def _item(id, name, order=0, clicks=0):
    return SimpleNamespace(id=id, name=name, order=order, click_count=clicks)


ITEMS = [_item(1, "beta", order=2, clicks=5), _item(2, "Alpha", order=1, clicks=0), _item(3, "gamma", order=1, clicks=5)]


@pytest.mark.parametrize(
    "sort_by, expected",
    [
        ("order", [2, 3, 1]),
        ("name_asc", [2, 1, 3]),
        ("name_desc", [3, 1, 2]),
        ("clicks_asc", [2, 3, 1]),
        ("clicks_desc", [3, 1, 2]),
        ("bogus", [2, 3, 1]),
    ],
)
def test_sort_items(sort_by, expected):
    assert [item.id for item in sort_items(ITEMS, sort_by)] == expected


@pytest.mark.asyncio
async def test_bookmark_listing_by_audience(session):
    public = Category(name="Public", order=2, sort_by="name_asc")
    private = Category(name="Private", order=1, requires_auth=True)
    hidden = Category(name="Hidden", is_visible=False)
    session.add_all([public, private, hidden])
    await session.commit()
    session.add_all(
        [
            Bookmark(name="zeta", url="https://z.mock", category_id=public.id),
            Bookmark(name="Alpha", url="https://a.mock", category_id=public.id),
            Bookmark(name="Secret", url="https://s.mock", category_id=public.id, requires_auth=True),
            Bookmark(name="Off", url="https://o.mock", category_id=public.id, is_visible=False),
            Bookmark(name="Team", url="https://t.mock", category_id=private.id),
            Bookmark(name="Ghost", url="https://g.mock", category_id=hidden.id),
        ]
    )
    await session.commit()

    anonymous = await list_bookmark_categories(session, include_auth=False)
    assert [c.name for c in anonymous] == ["Public"]
    assert [b.name for b in anonymous[0].bookmarks] == ["Alpha", "zeta"]

    signed_in = await list_bookmark_categories(session, include_auth=True)
    assert [c.name for c in signed_in] == ["Private", "Public"]
    assert [b.name for b in signed_in[1].bookmarks] == ["Alpha", "Secret", "zeta"]


@pytest.mark.asyncio
async def test_listing_is_cached_until_invalidated(session):
    category = ServiceCategory(name="Infra")
    session.add(category)
    await session.commit()

    assert [s.name for s in (await list_service_categories(session, False))[0].services] == []

    session.add(Service(name="Router", url="http://192.168.1.1", category_id=category.id))
    await session.commit()
    assert (await list_service_categories(session, False))[0].services == []

    invalidate_catalog()
    assert [s.name for s in (await list_service_categories(session, False))[0].services] == ["Router"]
