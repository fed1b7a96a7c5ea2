import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlmodel import select

from fauxdash.core.database.entities import BookmarkClick, ServiceClick

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def category(admin_client: AsyncClient):
    response = await admin_client.post("/api/v1/categories", json={"name": "Reading"})
    return response.json()


class TestBookmarks:
    async def test_create_and_list(self, admin_client: AsyncClient, category):
        response = await admin_client.post(
            "/api/v1/bookmarks",
            json={
                "name": "Python",
                "url": "https://python.org",
                "description": "Language home",
                "icon": "favicon:/api/v1/favicons/serve/python_org.png",
                "category_id": category["id"],
            },
        )
        assert response.status_code == 201
        bookmark = response.json()
        assert bookmark["click_count"] == 0
        assert bookmark["category_id"] == category["id"]

        response = await admin_client.get("/api/v1/bookmarks")
        assert [b["name"] for b in response.json()] == ["Python"]

    async def test_unknown_category_rejected(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/v1/bookmarks", json={"name": "x", "url": "https://x.org", "category_id": 404}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Category 404 does not exist"

    async def test_missing_category_is_validation_error(self, admin_client: AsyncClient):
        response = await admin_client.post("/api/v1/bookmarks", json={"name": "x", "url": "https://x.org"})
        assert response.status_code == 422

    async def test_update_and_null_category(self, admin_client: AsyncClient, category):
        bookmark = (
            await admin_client.post(
                "/api/v1/bookmarks",
                json={"name": "Python", "url": "https://python.org", "category_id": category["id"]},
            )
        ).json()
        url = f"/api/v1/bookmarks/{bookmark['id']}"

        response = await admin_client.patch(url, json={"name": "CPython", "order": 3})
        assert response.status_code == 200
        assert response.json()["name"] == "CPython"
        assert response.json()["order"] == 3

        response = await admin_client.patch(url, json={"category_id": None})
        assert response.status_code == 400
        assert response.json()["detail"] == "Bookmarks must belong to a category"

        response = await admin_client.patch(url, json={"category_id": 999})
        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["name", "url", "order", "is_visible", "requires_auth"])
    async def test_update_rejects_null_for_required_fields(self, admin_client: AsyncClient, category, field):
        bookmark = (
            await admin_client.post(
                "/api/v1/bookmarks",
                json={"name": "Python", "url": "https://python.org", "category_id": category["id"]},
            )
        ).json()
        url = f"/api/v1/bookmarks/{bookmark['id']}"

        response = await admin_client.patch(url, json={field: None})
        assert response.status_code == 422

        response = await admin_client.patch(url, json={"description": None})
        assert response.status_code == 200
        assert response.json()[field] == bookmark[field]

    async def test_delete(self, admin_client: AsyncClient, category):
        bookmark = (
            await admin_client.post(
                "/api/v1/bookmarks",
                json={"name": "Python", "url": "https://python.org", "category_id": category["id"]},
            )
        ).json()
        response = await admin_client.delete(f"/api/v1/bookmarks/{bookmark['id']}")
        assert response.status_code == 204
        response = await admin_client.delete(f"/api/v1/bookmarks/{bookmark['id']}")
        assert response.status_code == 404

    async def test_management_requires_admin(self, user_client: AsyncClient):
        response = await user_client.get("/api/v1/bookmarks")
        assert response.status_code == 403

    async def test_click_is_public_and_recorded(self, admin_client: AsyncClient, session, category):
        bookmark = (
            await admin_client.post(
                "/api/v1/bookmarks",
                json={"name": "Python", "url": "https://python.org", "category_id": category["id"]},
            )
        ).json()
        await admin_client.post("/api/v1/auth/logout")

        for _ in range(2):
            response = await admin_client.post(f"/api/v1/bookmarks/{bookmark['id']}/click")
            assert response.status_code == 200
            assert response.json() == {"success": True}

        clicks = (await session.execute(select(BookmarkClick))).scalars().all()
        assert len(clicks) == 2
        assert all(click.bookmark_id == bookmark["id"] for click in clicks)
        assert 0 <= clicks[0].day_of_week <= 6
        assert 0 <= clicks[0].hour_of_day <= 23

        response = await admin_client.get("/api/v1/categories")
        assert response.json()[0]["bookmarks"][0]["click_count"] == 2

    async def test_click_unknown_bookmark(self, client: AsyncClient):
        response = await client.post("/api/v1/bookmarks/12345/click")
        assert response.status_code == 404


class TestServices:
    async def test_public_listing_hides_restricted(self, admin_client: AsyncClient):
        for payload in (
            {"name": "Plex", "url": "http://plex.lan", "order": 2},
            {"name": "Router", "url": "http://router.lan", "order": 1, "requires_auth": True},
            {"name": "Old", "url": "http://old.lan", "is_visible": False},
        ):
            response = await admin_client.post("/api/v1/services", json=payload)
            assert response.status_code == 201

        response = await admin_client.get("/api/v1/services")
        assert [s["name"] for s in response.json()] == ["Router", "Plex"]

        response = await admin_client.get("/api/v1/services/all")
        assert {s["name"] for s in response.json()} == {"Plex", "Router", "Old"}

        await admin_client.post("/api/v1/auth/logout")
        response = await admin_client.get("/api/v1/services")
        assert [s["name"] for s in response.json()] == ["Plex"]

    async def test_service_without_category(self, admin_client: AsyncClient):
        response = await admin_client.post("/api/v1/services", json={"name": "NAS", "url": "http://nas.lan"})
        assert response.status_code == 201
        assert response.json()["category_id"] is None

    async def test_update_and_delete(self, admin_client: AsyncClient):
        service = (await admin_client.post("/api/v1/services", json={"name": "NAS", "url": "http://nas.lan"})).json()
        url = f"/api/v1/services/{service['id']}"

        response = await admin_client.patch(url, json={"url": "https://nas.lan"})
        assert response.json()["url"] == "https://nas.lan"

        response = await admin_client.patch(url, json={"category_id": 42})
        assert response.status_code == 400

        response = await admin_client.delete(url)
        assert response.status_code == 204
        response = await admin_client.get(url)
        assert response.status_code == 404

    async def test_click(self, admin_client: AsyncClient, session):
        service = (await admin_client.post("/api/v1/services", json={"name": "NAS", "url": "http://nas.lan"})).json()

        response = await admin_client.post(f"/api/v1/services/{service['id']}/click")
        assert response.status_code == 200

        clicks = (await session.execute(select(ServiceClick))).scalars().all()
        assert [click.service_id for click in clicks] == [service["id"]]
        response = await admin_client.get(f"/api/v1/services/{service['id']}")
        assert response.json()["click_count"] == 1
