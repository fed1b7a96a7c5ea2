import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _create_category(client: AsyncClient, path: str = "/api/v1/categories", **fields):
    payload = {"name": "Dev", **fields}
    response = await client.post(path, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _create_bookmark(client: AsyncClient, category_id: int, **fields):
    payload = {"name": "Docs", "url": "https://docs.python.org", "category_id": category_id, **fields}
    response = await client.post("/api/v1/bookmarks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestBookmarkCategories:
    async def test_create_uses_defaults(self, admin_client: AsyncClient):
        category = await _create_category(admin_client)
        assert category["name"] == "Dev"
        assert category["order"] == 0
        assert category["columns"] == 1
        assert category["is_visible"] is True
        assert category["requires_auth"] is False
        assert category["items_to_show"] == 5
        assert category["sort_by"] == "order"

    async def test_create_requires_admin(self, user_client: AsyncClient):
        response = await user_client.post("/api/v1/categories", json={"name": "Dev"})
        assert response.status_code == 403

    async def test_create_requires_sign_in(self, client: AsyncClient):
        response = await client.post("/api/v1/categories", json={"name": "Dev"})
        assert response.status_code == 401

    async def test_invalid_sort_by(self, admin_client: AsyncClient):
        response = await admin_client.post("/api/v1/categories", json={"name": "Dev", "sort_by": "random"})
        assert response.status_code == 400
        assert "Invalid sort_by" in response.json()["detail"]

    async def test_get_update_delete(self, admin_client: AsyncClient):
        category = await _create_category(admin_client)
        url = f"/api/v1/categories/{category['id']}"

        response = await admin_client.get(url)
        assert response.status_code == 200
        assert response.json()["name"] == "Dev"

        response = await admin_client.patch(url, json={"name": "Development", "sort_by": "name_desc"})
        assert response.status_code == 200
        assert response.json()["name"] == "Development"
        assert response.json()["sort_by"] == "name_desc"

        response = await admin_client.delete(url)
        assert response.status_code == 204

        response = await admin_client.get(url)
        assert response.status_code == 404
        assert response.json()["detail"] == f"Category {category['id']} not found"

    @pytest.mark.parametrize("field", ["name", "order", "columns", "is_visible", "sort_by"])
    async def test_update_rejects_null_for_required_fields(self, admin_client: AsyncClient, field):
        category = await _create_category(admin_client)
        url = f"/api/v1/categories/{category['id']}"

        response = await admin_client.patch(url, json={field: None})
        assert response.status_code == 422
        assert (await admin_client.get(url)).json()[field] == category[field]

    async def test_update_clears_optional_fields(self, admin_client: AsyncClient):
        category = await _create_category(admin_client, icon="mdi:code", items_to_show=3)
        url = f"/api/v1/categories/{category['id']}"

        response = await admin_client.patch(url, json={"icon": None, "items_to_show": None})
        assert response.status_code == 200
        assert response.json()["icon"] is None
        assert response.json()["items_to_show"] is None

    async def test_delete_unknown(self, admin_client: AsyncClient):
        response = await admin_client.delete("/api/v1/categories/999")
        assert response.status_code == 404

    async def test_delete_removes_bookmarks(self, admin_client: AsyncClient):
        category = await _create_category(admin_client)
        bookmark = await _create_bookmark(admin_client, category["id"])

        await admin_client.delete(f"/api/v1/categories/{category['id']}")

        response = await admin_client.get(f"/api/v1/bookmarks/{bookmark['id']}")
        assert response.status_code == 404

    async def test_list_all_includes_hidden(self, admin_client: AsyncClient):
        await _create_category(admin_client, name="Shown", order=1)
        await _create_category(admin_client, name="Hidden", order=0, is_visible=False)

        response = await admin_client.get("/api/v1/categories/all")
        assert [c["name"] for c in response.json()] == ["Hidden", "Shown"]


class TestPublicListing:
    async def test_anonymous_sees_only_public_entries(self, admin_client: AsyncClient):
        public = await _create_category(admin_client, name="Public", order=0)
        private = await _create_category(admin_client, name="Private", order=1, requires_auth=True)
        await _create_category(admin_client, name="Hidden", order=2, is_visible=False)
        await _create_bookmark(admin_client, public["id"], name="Open")
        await _create_bookmark(admin_client, public["id"], name="Members", requires_auth=True)
        await _create_bookmark(admin_client, public["id"], name="Off", is_visible=False)
        await _create_bookmark(admin_client, private["id"], name="Secret")

        response = await admin_client.get("/api/v1/categories")
        names = [c["name"] for c in response.json()]
        assert names == ["Public", "Private"]
        assert [b["name"] for b in response.json()[0]["bookmarks"]] == ["Open", "Members"]

        await admin_client.post("/api/v1/auth/logout")
        response = await admin_client.get("/api/v1/categories")
        listing = response.json()
        assert [c["name"] for c in listing] == ["Public"]
        assert [b["name"] for b in listing[0]["bookmarks"]] == ["Open"]

    async def test_items_follow_category_sort(self, admin_client: AsyncClient):
        category = await _create_category(admin_client, sort_by="name_asc")
        for name in ("charlie", "Alpha", "bravo"):
            await _create_bookmark(admin_client, category["id"], name=name)

        response = await admin_client.get("/api/v1/categories")
        assert [b["name"] for b in response.json()[0]["bookmarks"]] == ["Alpha", "bravo", "charlie"]

    async def test_listing_refreshes_after_mutation(self, admin_client: AsyncClient):
        category = await _create_category(admin_client)
        response = await admin_client.get("/api/v1/categories")
        assert response.json()[0]["bookmarks"] == []

        await _create_bookmark(admin_client, category["id"])
        response = await admin_client.get("/api/v1/categories")
        assert len(response.json()[0]["bookmarks"]) == 1


class TestServiceCategories:
    async def test_crud_and_listing(self, admin_client: AsyncClient):
        category = await _create_category(admin_client, path="/api/v1/service-categories", name="Infra")
        response = await admin_client.post(
            "/api/v1/services",
            json={"name": "Grafana", "url": "http://grafana.lan", "category_id": category["id"]},
        )
        assert response.status_code == 201

        response = await admin_client.get("/api/v1/service-categories")
        listing = response.json()
        assert listing[0]["name"] == "Infra"
        assert [s["name"] for s in listing[0]["services"]] == ["Grafana"]

        response = await admin_client.patch(
            f"/api/v1/service-categories/{category['id']}", json={"columns": 3}
        )
        assert response.json()["columns"] == 3

    async def test_delete_keeps_services_uncategorized(self, admin_client: AsyncClient):
        category = await _create_category(admin_client, path="/api/v1/service-categories", name="Infra")
        service = (
            await admin_client.post(
                "/api/v1/services",
                json={"name": "Grafana", "url": "http://grafana.lan", "category_id": category["id"]},
            )
        ).json()

        response = await admin_client.delete(f"/api/v1/service-categories/{category['id']}")
        assert response.status_code == 204

        response = await admin_client.get(f"/api/v1/services/{service['id']}")
        assert response.status_code == 200
        assert response.json()["category_id"] is None
