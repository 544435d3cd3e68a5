from typing import Any, Dict

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

API = "/api"


async def create_category(client: AsyncClient, headers: Dict[str, str], slug: str, **extra: Any) -> Dict[str, Any]:
    payload = {"name": slug.replace("-", " ").title(), "slug": slug, **extra}
    response = await client.post(f"{API}/categories", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def create_subcategory(
    client: AsyncClient, headers: Dict[str, str], category_id: str, slug: str, **extra: Any
) -> Dict[str, Any]:
    payload = {"name": slug.title(), "slug": slug, "category_id": category_id, **extra}
    response = await client.post(f"{API}/subcategories", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def create_subsubcategory(
    client: AsyncClient, headers: Dict[str, str], subcategory_id: str, slug: str, **extra: Any
) -> Dict[str, Any]:
    payload = {"name": slug.title(), "slug": slug, "subcategory_id": subcategory_id, **extra}
    response = await client.post(f"{API}/subsubcategories", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_empty_tree(client: AsyncClient):
    response = await client.get(f"{API}/categories")

    assert response.status_code == 200
    assert response.json() == {"categories": []}


async def test_create_category(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "power-tools", order_index=2)

    assert category["slug"] == "power-tools"
    assert category["order_index"] == 2
    assert category["id"]


async def test_create_category_requires_auth(client: AsyncClient):
    response = await client.post(f"{API}/categories", json={"name": "Tools", "slug": "tools"})

    assert response.status_code == 401
    assert response.json()["detail"] == "No token provided"


async def test_create_category_requires_admin(client: AsyncClient, user_headers: Dict[str, str]):
    response = await client.post(f"{API}/categories", json={"name": "Tools", "slug": "tools"}, headers=user_headers)

    assert response.status_code == 403


async def test_create_category_rejects_bad_token(client: AsyncClient):
    response = await client.post(
        f"{API}/categories",
        json={"name": "Tools", "slug": "tools"},
        headers={"Authorization": "Bearer not-a-session"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"


async def test_create_category_invalid_slug(client: AsyncClient, admin_headers: Dict[str, str]):
    response = await client.post(f"{API}/categories", json={"name": "Tools", "slug": "Not A Slug"}, headers=admin_headers)

    assert response.status_code == 400
    assert "slug" in response.json()["detail"]


async def test_create_category_duplicate_slug(client: AsyncClient, admin_headers: Dict[str, str]):
    await create_category(client, admin_headers, "tools")

    response = await client.post(f"{API}/categories", json={"name": "Other", "slug": "tools"}, headers=admin_headers)

    assert response.status_code == 409


async def test_tree_nests_levels_in_order(client: AsyncClient, admin_headers: Dict[str, str]):
    second = await create_category(client, admin_headers, "garden", order_index=1)
    first = await create_category(client, admin_headers, "tools", order_index=0)
    drills = await create_subcategory(client, admin_headers, first["id"], "drills", order_index=1)
    saws = await create_subcategory(client, admin_headers, first["id"], "saws", order_index=0)
    await create_subsubcategory(client, admin_headers, drills["id"], "cordless", order_index=1)
    await create_subsubcategory(client, admin_headers, drills["id"], "corded", order_index=0)

    response = await client.get(f"{API}/categories")

    assert response.status_code == 200
    categories = response.json()["categories"]
    assert [c["id"] for c in categories] == [first["id"], second["id"]]
    assert [s["id"] for s in categories[0]["subcategories"]] == [saws["id"], drills["id"]]
    assert categories[0]["subcategories"][0]["subsubcategories"] == []
    leaves = categories[0]["subcategories"][1]["subsubcategories"]
    assert [leaf["slug"] for leaf in leaves] == ["corded", "cordless"]
    assert categories[1]["subcategories"] == []


async def test_update_category_changes_only_sent_fields(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "tools", order_index=3)

    response = await client.put(f"{API}/categories/{category['id']}", json={"name": "Hand Tools"}, headers=admin_headers)

    assert response.status_code == 200
    updated = response.json()
    assert updated["name"] == "Hand Tools"
    assert updated["slug"] == "tools"
    assert updated["order_index"] == 3
    assert updated["updated_at"] >= category["updated_at"]


async def test_update_category_empty_body(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "tools")

    response = await client.put(f"{API}/categories/{category['id']}", json={}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "No fields to update"


async def test_update_category_unknown_field(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "tools")

    response = await client.put(
        f"{API}/categories/{category['id']}", json={"name": "X", "color": "red"}, headers=admin_headers
    )

    assert response.status_code == 400
    assert "color" in response.json()["detail"]


async def test_update_category_ignores_client_timestamp(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "tools")

    response = await client.put(
        f"{API}/categories/{category['id']}",
        json={"name": "Tools", "updated_at": "2000-01-01T00:00:00"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert not response.json()["updated_at"].startswith("2000")


async def test_update_category_rejects_echoed_record(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "tools")

    response = await client.put(f"{API}/categories/{category['id']}", json=category, headers=admin_headers)

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert "id" in detail
    assert "created_at" in detail
    assert "updated_at" not in detail


async def test_update_category_null_name(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "tools")

    response = await client.put(f"{API}/categories/{category['id']}", json={"name": None}, headers=admin_headers)

    assert response.status_code == 400
    assert "name cannot be null" in response.json()["detail"]


async def test_update_category_not_found(client: AsyncClient, admin_headers: Dict[str, str]):
    response = await client.put(f"{API}/categories/missing", json={"name": "X"}, headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Category with ID missing not found"


async def test_update_category_slug_conflict(client: AsyncClient, admin_headers: Dict[str, str]):
    await create_category(client, admin_headers, "tools")
    other = await create_category(client, admin_headers, "garden")

    response = await client.put(f"{API}/categories/{other['id']}", json={"slug": "tools"}, headers=admin_headers)

    assert response.status_code == 409


async def test_reorder_categories(client: AsyncClient, admin_headers: Dict[str, str]):
    a = await create_category(client, admin_headers, "alpha", order_index=0)
    b = await create_category(client, admin_headers, "beta", order_index=1)
    c = await create_category(client, admin_headers, "gamma", order_index=2)

    response = await client.post(
        f"{API}/categories/reorder",
        json={"orderedIds": [c["id"], a["id"], b["id"]]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}

    tree = (await client.get(f"{API}/categories")).json()["categories"]
    assert [node["id"] for node in tree] == [c["id"], a["id"], b["id"]]
    assert [node["order_index"] for node in tree] == [0, 1, 2]


async def test_reorder_skips_unknown_ids(client: AsyncClient, admin_headers: Dict[str, str]):
    a = await create_category(client, admin_headers, "alpha", order_index=5)

    response = await client.post(
        f"{API}/categories/reorder", json={"orderedIds": ["missing", a["id"]]}, headers=admin_headers
    )

    assert response.status_code == 200
    tree = (await client.get(f"{API}/categories")).json()["categories"]
    assert tree[0]["order_index"] == 1


async def test_delete_empty_category(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "tools")

    response = await client.delete(f"{API}/categories/{category['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert (await client.get(f"{API}/categories")).json() == {"categories": []}


async def test_delete_category_with_children_is_restricted(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "tools")
    await create_subcategory(client, admin_headers, category["id"], "drills")

    response = await client.delete(f"{API}/categories/{category['id']}", headers=admin_headers)

    assert response.status_code == 409
    assert "cascade=true" in response.json()["detail"]


async def test_delete_category_cascade(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "tools")
    sub = await create_subcategory(client, admin_headers, category["id"], "drills")
    await create_subsubcategory(client, admin_headers, sub["id"], "cordless")
    keep = await create_category(client, admin_headers, "garden")

    response = await client.delete(f"{API}/categories/{category['id']}?cascade=true", headers=admin_headers)

    assert response.status_code == 200
    tree = (await client.get(f"{API}/categories")).json()["categories"]
    assert [node["id"] for node in tree] == [keep["id"]]

    # The subtree is gone too
    response = await client.put(f"{API}/subcategories/{sub['id']}", json={"name": "X"}, headers=admin_headers)
    assert response.status_code == 404


async def test_delete_category_with_products_is_blocked(client: AsyncClient, admin_headers: Dict[str, str]):
    category = await create_category(client, admin_headers, "tools")
    response = await client.post(
        f"{API}/products",
        json={"name": "Hammer", "reference": "HM-1", "category_id": category["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 201

    response = await client.delete(f"{API}/categories/{category['id']}?cascade=true", headers=admin_headers)

    assert response.status_code == 409
    assert "products" in response.json()["detail"]


async def test_delete_category_not_found(client: AsyncClient, admin_headers: Dict[str, str]):
    response = await client.delete(f"{API}/categories/missing", headers=admin_headers)

    assert response.status_code == 404


async def test_openapi_lists_admin_errors(client: AsyncClient):
    response = await client.get(f"{API}/openapi.json")

    assert response.status_code == 200
    documented = response.json()["paths"][f"{API}/categories/{{category_id}}"]["put"]["responses"]
    assert {"400", "401", "403", "404", "409"} <= set(documented)
