def test_storefront_lists_seeded_categories(client):
    response = client.get("/api/categories")

    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Veg", "Non-Veg", "Fast Food", "Beverages", "Desserts"]


def test_category_crud(client, admin_headers):
    created = client.post(
        "/api/admin/categories",
        json={"name": "Soups", "description": "Warm bowls"},
        headers=admin_headers,
    ).json()
    category_id = created["categoryId"]

    response = client.put(
        f"/api/admin/categories/{category_id}",
        json={"name": "Soups & Stews"},
        headers=admin_headers,
    )
    assert response.json() == {"categoryId": category_id, "name": "Soups & Stews", "description": None}

    assert client.delete(f"/api/admin/categories/{category_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/admin/categories/{category_id}", headers=admin_headers).status_code == 404


def test_delete_category_in_use_conflicts(client, admin_headers):
    response = client.delete("/api/admin/categories/1", headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["productCount"] == 1
