def test_create_ingredient_is_case_insensitive_unique(client, admin_headers):
    response = client.post("/api/admin/ingredients", json={"name": "Basil"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Basil"

    response = client.post("/api/admin/ingredients", json={"name": "basil"}, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["success"] is False

    names = [i["name"] for i in client.get("/api/admin/ingredients", headers=admin_headers).json()]
    assert names.count("Basil") == 1


def test_ingredient_names_compare_beyond_ascii(client, admin_headers):
    assert client.post("/api/admin/ingredients", json={"name": "Ñora"}, headers=admin_headers).status_code == 200
    assert client.post("/api/admin/ingredients", json={"name": "ñora"}, headers=admin_headers).status_code == 409

    response = client.post(
        "/api/admin/ingredients/bulk-create",
        json=[{"name": "ÑORA"}, {"name": "Crème Fraîche"}, {"name": "CRÈME FRAÎCHE"}],
        headers=admin_headers,
    )
    body = response.json()
    assert [i["name"] for i in body["createdIngredients"]] == ["Crème Fraîche"]
    assert [s["name"] for s in body["skippedIngredients"]] == ["ÑORA", "CRÈME FRAÎCHE"]


def test_rename_to_existing_name_conflicts(client, admin_headers):
    response = client.put(
        "/api/admin/ingredients/4",
        json={"name": "TOMATO SAUCE", "description": "Crunchy"},
        headers=admin_headers,
    )
    assert response.status_code == 409

    response = client.put(
        "/api/admin/ingredients/4",
        json={"name": "Iceberg Lettuce", "description": "Crunchy"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"ingredientId": 4, "name": "Iceberg Lettuce", "description": "Crunchy"}


def test_blank_ingredient_name_is_rejected(client, admin_headers):
    response = client.post("/api/admin/ingredients", json={"name": "  "}, headers=admin_headers)

    assert response.status_code == 400


def test_delete_ingredient_in_use_conflicts(client, admin_headers):
    response = client.delete("/api/admin/ingredients/2", headers=admin_headers)

    assert response.status_code == 409
    body = response.json()
    assert body["productCount"] == 2
    assert "2 product(s)" in body["detail"]

    assert client.get("/api/admin/ingredients/2", headers=admin_headers).status_code == 200


def test_delete_unused_ingredient(client, admin_headers):
    response = client.delete("/api/admin/ingredients/5", headers=admin_headers)

    assert response.status_code == 200
    assert "French Fries" in response.json()["message"]
    assert client.get("/api/admin/ingredients/5", headers=admin_headers).status_code == 404
    assert client.delete("/api/admin/ingredients/5", headers=admin_headers).status_code == 404


def test_check_usage(client, admin_headers):
    used = client.get("/api/admin/ingredients/check-usage/4", headers=admin_headers).json()
    assert used == {
        "ingredientId": 4,
        "ingredientName": "Lettuce",
        "isInUse": True,
        "productCount": 2,
        "products": [
            {"productId": 1, "productName": "Classic Cheese Pizza"},
            {"productId": 2, "productName": "Double Beef Burger"},
        ],
    }

    unused = client.get("/api/admin/ingredients/check-usage/5", headers=admin_headers).json()
    assert unused["isInUse"] is False
    assert unused["productCount"] == 0
    assert unused["products"] == []


def test_ingredient_detail_lists_products(client, admin_headers):
    detail = client.get("/api/admin/ingredients/3", headers=admin_headers).json()

    assert detail["name"] == "Beef Patty"
    assert [p["name"] for p in detail["products"]] == ["Double Beef Burger"]
    assert detail["products"][0]["categoryName"] == "Non-Veg"


def test_bulk_create_skips_duplicates(client, admin_headers):
    response = client.post(
        "/api/admin/ingredients/bulk-create",
        json=[
            {"name": "Basil"},
            {"name": "basil"},
            {"name": "Tomato Sauce"},
            {"name": "Oregano", "description": "Dried"},
        ],
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["totalProcessed"] == 4
    assert body["successCount"] == 2
    assert body["skippedCount"] == 2
    assert [i["name"] for i in body["createdIngredients"]] == ["Basil", "Oregano"]
    assert [s["name"] for s in body["skippedIngredients"]] == ["basil", "Tomato Sauce"]
    assert all(s["reason"] for s in body["skippedIngredients"])

    names = {i["name"] for i in client.get("/api/admin/ingredients", headers=admin_headers).json()}
    assert {"Basil", "Oregano"} <= names


def test_bulk_create_rejects_empty_list(client, admin_headers):
    response = client.post("/api/admin/ingredients/bulk-create", json=[], headers=admin_headers)

    assert response.status_code == 400
