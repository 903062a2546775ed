from tequilas.core.config import get_settings

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
OTHER_PNG = b"\x89PNG\r\n\x1a\n" + b"\x01" * 64


def product_form(**overrides):
    form = {
        "name": "Margherita",
        "price": "8.50",
        "stock": "12",
        "categoryId": "1",
        "description": "Basil and tomato",
    }
    form.update(overrides)
    return form


def stored_images():
    path = get_settings().images_path
    return sorted(p.name for p in path.iterdir()) if path.exists() else []


def test_storefront_lists_products(client):
    products = client.get("/api/products").json()

    assert len(products) == 5
    assert products[0] == {
        "productId": 1,
        "name": "Classic Cheese Pizza",
        "description": "Cheesy goodness with tomato base",
        "price": 9.99,
        "stock": 20,
        "imageUrl": None,
        "categoryId": 1,
        "categoryName": "Veg",
    }


def test_product_detail_includes_ingredients(client):
    detail = client.get("/api/products/1").json()

    assert [i["name"] for i in detail["ingredients"]] == ["Mozzarella Cheese", "Tomato Sauce", "Lettuce"]
    assert client.get("/api/products/999").status_code == 404


def test_create_product_with_image_and_ingredients(client, admin_headers):
    response = client.post(
        "/api/admin/products",
        data=product_form(ingredientIds=["1", "2", "404"]),
        files={"image": ("margherita.png", PNG, "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    product = response.json()
    assert product["name"] == "Margherita"
    assert product["price"] == 8.5
    assert product["categoryName"] == "Veg"
    assert [i["ingredientId"] for i in product["ingredients"]] == [1, 2]
    assert product["imageUrl"].startswith("/images/")
    assert product["imageUrl"].endswith("_margherita.png")

    image = client.get(product["imageUrl"])
    assert image.status_code == 200
    assert image.content == PNG


def test_create_product_without_image(client, admin_headers):
    response = client.post("/api/admin/products", data=product_form(), headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["imageUrl"] is None
    assert response.json()["ingredients"] == []


def test_create_product_with_unknown_category_stores_nothing(client, admin_headers):
    before = stored_images()
    response = client.post(
        "/api/admin/products",
        data=product_form(categoryId="99"),
        files={"image": ("margherita.png", PNG, "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert stored_images() == before
    assert len(client.get("/api/products").json()) == 5


def test_create_product_validation(client, admin_headers):
    assert client.post("/api/admin/products", data=product_form(price="-1"), headers=admin_headers).status_code == 400
    assert client.post("/api/admin/products", data=product_form(name=""), headers=admin_headers).status_code == 400

    response = client.post(
        "/api/admin/products",
        data=product_form(),
        files={"image": ("menu.exe", b"MZ", "application/octet-stream")},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert "Unsupported image type" in response.json()["detail"]


def test_blank_product_name_is_rejected(client, admin_headers):
    response = client.post("/api/admin/products", data=product_form(name="   "), headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "name", "message": "must not be blank"}]
    assert len(client.get("/api/products").json()) == 5

    response = client.put("/api/admin/products/1", data=product_form(name="\t "), headers=admin_headers)
    assert response.status_code == 400
    assert client.get("/api/products/1").json()["name"] == "Classic Cheese Pizza"


def test_update_replaces_image_and_ingredients(client, admin_headers):
    created = client.post(
        "/api/admin/products",
        data=product_form(ingredientIds=["1", "2"]),
        files={"image": ("first.png", PNG, "image/png")},
        headers=admin_headers,
    ).json()

    response = client.put(
        f"/api/admin/products/{created['productId']}",
        data=product_form(name="Margherita XL", price="10.00", ingredientIds=["2", "3"]),
        files={"image": ("second.png", OTHER_PNG, "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    updated = response.json()
    assert updated["name"] == "Margherita XL"
    assert updated["price"] == 10.0
    assert [i["ingredientId"] for i in updated["ingredients"]] == [2, 3]
    assert updated["imageUrl"] != created["imageUrl"]
    assert client.get(created["imageUrl"]).status_code == 404
    assert client.get(updated["imageUrl"]).content == OTHER_PNG


def test_update_without_image_keeps_existing_one(client, admin_headers):
    created = client.post(
        "/api/admin/products",
        data=product_form(),
        files={"image": ("keep.png", PNG, "image/png")},
        headers=admin_headers,
    ).json()

    updated = client.put(
        f"/api/admin/products/{created['productId']}",
        data=product_form(stock="3"),
        headers=admin_headers,
    ).json()

    assert updated["stock"] == 3
    assert updated["imageUrl"] == created["imageUrl"]
    assert client.get(created["imageUrl"]).status_code == 200


def test_update_unknown_product(client, admin_headers):
    response = client.put("/api/admin/products/999", data=product_form(), headers=admin_headers)

    assert response.status_code == 404


def test_delete_product_removes_image(client, admin_headers):
    created = client.post(
        "/api/admin/products",
        data=product_form(ingredientIds=["1"]),
        files={"image": ("gone.png", PNG, "image/png")},
        headers=admin_headers,
    ).json()

    response = client.delete(f"/api/admin/products/{created['productId']}", headers=admin_headers)

    assert response.status_code == 200
    assert client.get(created["imageUrl"]).status_code == 404
    assert client.get(f"/api/admin/products/{created['productId']}", headers=admin_headers).status_code == 404

    usage = client.get("/api/admin/ingredients/check-usage/1", headers=admin_headers).json()
    assert [p["productId"] for p in usage["products"]] == [1]


def test_assign_ingredients_is_idempotent(client, admin_headers):
    response = client.post("/api/products/3/ingredients", json={"ingredientIds": [1, 2]}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["addedCount"] == 2

    response = client.post("/api/products/3/ingredients", json={"ingredientIds": [2, 3, 3]}, headers=admin_headers)
    body = response.json()
    assert body["addedCount"] == 1
    assert [i["ingredientId"] for i in body["product"]["ingredients"]] == [1, 2, 3]


def test_assign_ingredients_rejects_unknown_ids(client, admin_headers, user_headers):
    response = client.post("/api/products/3/ingredients", json={"ingredientIds": [1, 77]}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["missingIngredientIds"] == [77]
    assert client.get("/api/products/3").json()["ingredients"] == []

    response = client.post("/api/products/3/ingredients", json={"ingredientIds": [1]}, headers=user_headers)
    assert response.status_code == 403

    response = client.post("/api/products/999/ingredients", json={"ingredientIds": [1]}, headers=admin_headers)
    assert response.status_code == 404
