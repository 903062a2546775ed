import asyncio

from tequilas.main import lifespan


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "operational"
    assert body["database"] == "healthy"
    assert body["image_storage"] == "healthy"


def test_root(client):
    body = client.get("/").json()

    assert body["documentation"] == "/docs"
    assert body["environment"] == "development"


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_startup_seeding_is_idempotent(client, admin_headers):
    async def restart():
        async with lifespan(client.app):
            pass

    asyncio.run(restart())

    assert len(client.get("/api/products").json()) == 5
    assert len(client.get("/api/categories").json()) == 5
    assert client.get("/api/orders", headers=admin_headers).status_code == 200
