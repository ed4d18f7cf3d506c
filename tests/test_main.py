"""Test API endpoints."""

from fastapi.testclient import TestClient

from storefront.main import app


def test_root():
    client = TestClient(app)
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "service": "kn3d-storefront"}


def test_health_reports_sweeper_during_lifespan(app_cache):
    with TestClient(app) as client:
        data = client.get("/health").json()
        assert data["ok"] is True
        assert data["sweeping"] is True
        assert data["cache_entries"] == 0
    assert app_cache.sweeping is False


def test_quote_small_cart(app_cache):
    client = TestClient(app)
    response = client.post("/pricing/quote", json={"items": [
        {"price": "45.5", "quantity": 2},
        {"price": 9.0},
    ]})
    assert response.status_code == 200
    data = response.json()
    assert data["subtotal"] == 100.0
    assert data["shipping"] == 15.0
    assert data["tax"] == 18.0
    assert data["total"] == 133.0
    assert data["formatted"]["total"] == "S/ 133.00"
    assert data["cached"] is False


def test_quote_is_cached(app_cache, clock):
    client = TestClient(app)
    body = {"items": [{"price": 250, "quantity": 1}]}
    first = client.post("/pricing/quote", json=body).json()
    second = client.post("/pricing/quote", json=body).json()
    assert first["shipping"] == 0
    assert second["cached"] is True
    assert second["total"] == first["total"]

    clock.advance(10_000)
    third = client.post("/pricing/quote", json=body).json()
    assert third["cached"] is False


def test_quote_rejects_bad_price(app_cache):
    client = TestClient(app)
    response = client.post("/pricing/quote", json={"items": [{"price": "gratis"}]})
    assert response.status_code == 422
    assert "price" in response.json()["detail"]
    assert len(app_cache) == 0


def test_quote_rejects_zero_quantity(app_cache):
    client = TestClient(app)
    response = client.post("/pricing/quote", json={"items": [{"price": 1, "quantity": 0}]})
    assert response.status_code == 422


def test_slug_endpoint():
    client = TestClient(app)
    response = client.get("/utils/slug", params={"text": "Filamento PLA Ñoño"})
    assert response.json() == {"slug": "filamento-pla-nono"}


def test_identifier_endpoints():
    client = TestClient(app)
    assert client.get("/utils/sku", params={"prefix": "FIL"}).json()["sku"].startswith("FIL-")
    assert client.get("/utils/sku").json()["sku"].startswith("KN3D-")
    assert client.get("/utils/order-number").json()["order_number"].startswith("KN3D-")


def test_clear_cache(app_cache):
    app_cache.set("a", 1)
    app_cache.set("b", 2)
    client = TestClient(app)

    data = client.delete("/cache", params={"key": "a"}).json()
    assert data["cleared"] == "a"
    assert data["cache_entries"] == 1

    data = client.delete("/cache").json()
    assert data["cleared"] == "*"
    assert len(app_cache) == 0


def test_quote_cache_key_ignores_price_spelling(app_cache):
    client = TestClient(app)
    first = client.post("/pricing/quote", json={"items": [{"price": 9, "quantity": 2}]}).json()
    second = client.post("/pricing/quote", json={"items": [{"price": "9", "quantity": 2}]}).json()
    third = client.post("/pricing/quote", json={"items": [{"price": "9.00", "quantity": 2}]}).json()
    assert first["cached"] is False
    assert second["cached"] is True
    assert third["cached"] is True
    assert len(app_cache) == 1


def test_quote_rounds_half_cents_up(app_cache):
    client = TestClient(app)
    data = client.post("/pricing/quote", json={"items": [{"price": "0.625"}]}).json()
    assert data["subtotal"] == 0.63
    assert data["formatted"]["subtotal"] == "S/ 0.63"
