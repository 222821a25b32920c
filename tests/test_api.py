from conftest import login_as


class TestCatalogApi:
    def test_list_products(self, client, catalog):
        response = client.get("/api/v1/products")
        body = response.get_json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["data"]["count"] == 3

    def test_filters(self, client, catalog):
        necklaces = client.get(f"/api/v1/products?category={catalog['necklaces'].id}").get_json()["data"]
        assert {p["name"] for p in necklaces["products"]} == {"Pearl Necklace", "Sapphire Pendant"}

        in_stock = client.get(f"/api/v1/products?category={catalog['necklaces'].id}&in_stock=true").get_json()["data"]
        assert [p["name"] for p in in_stock["products"]] == ["Pearl Necklace"]

        search = client.get("/api/v1/products?q=PEARL").get_json()["data"]
        assert [p["name"] for p in search["products"]] == ["Pearl Necklace"]

        by_category_name = client.get("/api/v1/products?q=rings").get_json()["data"]
        assert [p["name"] for p in by_category_name["products"]] == ["Diamond Solitaire Ring"]

    def test_bad_category_is_400(self, client, catalog):
        response = client.get("/api/v1/products?category=abc")
        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_product_price_depends_on_viewer(self, client, catalog, b2b_user):
        url = f"/api/v1/products/{catalog['ring'].id}"
        retail = client.get(url).get_json()["data"]
        assert retail["price_cents"] == 250000
        assert "b2b_price_cents" not in retail

        login_as(client, b2b_user)
        wholesale = client.get(url).get_json()["data"]
        assert wholesale["price_cents"] == 180000
        assert wholesale["min_quantity"] == 2

    def test_missing_product_is_404_envelope(self, client):
        response = client.get("/api/v1/products/999")
        body = response.get_json()
        assert response.status_code == 404
        assert body["error"]["code"] == "NOT_FOUND"

    def test_categories_with_counts(self, client, catalog):
        data = client.get("/api/v1/categories").get_json()["data"]
        counts = {c["name"]: c["product_count"] for c in data}
        assert counts == {"Rings": 1, "Necklaces": 2}


class TestCartApi:
    def test_add_update_remove(self, client, catalog):
        pearl, ring = catalog["pearl"], catalog["ring"]

        response = client.post("/api/v1/cart/items", json={"product_id": pearl.id, "quantity": 2})
        assert response.status_code == 201
        client.post("/api/v1/cart/items", json={"product_id": ring.id})

        cart = client.get("/api/v1/cart").get_json()["data"]
        assert cart["total_cents"] == 45000 * 2 + 250000
        assert cart["total_items"] == 2

        cart = client.patch(f"/api/v1/cart/items/{pearl.id}", json={"quantity": 3}).get_json()["data"]
        assert cart["total_cents"] == 45000 * 3 + 250000

        cart = client.delete(f"/api/v1/cart/items/{ring.id}").get_json()["data"]
        assert cart["total_cents"] == 45000 * 3

        cart = client.patch(f"/api/v1/cart/items/{pearl.id}", json={"quantity": 0}).get_json()["data"]
        assert cart["is_empty"] is True

    def test_clear(self, client, catalog):
        client.post("/api/v1/cart/items", json={"product_id": catalog["pearl"].id})
        cart = client.delete("/api/v1/cart").get_json()["data"]
        assert cart["is_empty"] is True
        assert client.get("/api/v1/cart").get_json()["data"]["total_cents"] == 0

    def test_out_of_stock_is_422(self, client, catalog):
        response = client.post("/api/v1/cart/items", json={"product_id": catalog["sold_out"].id})
        assert response.status_code == 422
        assert response.get_json()["error"]["message"] == "This product is out of stock"

    def test_b2b_minimum_enforced(self, client, catalog, b2b_user):
        login_as(client, b2b_user)
        response = client.post("/api/v1/cart/items", json={"product_id": catalog["pearl"].id, "quantity": 3})
        assert response.status_code == 422
        assert response.get_json()["error"]["message"] == "Minimum quantity for B2B customers is 5"

    def test_invalid_body_is_400_with_field_errors(self, client, catalog):
        response = client.post("/api/v1/cart/items", json={"quantity": 2})
        body = response.get_json()
        assert response.status_code == 400
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["details"]["field_errors"][0]["field"] == "product_id"

    def test_unknown_line_is_404(self, client):
        assert client.delete("/api/v1/cart/items/5").status_code == 404

    def test_tampered_cart_cookie_is_discarded(self, client, catalog):
        with client.session_transaction() as sess:
            sess["cart"] = {"lines": [{"product_id": "x", "quantity": -3}]}
        cart = client.get("/api/v1/cart").get_json()["data"]
        assert cart["is_empty"] is True


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["database"] == "reachable"


def test_wholesale_line_is_repriced_after_sign_out(client, catalog, b2b_user):
    pearl = catalog["pearl"]
    login_as(client, b2b_user)
    client.post("/api/v1/cart/items", json={"product_id": pearl.id, "quantity": 5})
    client.post("/logout")

    client.post("/api/v1/cart/items", json={"product_id": pearl.id, "quantity": 10})
    cart = client.patch(f"/api/v1/cart/items/{pearl.id}", json={"quantity": 1}).get_json()["data"]

    line = cart["lines"][0]
    assert line["is_wholesale"] is False
    assert line["quantity"] == 1
    assert line["unit_price_cents"] == 45000
    assert cart["total_cents"] == 45000
