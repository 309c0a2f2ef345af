"""Cart CRUD endpoints."""


def _add(client, email, product_id):
    return client.post("/api/cart/add", json={"email": email, "productId": product_id})


class TestCartEndpoints:
    def test_add_and_get(self, client, make_product):
        product = make_product("Lamp", 35000)

        assert _add(client, "a@example.com", product).json() == {"success": True}
        _add(client, "a@example.com", product)

        lines = client.get("/api/cart", params={"email": "a@example.com"}).json()
        assert len(lines) == 1
        assert lines[0]["id"] == str(product)
        assert lines[0]["name"] == "Lamp"
        assert lines[0]["quantity"] == 2

    def test_add_unknown_product_is_400(self, client):
        assert _add(client, "a@example.com", 404).status_code == 400

    def test_update_quantity(self, client, make_product):
        product = make_product()
        _add(client, "a@example.com", product)

        response = client.post(
            "/api/cart/update", json={"email": "a@example.com", "productId": product, "quantity": 5}
        )

        assert response.status_code == 200
        assert client.get("/api/cart", params={"email": "a@example.com"}).json()[0]["quantity"] == 5

    def test_update_to_zero_deletes(self, client, make_product):
        product = make_product()
        _add(client, "a@example.com", product)

        client.post("/api/cart/update", json={"email": "a@example.com", "productId": product, "quantity": 0})

        assert client.get("/api/cart", params={"email": "a@example.com"}).json() == []

    def test_delete_line_and_clear(self, client, make_product):
        first = make_product("A", 10)
        second = make_product("B", 20)
        _add(client, "a@example.com", first)
        _add(client, "a@example.com", second)

        assert client.delete(f"/api/cart/a@example.com/{first}").status_code == 200
        assert [l["name"] for l in client.get("/api/cart", params={"email": "a@example.com"}).json()] == ["B"]

        assert client.delete("/api/cart/a@example.com").status_code == 200
        assert client.get("/api/cart", params={"email": "a@example.com"}).json() == []

    def test_email_is_required(self, client):
        assert client.get("/api/cart").status_code == 422
