"""
HTTP tests: routing, identity, response envelope and error mapping.
"""

from fastapi.testclient import TestClient

from storefront.data.models import ProductModel
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService

CHECKOUT_BODY = {"delivery_address": "1 Main St", "customer_phone": "555-0101"}


class TestIdentity:
    def test_missing_header_is_401(self, client):
        response = client.get("/cart")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Not authorized, no user identity"}

    def test_unknown_user_is_401(self, client):
        response = client.get("/cart", headers={"X-User-Id": "9999"})
        assert response.status_code == 401

    def test_inactive_user_is_401(self, client, make_user, auth):
        ghost = make_user(name="Ghost", is_active=False)
        response = client.get("/cart", headers=auth(ghost))
        assert response.status_code == 401

    def test_admin_route_requires_admin(self, client, customer, auth):
        response = client.get("/orders/admin/all", headers=auth(customer))

        assert response.status_code == 403
        assert response.json()["success"] is False


class TestCartEndpoints:
    def test_get_cart_creates_empty_cart(self, client, customer, auth):
        response = client.get("/cart", headers=auth(customer))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["items"] == []
        assert body["data"]["total"] == "0.00"

    def test_add_item(self, client, customer, auth, make_product):
        x = make_product(name="X", price="10.00", quantity=5)

        response = client.post("/cart/add", json={"product_id": x.id, "quantity": 2}, headers=auth(customer))

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Item added to cart"
        assert body["data"]["subtotal"] == "20.00"
        assert body["data"]["items"][0]["product_name"] == "X"

    def test_quantity_defaults_to_one(self, client, customer, auth, make_product):
        x = make_product()
        response = client.post("/cart/add", json={"product_id": x.id}, headers=auth(customer))
        assert response.json()["data"]["items"][0]["quantity"] == 1

    def test_insufficient_stock_is_400(self, client, customer, auth, make_product):
        x = make_product(quantity=5)

        response = client.post("/cart/add", json={"product_id": x.id, "quantity": 6}, headers=auth(customer))

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Only 5 items available"}

    def test_unknown_product_is_404(self, client, customer, auth):
        response = client.post("/cart/add", json={"product_id": 4242, "quantity": 1}, headers=auth(customer))
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    def test_body_validation_is_400(self, client, customer, auth, make_product):
        x = make_product()

        response = client.post("/cart/add", json={"product_id": x.id, "quantity": 0}, headers=auth(customer))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"].startswith("quantity")

    def test_update_and_remove_item(self, client, customer, auth, make_product):
        x = make_product(price="10.00", quantity=5)
        added = client.post("/cart/add", json={"product_id": x.id}, headers=auth(customer)).json()
        item_id = added["data"]["items"][0]["id"]

        updated = client.put(f"/cart/item/{item_id}", json={"quantity": 3}, headers=auth(customer))
        assert updated.status_code == 200
        assert updated.json()["data"]["total"] == "30.00"

        removed = client.delete(f"/cart/item/{item_id}", headers=auth(customer))
        assert removed.status_code == 200
        assert removed.json()["data"]["items"] == []

    def test_unknown_item_is_404(self, client, customer, auth):
        response = client.put("/cart/item/777", json={"quantity": 1}, headers=auth(customer))

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Item not found in cart"}

    def test_count(self, client, customer, auth, make_product):
        assert client.get("/cart/count", headers=auth(customer)).json()["data"] == {"count": 0}

        x = make_product(quantity=10)
        client.post("/cart/add", json={"product_id": x.id, "quantity": 4}, headers=auth(customer))

        assert client.get("/cart/count", headers=auth(customer)).json()["data"] == {"count": 1}

    def test_shipping_and_clear(self, client, customer, auth, make_product):
        x = make_product(price="10.00")
        client.post("/cart/add", json={"product_id": x.id}, headers=auth(customer))

        shipped = client.put("/cart/shipping", json={"shipping": "2.50"}, headers=auth(customer))
        assert shipped.json()["data"]["total"] == "12.50"

        cleared = client.delete("/cart/clear", headers=auth(customer)).json()["data"]
        assert cleared["items"] == []
        assert cleared["total"] == "2.50"

        reset = client.delete("/cart/clear?reset_shipping=true", headers=auth(customer)).json()["data"]
        assert reset["total"] == "0.00"

    def test_negative_shipping_is_400(self, client, customer, auth):
        response = client.put("/cart/shipping", json={"shipping": "-1"}, headers=auth(customer))
        assert response.status_code == 400

    def test_busy_cart_is_409(self, client, customer, auth, make_product, redis_client):
        x = make_product()
        redis_client.set(LockService.cart_key(customer.id), "other-request")

        response = client.post("/cart/add", json={"product_id": x.id}, headers=auth(customer))

        assert response.status_code == 409
        assert response.json()["success"] is False


class TestOrderEndpoints:
    def _fill_cart(self, client, user, headers, product):
        client.post("/cart/add", json={"product_id": product.id, "quantity": 2}, headers=headers)

    def test_checkout_returns_201(self, client, customer, auth, make_product, db):
        x = make_product(name="X", price="10.00", quantity=5)
        self._fill_cart(client, customer, auth(customer), x)

        response = client.post("/orders/checkout", json=CHECKOUT_BODY, headers=auth(customer))

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Order created successfully"
        assert body["data"]["status"] == "pending"
        assert body["data"]["total"] == "20.00"
        assert body["data"]["order_number"].startswith("ORD")

        db.expire_all()
        assert db.get(ProductModel, x.id).quantity == 3
        cart = client.get("/cart", headers=auth(customer)).json()["data"]
        assert cart["items"] == []

    def test_checkout_empty_cart_is_400(self, client, customer, auth):
        response = client.post("/orders/checkout", json=CHECKOUT_BODY, headers=auth(customer))

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Cart is empty"}

    def test_checkout_requires_address(self, client, customer, auth):
        response = client.post("/orders/checkout", json={"customer_phone": "555-0101"}, headers=auth(customer))
        assert response.status_code == 400

    def test_my_orders_and_single_order(self, client, customer, make_user, auth, make_product):
        x = make_product(quantity=10)
        self._fill_cart(client, customer, auth(customer), x)
        order = client.post("/orders/checkout", json=CHECKOUT_BODY, headers=auth(customer)).json()["data"]

        mine = client.get("/orders/my-orders", headers=auth(customer)).json()["data"]
        assert [o["id"] for o in mine] == [order["id"]]

        own = client.get(f"/orders/{order['id']}", headers=auth(customer))
        assert own.status_code == 200

        stranger = make_user(name="Bob")
        foreign = client.get(f"/orders/{order['id']}", headers=auth(stranger))
        assert foreign.status_code == 404

    def test_admin_lists_and_updates_orders(self, client, customer, admin, auth, make_product):
        x = make_product(quantity=10)
        self._fill_cart(client, customer, auth(customer), x)
        order = client.post("/orders/checkout", json=CHECKOUT_BODY, headers=auth(customer)).json()["data"]

        listing = client.get("/orders/admin/all?limit=10", headers=auth(admin)).json()["data"]
        assert listing["total"] == 1
        assert listing["pages"] == 1

        detail = client.get(f"/orders/admin/{order['id']}", headers=auth(admin)).json()["data"]
        assert detail["user_name"] == "Alice"

        updated = client.put(
            f"/orders/admin/{order['id']}/status", json={"status": "delivered"}, headers=auth(admin)
        )
        assert updated.status_code == 200
        assert updated.json()["message"] == "Order status updated to delivered"
        assert updated.json()["data"]["delivered_at"] is not None

    def test_invalid_status_is_400(self, client, customer, admin, auth, make_product):
        x = make_product(quantity=10)
        self._fill_cart(client, customer, auth(customer), x)
        order = client.post("/orders/checkout", json=CHECKOUT_BODY, headers=auth(customer)).json()["data"]

        response = client.put(
            f"/orders/admin/{order['id']}/status", json={"status": "bogus"}, headers=auth(admin)
        )

        assert response.status_code == 400
        assert "bogus" in response.json()["message"]
        detail = client.get(f"/orders/admin/{order['id']}", headers=auth(admin)).json()["data"]
        assert detail["status"] == "pending"

    def test_unknown_order_is_404(self, client, admin, auth):
        response = client.get("/orders/admin/31337", headers=auth(admin))
        assert response.status_code == 404


class TestInfrastructure:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "ok"}

    def test_unexpected_error_is_500(self, app, customer, auth, monkeypatch):
        def explode(self, user_id):
            raise RuntimeError("boom")

        monkeypatch.setattr(CartService, "get_cart", explode)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/cart", headers=auth(customer))

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Something went wrong, please try again later",
        }

    def test_failure_envelope_is_documented(self, client):
        paths = client.get("/openapi.json").json()["paths"]

        for path, method in (("/cart/add", "post"), ("/orders/checkout", "post")):
            responses = paths[path][method]["responses"]
            for code in ("400", "401", "404", "409"):
                ref = responses[code]["content"]["application/json"]["schema"]["$ref"]
                assert ref.endswith("/ErrorResponse")
