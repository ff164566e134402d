"""Integration tests for Checkout API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api import cart_router, checkout_router, order_router, register_error_handlers
from protean.integrations.fastapi import register_exception_handlers

BUYER_HEADERS = {"X-Actor-Id": "buyer-api-001", "X-Actor-Role": "buyer"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(order_router)
    register_exception_handlers(app)
    register_error_handlers(app)
    return TestClient(app)


def _add(client, product_id="prod-tee", variant_id=None, quantity=1):
    response = client.post(
        "/cart",
        json={"product_id": product_id, "variant_id": variant_id, "quantity": quantity},
        headers=BUYER_HEADERS,
    )
    assert response.status_code == 201


def _checkout(client, shipping_details):
    return client.post("/checkout", json={"shipping_details": shipping_details}, headers=BUYER_HEADERS)


class TestCheckoutAPI:
    def test_checkout_creates_order(self, client, shipping_details):
        _add(client, quantity=2)
        response = _checkout(client, shipping_details)
        assert response.status_code == 201
        order_id = response.json()["order_id"]

        order = client.get(f"/orders/{order_id}", headers=BUYER_HEADERS).json()
        assert order["total"] == 200.0
        assert order["status"] == "pending"
        assert order["payment_method"] == "cod"
        assert order["shipping_details"]["city"] == "Bengaluru"
        assert client.get("/cart", headers=BUYER_HEADERS).json()["items"] == []

    def test_invalid_cart(self, client, catalog, shipping_details):
        _add(client)
        catalog.remove_product("prod-tee")
        response = _checkout(client, shipping_details)
        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "CartInvalid"
        assert error["invalid_rows"][0]["reason"] == "ProductRemoved"

    def test_empty_cart(self, client, shipping_details):
        response = _checkout(client, shipping_details)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "EmptyCart"

    def test_gateway_payment_method_rejected(self, client, shipping_details):
        _add(client)
        response = client.post(
            "/checkout",
            json={"shipping_details": shipping_details, "payment_method": "gateway"},
            headers=BUYER_HEADERS,
        )
        assert response.status_code == 400

    def test_buy_now(self, client, shipping_details):
        response = client.post(
            "/checkout/buy-now",
            json={
                "product_id": "prod-shirt",
                "variant_id": "var-shirt-m",
                "quantity": 1,
                "shipping_details": shipping_details,
            },
            headers=BUYER_HEADERS,
        )
        assert response.status_code == 201
        order = client.get(f"/orders/{response.json()['order_id']}", headers=BUYER_HEADERS).json()
        assert order["total"] == 550.0


class TestGatewayCheckoutAPI:
    def test_pay_and_confirm(self, client, gateway, shipping_details):
        _add(client, quantity=2)
        intent = client.post("/checkout/gateway/orders", json={}, headers=BUYER_HEADERS)
        assert intent.status_code == 201
        intent = intent.json()
        assert intent["amount_minor_units"] == 20000
        assert intent["key_id"] == "rzp_test_key"

        confirmation = {
            "gateway_order_id": intent["gateway_order_id"],
            "gateway_payment_id": "pay_api_001",
            "signature": gateway.sign(intent["gateway_order_id"], "pay_api_001"),
            "shipping_details": shipping_details,
        }
        first = client.post("/checkout/gateway/confirm", json=confirmation, headers=BUYER_HEADERS)
        second = client.post("/checkout/gateway/confirm", json=confirmation, headers=BUYER_HEADERS)

        assert first.status_code == 200
        assert first.json() == second.json()
        orders = client.get("/orders", headers=BUYER_HEADERS).json()
        assert len(orders) == 1
        assert orders[0]["is_paid"] is True
        assert orders[0]["payment_reference"]["gateway_payment_id"] == "pay_api_001"

    def test_bad_signature(self, client, shipping_details):
        _add(client)
        intent = client.post("/checkout/gateway/orders", json={}, headers=BUYER_HEADERS).json()
        response = client.post(
            "/checkout/gateway/confirm",
            json={
                "gateway_order_id": intent["gateway_order_id"],
                "gateway_payment_id": "pay_api_001",
                "signature": "forged",
                "shipping_details": shipping_details,
            },
            headers=BUYER_HEADERS,
        )
        assert response.status_code == 402
        error = response.json()["error"]
        assert error["reason"] == "SignatureInvalid"
        assert error["order_created"] is False
        assert client.get("/orders", headers=BUYER_HEADERS).json() == []

    def test_gateway_down(self, client, gateway):
        _add(client)
        gateway.configure(should_succeed=False)
        response = client.post("/checkout/gateway/orders", json={}, headers=BUYER_HEADERS)
        assert response.status_code == 502
        assert response.json()["error"]["code"] == "GatewayUnavailable"
