"""
API tests for checkout and order management.
"""

import pytest

from conftest import create_product


@pytest.fixture
def products(client, admin_token, category):
    return [
        create_product(client, admin_token, category["_id"], name="Phone", price="199.99"),
        create_product(client, admin_token, category["_id"], name="Case", price="15.25"),
    ]


def pay(client, token, nonce, cart):
    return client.post(
        "/api/v1/product/braintree/payment",
        json={"nonce": nonce, "cart": cart},
        headers={"Authorization": token},
    )


def test_client_token(client):
    response = client.get("/api/v1/product/braintree/token")

    assert response.status_code == 200
    assert response.json()["client_token"].startswith("mock-client-token-")


def test_checkout_charges_stored_prices(client, gateway, user_token, products):
    phone, case = products
    cart = [
        {"_id": phone["_id"], "price": 0.01},
        {"_id": case["_id"]},
        {"_id": case["_id"]},
    ]

    response = pay(client, user_token, "fake-valid-nonce", cart)

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["order_id"]

    [transaction] = gateway.transactions
    assert str(transaction.amount) == "230.49"

    orders = client.get("/api/v1/auth/orders", headers={"Authorization": user_token}).json()
    assert len(orders) == 1
    order = orders[0]
    assert order["_id"] == body["order_id"]
    assert order["status"] == "Not Processed"
    assert order["buyer"]["name"] == "Jane Doe"
    assert [p["name"] for p in order["products"]] == ["Phone", "Case", "Case"]
    assert order["payment"]["success"] is True
    assert order["payment"]["amount"] == "230.49"


def test_checkout_requires_sign_in(client, products):
    response = client.post(
        "/api/v1/product/braintree/payment",
        json={"nonce": "fake-valid-nonce", "cart": [{"_id": products[0]["_id"]}]},
    )
    assert response.status_code == 401


def test_declined_payment_creates_no_order(client, user_token, products):
    response = pay(
        client, user_token, "fake-processor-declined-visa-nonce", [{"_id": products[0]["_id"]}]
    )

    assert response.status_code == 402
    assert response.json() == {"success": False, "message": "Do Not Honor"}
    assert client.get("/api/v1/auth/orders", headers={"Authorization": user_token}).json() == []


@pytest.mark.parametrize(
    "nonce, cart, message",
    [
        ("fake-valid-nonce", [], "Cart is empty"),
        ("", [{"_id": "x"}], "Payment nonce is required"),
        ("fake-valid-nonce", [{"_id": "000000000000000000000000"}], "Product not found"),
    ],
)
def test_checkout_rejects_bad_requests(client, user_token, products, nonce, cart, message):
    response = pay(client, user_token, nonce, cart)

    assert response.status_code == 400
    assert response.json()["message"].startswith(message)


def test_gateway_outage_is_bad_gateway(client, gateway, user_token, products):
    gateway.set_unavailable()

    response = pay(client, user_token, "fake-valid-nonce", [{"_id": products[0]["_id"]}])

    assert response.status_code == 502
    assert response.json()["success"] is False


def test_admin_order_management(client, user_token, admin_token, products):
    pay(client, user_token, "fake-valid-nonce", [{"_id": products[0]["_id"]}])
    second = pay(client, user_token, "fake-valid-nonce", [{"_id": products[1]["_id"]}]).json()

    response = client.get("/api/v1/auth/all-orders", headers={"Authorization": user_token})
    assert response.status_code == 403

    orders = client.get("/api/v1/auth/all-orders", headers={"Authorization": admin_token}).json()
    assert [o["_id"] for o in orders][0] == second["order_id"]
    assert len(orders) == 2

    response = client.put(
        f"/api/v1/auth/order-status/{second['order_id']}",
        json={"status": "Shipped"},
        headers={"Authorization": admin_token},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Shipped"

    response = client.put(
        f"/api/v1/auth/order-status/{second['order_id']}",
        json={"status": "Lost"},
        headers={"Authorization": admin_token},
    )
    assert response.status_code == 400

    response = client.put(
        "/api/v1/auth/order-status/000000000000000000000000",
        json={"status": "Delivered"},
        headers={"Authorization": admin_token},
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Order not found"


def test_order_status_with_malformed_id(client, admin_token):
    response = client.put(
        "/api/v1/auth/order-status/not-an-id",
        json={"status": "Delivered"},
        headers={"Authorization": admin_token},
    )
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Order not found"}
