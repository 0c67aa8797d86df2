from fastapi.testclient import TestClient

from conftest import seed_product


def test_register_login_and_use_cart(client: TestClient, session_factory) -> None:
    res = client.post(
        "/api/auth/register",
        json={"firstName": "Ada", "lastName": "L", "email": "ada@example.com", "password": "pw123456"},
    )
    assert res.status_code == 201, res.text

    res = client.post("/api/auth/register", json={"firstName": "Ada", "lastName": "L", "email": "ada@example.com", "password": "x"})
    assert res.status_code == 400

    res = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "wrong"})
    assert res.status_code == 401

    res = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "pw123456"})
    assert res.status_code == 200
    token = res.json()["access_token"]

    mug = seed_product(session_factory, title="Mug", stock=2)
    res = client.post(
        "/api/cart/",
        json={"productId": mug, "quantity": 1},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert res.status_code == 201
    assert res.json()["cartItems"][0]["_id"] == mug
