"""
API tests for registration, login, password reset and profile.
"""

from conftest import user_payload


def test_register_and_login(client):
    response = client.post("/api/v1/auth/register", json=user_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User Register Successfully"
    assert body["user"]["email"] == "jane@example.com"
    assert body["user"]["role"] == 0
    assert "password" not in body["user"]
    assert "answer" not in body["user"]

    response = client.post(
        "/api/v1/auth/login",
        json={"email": "Jane@Example.com", "password": "secret123"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "login successfully"
    assert body["user"]["_id"]
    assert body["token"]


def test_register_duplicate_email(client):
    client.post("/api/v1/auth/register", json=user_payload())
    response = client.post("/api/v1/auth/register", json=user_payload(name="Other"))

    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Already Register please login"}


def test_register_requires_fields_in_order(client):
    response = client.post("/api/v1/auth/register", json=user_payload(name=""))
    assert response.status_code == 400
    assert response.json()["message"] == "Name is Required"

    payload = user_payload()
    del payload["phone"]
    response = client.post("/api/v1/auth/register", json=payload)
    assert response.json()["message"] == "Phone no is Required"

    response = client.post("/api/v1/auth/register", json=user_payload(email="not-an-email"))
    assert response.json()["message"] == "Invalid Email"


def test_login_failures(client):
    client.post("/api/v1/auth/register", json=user_payload())

    response = client.post("/api/v1/auth/login", json={"email": "jane@example.com"})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid email or password"

    response = client.post(
        "/api/v1/auth/login", json={"email": "nobody@example.com", "password": "secret123"}
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Email is not registered"

    response = client.post(
        "/api/v1/auth/login", json={"email": "jane@example.com", "password": "wrong-one"}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid Password"


def test_forgot_password(client):
    client.post("/api/v1/auth/register", json=user_payload())

    response = client.post(
        "/api/v1/auth/forgot-password",
        json={"email": "jane@example.com", "answer": "Cricket", "new_password": "newpass1"},
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Wrong Email Or Answer"

    response = client.post(
        "/api/v1/auth/forgot-password",
        json={"email": "jane@example.com", "answer": "Football", "new_password": "newpass1"},
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Password Reset Successfully"

    response = client.post(
        "/api/v1/auth/login", json={"email": "jane@example.com", "password": "newpass1"}
    )
    assert response.status_code == 200


def test_session_checks(client, user_token, admin_token):
    assert client.get("/api/v1/auth/user-auth").status_code == 401
    assert client.get(
        "/api/v1/auth/user-auth", headers={"Authorization": "garbage"}
    ).json() == {"success": False, "message": "Invalid token"}

    response = client.get("/api/v1/auth/user-auth", headers={"Authorization": user_token})
    assert response.json() == {"ok": True}

    response = client.get(
        "/api/v1/auth/user-auth", headers={"Authorization": f"Bearer {user_token}"}
    )
    assert response.status_code == 200

    response = client.get("/api/v1/auth/admin-auth", headers={"Authorization": user_token})
    assert response.status_code == 403
    assert response.json()["message"] == "Unauthorized Access"

    response = client.get("/api/v1/auth/admin-auth", headers={"Authorization": admin_token})
    assert response.json() == {"ok": True}

    response = client.get("/api/v1/auth/test", headers={"Authorization": admin_token})
    assert response.status_code == 200
    assert response.text == "Protected Routes"


def test_update_profile(client, user_token):
    headers = {"Authorization": user_token}

    response = client.put("/api/v1/auth/profile", json={"password": "123"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Password must be at least 6 characters long"

    response = client.put(
        "/api/v1/auth/profile",
        json={"name": "Jane Smith", "address": "2 Harbour Road"},
        headers=headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Profile Updated Successfully"
    assert body["updated_user"]["name"] == "Jane Smith"
    assert body["updated_user"]["address"] == "2 Harbour Road"
    assert body["updated_user"]["phone"] == "81234567"


def test_health_endpoints(client):
    assert client.get("/health").json()["status"] == "healthy"

    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "ok"
