def test_register_login_me_logout(client):
    resp = client.post("/api/auth/register", json={
        "name": "New Reader", "email": "New@Library.test", "password": "pw123", "role": "admin",
    })
    assert resp.status_code == 201
    user = resp.get_json()["data"]
    assert user["email"] == "new@library.test"
    assert user["role"] == "member"

    assert client.get("/api/auth/me").status_code == 401

    resp = client.post("/api/auth/login", json={"email": "new@library.test", "password": "pw123"})
    assert resp.status_code == 200
    assert resp.get_json()["access_token"]

    me = client.get("/api/auth/me").get_json()["data"]
    assert me["id"] == user["id"]

    assert client.get("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").status_code == 401


def test_duplicate_registration(client, member):
    resp = client.post("/api/auth/register", json={"name": "Dup", "email": member.email, "password": "x"})
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "User already exists"


def test_register_requires_fields(client):
    assert client.post("/api/auth/register", json={"email": "a@b.c"}).status_code == 400


def test_login_failures(client, member):
    resp = client.post("/api/auth/login", json={"email": member.email, "password": "wrong"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Password incorrect"

    resp = client.post("/api/auth/login", json={"email": "ghost@library.test", "password": "x"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "User not found"


def test_health_and_unknown_route(client):
    assert client.get("/health").get_json() == {"ok": True}
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
