from flask_jwt_extended import decode_token

API = "/api/v1"


def test_register_creates_member_and_returns_token(app, client):
    resp = client.post(f"{API}/auth/register", json={
        "username": "dave",
        "email": "dave@example.com",
        "password": "secret",
        "fullName": "Dave Reader",
        "role": "ADMIN",
    })

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["role"] == "MEMBER"
    claims = decode_token(data["token"])
    assert claims["role"] == "MEMBER"
    assert claims["userId"] == data["userId"]
    assert claims["sub"] == str(data["userId"])


def test_register_rejects_duplicates_and_missing_fields(client, alice):
    resp = client.post(f"{API}/auth/register", json={"username": "alice", "email": "x@example.com", "password": "p"})
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False

    assert client.post(f"{API}/auth/register", json={"username": "eve"}).status_code == 400


def test_login(client, admin_user):
    resp = client.post(f"{API}/auth/login", json={"username": "admin", "password": "admin-pass"})
    data = resp.get_json()["data"]
    assert resp.status_code == 200
    assert data["role"] == "ADMIN"
    assert data["userId"] == admin_user.id

    bad = client.post(f"{API}/auth/login", json={"username": "admin", "password": "nope"})
    assert bad.status_code == 401
    assert bad.get_json()["message"] == "Invalid username or password"


def test_me(client, alice, headers_for):
    data = client.get(f"{API}/auth/me", headers=headers_for(alice)).get_json()["data"]
    assert data == {
        "id": alice.id,
        "username": "alice",
        "fullName": "Alice Reader",
        "email": "alice@example.com",
        "role": "MEMBER",
    }


def test_garbage_token_is_401(client):
    resp = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_health(client):
    assert client.get("/health").get_json()["data"] == {"ok": True}
