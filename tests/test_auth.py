from fastapi.testclient import TestClient


def test_register_login_and_me(client: TestClient):
    r = client.post(
        "/api/auth/register",
        json={"email": "Ada@Example.com", "password": "secret123", "first_name": "Ada"},
    )
    assert r.status_code == 201, r.text
    tokens = r.json()
    assert tokens["token_type"] == "bearer"

    r_me = client.get("/api/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert r_me.status_code == 200
    assert r_me.json()["email"] == "ada@example.com"
    assert r_me.json()["first_name"] == "Ada"

    r_login = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret123"})
    assert r_login.status_code == 200
    assert r_login.json()["access_token"]


def test_duplicate_email_conflicts(client: TestClient):
    body = {"email": "dup@example.com", "password": "secret123"}
    assert client.post("/api/auth/register", json=body).status_code == 201
    r = client.post("/api/auth/register", json=body)
    assert r.status_code == 409


def test_bad_credentials(client: TestClient):
    client.post("/api/auth/register", json={"email": "x@example.com", "password": "secret123"})
    r = client.post("/api/auth/login", json={"email": "x@example.com", "password": "nope-nope"})
    assert r.status_code == 401
    r = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "secret123"})
    assert r.status_code == 401


def test_short_password_is_a_bad_request(client: TestClient):
    r = client.post("/api/auth/register", json={"email": "short@example.com", "password": "123"})
    assert r.status_code == 400
    assert "password" in r.json()["detail"]


def test_protected_routes_need_a_token(client: TestClient):
    assert client.get("/api/me").status_code == 401
    assert client.get("/api/exercises").status_code == 401
    assert client.get("/api/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_refresh_token_flow(client: TestClient):
    r = client.post("/api/auth/register", json={"email": "r@example.com", "password": "secret123"})
    tokens = r.json()

    r_refresh = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r_refresh.status_code == 200
    assert r_refresh.json()["access_token"]

    # an access token is not accepted as a refresh token, and vice versa
    r_bad = client.post("/api/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert r_bad.status_code == 401
    r_me = client.get("/api/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert r_me.status_code == 401


def test_health(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}
