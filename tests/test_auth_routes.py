def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.get_json()["status"] == "ok"


def test_register_returns_token_and_user(client):
    res = client.post(
        "/api/auth/register",
        json={"name": "Nino", "email": "Nino@Example.com", "password": "secret123"},
    )
    assert res.status_code == 201
    body = res.get_json()
    assert body["token"]
    assert body["user"]["email"] == "nino@example.com"
    assert body["user"]["name"] == "Nino"
    assert "password_hash" not in body["user"]


def test_register_requires_fields(client):
    res = client.post("/api/auth/register", json={"email": "a@b.c"})
    assert res.status_code == 400
    assert res.get_json() == {"error": "Name, email, and password are required"}


def test_register_rejects_short_password(client):
    res = client.post(
        "/api/auth/register", json={"name": "A", "email": "a@b.c", "password": "123"}
    )
    assert res.status_code == 400


def test_register_rejects_taken_email(client, user):
    res = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "nino@example.com", "password": "secret123"},
    )
    assert res.status_code == 409
    assert res.get_json() == {"error": "Email already registered"}


def test_login_with_bad_password(client, user):
    res = client.post(
        "/api/auth/login", json={"email": "nino@example.com", "password": "nope-nope"}
    )
    assert res.status_code == 401
    assert res.get_json() == {"error": "Invalid credentials"}


def test_login_unknown_user(client):
    res = client.post(
        "/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"}
    )
    assert res.status_code == 401


def test_me_requires_token(client):
    res = client.get("/api/auth/me")
    assert res.status_code == 401
    assert res.get_json() == {"error": "No token provided"}


def test_me_rejects_garbage_token(client):
    res = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert res.status_code == 401
    assert "error" in res.get_json()


def test_me_returns_current_user(client, auth_headers):
    res = client.get("/api/auth/me", headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["user"]["email"] == "nino@example.com"


def test_unknown_route_has_error_body(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.get_json() == {"error": "Not found"}


def test_register_rejects_non_string_fields(client):
    for body in (
        {"name": 5, "email": "a@b.c", "password": "secret123"},
        {"name": "A", "email": 7, "password": "secret123"},
        {"name": "A", "email": "a@b.c", "password": 123456},
    ):
        res = client.post("/api/auth/register", json=body)
        assert res.status_code == 400
        assert set(res.get_json()) == {"error"}


def test_login_rejects_non_string_password(client, user):
    res = client.post(
        "/api/auth/login", json={"email": "nino@example.com", "password": 123456}
    )
    assert res.status_code == 400
    assert res.get_json() == {"error": "password must be a string"}


def test_register_race_on_same_email_is_a_conflict(client, user, monkeypatch):
    # both requests passed the lookup; the unique index decides
    monkeypatch.setattr("movewell.routes.auth_routes.email_taken", lambda email: False)

    res = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "nino@example.com", "password": "secret123"},
    )
    assert res.status_code == 409
    assert res.get_json() == {"error": "Email already registered"}


def test_unexpected_error_has_json_body(app, client, monkeypatch):
    app.config["PROPAGATE_EXCEPTIONS"] = False

    def broken_body():
        raise RuntimeError("database went away")

    monkeypatch.setattr("movewell.routes.auth_routes.json_body", broken_body)

    res = client.post("/api/auth/register", json={"name": "A"})
    assert res.status_code == 500
    assert res.is_json
    assert res.get_json() == {"error": "Internal server error"}
