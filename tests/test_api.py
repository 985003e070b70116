import uuid
from datetime import timedelta

import pytest

from chirpy.auth.security import make_jwt, validate_jwt

from conftest import OTHER_SECRET, TEST_SECRET


def _register(client, email="walt@example.com", password="04234"):
    resp = client.post("/api/users", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


def _login(client, email="walt@example.com", password="04234", **extra):
    resp = client.post("/api/login", json={"email": email, "password": password, **extra})
    assert resp.status_code == 200, resp.text
    return resp.json()


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def test_healthz(client):
    resp = client.get("/api/healthz")

    assert resp.status_code == 200
    assert resp.text == "OK"
    assert resp.headers["content-type"].startswith("text/plain")


def test_create_user(client):
    user = _register(client)

    assert user["email"] == "walt@example.com"
    assert set(user) == {"id", "email", "created_at", "updated_at"}
    uuid.UUID(user["id"])


@pytest.mark.parametrize(
    "payload,status,error",
    [
        ({"email": "", "password": "pw"}, 400, "email required"),
        ({"email": "x@example.com", "password": "  "}, 400, "password required"),
        ({"email": "x@example.com"}, 400, "Invalid JSON"),
        ({"email": "x@example.com", "password": "a" * 80}, 500, "could not hash password"),
    ],
)
def test_create_user_errors(client, payload, status, error):
    resp = client.post("/api/users", json=payload)

    assert resp.status_code == status
    assert resp.json() == {"error": error}


def test_create_user_duplicate_email(client):
    _register(client)
    resp = client.post("/api/users", json={"email": "WALT@example.com", "password": "x"})

    assert resp.status_code == 409
    assert resp.json() == {"error": "email already registered"}


def test_login_issues_token(client):
    user = _register(client)
    body = _login(client)

    assert body["id"] == user["id"]
    assert "hashed_password" not in body
    assert validate_jwt(body["token"], TEST_SECRET) == uuid.UUID(user["id"])


def test_login_failures_are_indistinguishable(client):
    _register(client)

    wrong_pw = client.post("/api/login", json={"email": "walt@example.com", "password": "nope"})
    no_user = client.post("/api/login", json={"email": "jesse@example.com", "password": "04234"})

    assert wrong_pw.status_code == no_user.status_code == 401
    assert wrong_pw.json() == no_user.json() == {"error": "Incorrect email or password"}


def test_login_expires_in_seconds_is_capped(client):
    import jwt

    _register(client)
    short = _login(client, expires_in_seconds=60)["token"]
    huge = _login(client, expires_in_seconds=10**9)["token"]

    def ttl(token):
        claims = jwt.decode(token, TEST_SECRET, algorithms=["HS256"], issuer="chirpy")
        return claims["exp"] - claims["iat"]

    assert ttl(short) == 60
    assert ttl(huge) == 3600


def test_post_chirp_requires_bearer(client):
    resp = client.post("/api/chirps", json={"body": "hello"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "unauthorized"}
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.parametrize(
    "make_token",
    [
        lambda uid: make_jwt(uid, TEST_SECRET, -timedelta(minutes=1)),
        lambda uid: make_jwt(uid, OTHER_SECRET, timedelta(minutes=1)),
        lambda uid: "garbage",
    ],
    ids=["expired", "wrong_secret", "garbage"],
)
def test_post_chirp_rejects_bad_tokens(client, make_token):
    user = _register(client)
    resp = client.post("/api/chirps", json={"body": "hello"}, headers=_auth(make_token(uuid.UUID(user["id"]))))

    assert resp.status_code == 401
    assert resp.json() == {"error": "unauthorized"}


def test_auth_failures_are_logged_without_token(client, capsys):
    resp = client.post("/api/chirps", json={"body": "hello"}, headers=_auth("garbage-token-value"))

    assert resp.status_code == 401
    out = capsys.readouterr().out
    assert "[auth] auth rejected: POST /api/chirps code=token_malformed" in out
    assert "garbage-token-value" not in out


def test_chirp_lifecycle(client):
    user = _register(client)
    token = _login(client)["token"]

    resp = client.post("/api/chirps", json={"body": "I had a kerfuffle today"}, headers=_auth(token))
    assert resp.status_code == 201, resp.text
    chirp = resp.json()
    assert chirp["body"] == "I had a **** today"
    assert chirp["user_id"] == user["id"]

    resp = client.post("/api/chirps", json={"body": "second"}, headers=_auth(token))
    assert resp.status_code == 201

    listed = client.get("/api/chirps").json()
    assert [c["body"] for c in listed] == ["I had a **** today", "second"]

    resp = client.get(f"/api/chirps/{chirp['id']}")
    assert resp.status_code == 200
    assert resp.json() == chirp


def test_chirp_too_long(client):
    _register(client)
    token = _login(client)["token"]

    resp = client.post("/api/chirps", json={"body": "x" * 141}, headers=_auth(token))

    assert resp.status_code == 400
    assert resp.json() == {"error": "Chirp is too long"}


def test_get_chirp_errors(client):
    bad = client.get("/api/chirps/not-a-uuid")
    missing = client.get(f"/api/chirps/{uuid.uuid4()}")

    assert bad.status_code == 400
    assert bad.json() == {"error": "invalid chirp_id"}
    assert missing.status_code == 404
    assert missing.json() == {"error": "chirp not found"}


def test_token_for_deleted_user_is_rejected(client):
    _register(client)
    token = _login(client)["token"]
    assert client.post("/admin/reset").status_code == 200

    resp = client.post("/api/chirps", json={"body": "ghost"}, headers=_auth(token))

    assert resp.status_code == 401


def test_fileserver_hits_and_reset(client):
    for _ in range(3):
        resp = client.get("/app/")
        assert resp.status_code == 200
        assert "Welcome to Chirpy" in resp.text

    client.get("/api/healthz")
    metrics = client.get("/admin/metrics")
    assert metrics.headers["content-type"].startswith("text/html")
    assert "Chirpy has been visited 3 times!" in metrics.text

    _register(client)
    assert client.post("/admin/reset").status_code == 200

    assert "Chirpy has been visited 0 times!" in client.get("/admin/metrics").text
    resp = client.post("/api/login", json={"email": "walt@example.com", "password": "04234"})
    assert resp.status_code == 401


def test_reset_forbidden_outside_dev(make_client):
    client = make_client(PLATFORM="prod")

    resp = client.post("/admin/reset")

    assert resp.status_code == 403
    assert resp.json() == {"error": "forbidden"}
