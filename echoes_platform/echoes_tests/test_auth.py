"""End-to-end tests for registration, login and the protected relay."""
from echoes_platform.echoes_service.auth import verify_password
from echoes_platform.echoes_service.config import Settings, get_settings
from echoes_platform.echoes_service.db import SessionLocal
from echoes_platform.echoes_service.main import app
from echoes_platform.echoes_service.models import AuthEvent, User
from echoes_platform.echoes_service.repositories import CredentialStore
from echoes_platform.echoes_service.routes import health
from sqlalchemy.exc import OperationalError


def register(client, username="alice", password="secret1"):
    return client.post("/auth/register", json={"username": username, "password": password})


def login(client, username="alice", password="secret1"):
    return client.post("/auth/login", json={"username": username, "password": password})


def test_register_login_and_call_protected_route(client, fake_completion):
    assert register(client).status_code == 201

    ok = login(client)
    assert ok.status_code == 200
    token = ok.json()["token"]

    assert login(client, password="wrongpass").status_code == 401

    r = client.post(
        "/api/echo",
        headers={"Authorization": f"Bearer {token}"},
        json={"user_text": "hello"},
    )
    assert r.status_code == 200
    assert r.json()["username"] == "alice"


def test_register_response(client):
    r = register(client)
    assert r.status_code == 201
    assert r.json() == {"message": "User registered successfully"}


def test_register_stores_hash_not_plaintext(client):
    register(client, password="secret1")

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.username == "alice").first()
        assert user is not None
        assert user.password != "secret1"
        assert verify_password("secret1", user.password)
    finally:
        db.close()


def test_register_duplicate_username(client):
    assert register(client).status_code == 201
    dup = register(client, password="another")
    assert dup.status_code == 400
    assert dup.json()["detail"] == "Username already exists"


def test_register_missing_fields(client):
    r = client.post("/auth/register", json={"username": "alice"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid input"


def test_register_empty_values(client):
    assert register(client, username="", password="x").status_code == 400
    assert register(client, username="alice", password="").status_code == 400


def test_login_unknown_user_same_as_wrong_password(client):
    register(client)
    unknown = login(client, username="nobody")
    wrong = login(client, password="wrongpass")

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"detail": "Invalid username or password"}


def test_login_bad_body(client):
    r = client.post("/auth/login", json={"password": "secret1"})
    assert r.status_code == 400


def test_login_without_secret_is_server_error(client):
    register(client)
    app.dependency_overrides[get_settings] = lambda: Settings(JWT_SECRET="")
    r = login(client)
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to generate token"


def test_login_response_never_contains_hash(client):
    register(client)
    body = login(client).json()
    assert set(body) == {"token"}


def test_auth_events_recorded(client):
    register(client)
    login(client)
    login(client, password="wrongpass")
    login(client, username="ghost")

    db = SessionLocal()
    try:
        events = [(e.username, e.event_type) for e in db.query(AuthEvent).order_by(AuthEvent.timestamp).all()]
    finally:
        db.close()

    assert ("alice", "register") in events
    assert ("alice", "login_success") in events
    assert ("alice", "login_failure") in events
    assert ("ghost", "login_failure") in events


def test_me_returns_identity(client):
    register(client)
    token = login(client).json()["token"]
    r = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["username"] == "alice"


def test_health_endpoints(client):
    assert client.get("/").text == "Welcome to the Echoes API!"
    assert client.get("/health").json()["status"] == "healthy"
    ready = client.get("/ready")
    assert ready.status_code == 200
    assert ready.json()["database"] == "connected"


def test_api_key_is_not_exposed(client):
    assert client.get("/api-key").status_code == 404


def test_register_database_failure_is_json_500(client, monkeypatch):
    def broken_insert(self, username, password_hash):
        raise OperationalError("INSERT INTO users", {}, Exception("database is locked"))

    monkeypatch.setattr(CredentialStore, "insert", broken_insert)

    r = register(client)
    assert r.status_code == 500
    assert r.json() == {"detail": "Failed to register user"}


def test_ready_reports_database_down(client, monkeypatch):
    monkeypatch.setattr(health, "check_db_connection", lambda: False)

    r = client.get("/ready")
    assert r.status_code == 503
    detail = r.json()["detail"]
    assert detail["status"] == "not_ready"
    assert detail["database"] == "disconnected"
