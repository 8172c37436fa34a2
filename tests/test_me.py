import jwt
import pytest
from fastapi.testclient import TestClient

from nexacrm.core.security import create_access_token
from nexacrm.core.settings import get_settings
from nexacrm.db.base import Base
from nexacrm.db.session import engine
from nexacrm.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str = "secret") -> str:
    client.post("/api/auth/register", json={"name": "Me User", "email": email, "password": password})
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def test_me_returns_current_user():
    client = TestClient(app)
    token = register_and_login(client, "me@example.com")
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "me@example.com"
    assert data["name"] == "Me User"
    assert data["last_login"] is not None
    assert isinstance(data.get("id"), int)


def test_me_without_token_returns_401():
    client = TestClient(app)
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert "error" in response.json()


def test_me_with_invalid_token_returns_401():
    client = TestClient(app)
    register_and_login(client, "badtoken@example.com")
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer invalid"})
    assert response.status_code == 401


def test_me_with_expired_token_returns_401():
    client = TestClient(app)
    register_and_login(client, "expired@example.com")
    token = create_access_token(user_id=1, expires_minutes=-1)
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == {"error": "Expired token"}


@pytest.mark.parametrize("claims", [{"sub": "not-a-number"}, {"name": "No Subject"}])
def test_token_without_integer_subject_returns_401(claims):
    client = TestClient(app)
    register_and_login(client, "subject@example.com")
    token = jwt.encode(claims, get_settings().SECRET_KEY, algorithm="HS256")
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


def test_token_for_deleted_user_returns_401():
    client = TestClient(app)
    token = create_access_token(user_id=999)
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_update_profile_merges_fields():
    client = TestClient(app)
    token = register_and_login(client, "profile@example.com")
    headers = {"Authorization": f"Bearer {token}"}

    response = client.put("/api/auth/me", json={"company": "Acme", "phone": "+1 555"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["company"] == "Acme"
    assert response.json()["name"] == "Me User"

    response = client.put("/api/auth/me", json={"name": "Renamed", "phone": ""}, headers=headers)
    data = response.json()
    assert data["name"] == "Renamed"
    assert data["company"] == "Acme"
    assert data["phone"] is None


def test_change_password():
    client = TestClient(app)
    token = register_and_login(client, "pw@example.com")
    headers = {"Authorization": f"Bearer {token}"}

    wrong = client.put(
        "/api/auth/me/password",
        json={"current_password": "nope", "new_password": "newsecret"},
        headers=headers,
    )
    assert wrong.status_code == 400

    short = client.put(
        "/api/auth/me/password",
        json={"current_password": "secret", "new_password": "123"},
        headers=headers,
    )
    assert short.status_code == 400

    ok = client.put(
        "/api/auth/me/password",
        json={"current_password": "secret", "new_password": "newsecret"},
        headers=headers,
    )
    assert ok.status_code == 200
    assert client.post("/api/auth/login", json={"email": "pw@example.com", "password": "secret"}).status_code == 400
    assert client.post("/api/auth/login", json={"email": "pw@example.com", "password": "newsecret"}).status_code == 200
