from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from synergysphere.models.user import User
from synergysphere.tests.utils import TEST_PASSWORD, auth_headers


def test_register_returns_tokens(client: TestClient):
    response = client.post("/auth/register", json={"name": "Dana", "email": "dana@example.com", "password": "secret123"})
    assert response.status_code == 201
    body = response.json()
    assert body["token"]
    assert body["refresh_token"]
    assert body["user"]["email"] == "dana@example.com"
    assert "password_hash" not in body["user"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Dana"


def test_register_duplicate_email(client: TestClient, member):
    response = client.post("/auth/register", json={"name": "Again", "email": member.email, "password": "secret123"})
    assert response.status_code == 400
    assert response.json() == {"status": 400, "message": "User already exists"}


def test_register_validation_error_shape(client: TestClient):
    response = client.post("/auth/register", json={"name": "Dana", "email": "not-an-email", "password": "secret123"})
    assert response.status_code == 422
    assert response.json()["status"] == 422
    assert "email" in response.json()["message"]


def test_login(client: TestClient, member):
    response = client.post("/auth/login", json={"email": member.email, "password": TEST_PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == member.id


def test_login_invalid_credentials(client: TestClient, member):
    response = client.post("/auth/login", json={"email": member.email, "password": "wrongpassword"})
    assert response.status_code == 401
    assert response.json() == {"status": 401, "message": "Invalid credentials"}


def test_me_requires_token(client: TestClient):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized to access this route"

    response = client.get("/auth/me", headers={"Authorization": "Bearer broken"})
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, token failed"


def test_refresh_token_rotates(client: TestClient, member):
    login = client.post("/auth/login", json={"email": member.email, "password": TEST_PASSWORD}).json()

    refreshed = client.post("/auth/refresh-token", json={"refresh_token": login["refresh_token"]})
    assert refreshed.status_code == 200
    new_refresh = refreshed.json()["refresh_token"]
    assert new_refresh != login["refresh_token"]

    reused = client.post("/auth/refresh-token", json={"refresh_token": login["refresh_token"]})
    assert reused.status_code == 403
    assert reused.json()["message"] == "Invalid refresh token"

    missing = client.post("/auth/refresh-token", json={})
    assert missing.status_code == 401


def test_logout_revokes_refresh_token(client: TestClient, member):
    login = client.post("/auth/login", json={"email": member.email, "password": TEST_PASSWORD}).json()
    response = client.post("/auth/logout", headers=auth_headers(member))
    assert response.status_code == 200
    assert client.post("/auth/refresh-token", json={"refresh_token": login["refresh_token"]}).status_code == 403


def test_password_reset_flow(client: TestClient, db: Session, member):
    response = client.post("/auth/forgot-password", json={"email": member.email})
    assert response.status_code == 200
    unknown = client.post("/auth/forgot-password", json={"email": "ghost@example.com"})
    assert unknown.json()["message"] == response.json()["message"]

    token = db.get(User, member.id).password_reset_token
    reset = client.post(f"/auth/reset-password/{token}", json={"password": "freshpass1"})
    assert reset.status_code == 200

    assert client.post("/auth/login", json={"email": member.email, "password": "freshpass1"}).status_code == 200
    again = client.post(f"/auth/reset-password/{token}", json={"password": "another1"})
    assert again.status_code == 400
