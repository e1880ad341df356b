from datetime import timedelta

from fastapi import status

from resume_tailor.models.user import User
from resume_tailor.services import auth as auth_service


def test_password_hashing():
    password = "MySecurePassword123!"
    hashed = auth_service.get_password_hash(password)
    assert hashed != password
    assert auth_service.verify_password(password, hashed)
    assert not auth_service.verify_password("WrongPassword", hashed)


def test_access_token_round_trip():
    token = auth_service.create_access_token({"sub": "jane@example.com"})
    payload = auth_service.decode_access_token(token)
    assert payload["sub"] == "jane@example.com"
    assert payload["type"] == "access"


def test_expired_token_is_flagged():
    token = auth_service.create_access_token({"sub": "jane@example.com"}, expires_delta=timedelta(minutes=-1))
    assert auth_service.decode_access_token(token) == {"error": "TOKEN_EXPIRED"}


def test_garbage_token_decodes_to_none():
    assert auth_service.decode_access_token("not-a-jwt") is None


def test_register_returns_token(client, db_session):
    response = client.post("/api/auth/register", json={
        "email": "New.User@Example.com",
        "password": "Password123!",
        "full_name": "New User",
    })
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "new.user@example.com"
    assert data["user"]["role"] == "user"
    assert db_session.query(User).filter(User.email == "new.user@example.com").count() == 1


def test_register_duplicate_email(client, user):
    response = client.post("/api/auth/register", json={"email": user.email, "password": "Password123!"})
    assert response.status_code == 400
    assert response.json()["errors"][0]["msg"] == "Email already registered"


def test_register_short_password_is_rejected(client):
    response = client.post("/api/auth/register", json={"email": "a@example.com", "password": "short"})
    assert response.status_code == 422
    assert response.json()["success"] is False


def test_login_success(client, user):
    response = client.post("/api/auth/login", json={"email": user.email, "password": "Password123!"})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert "access_token" in data
    assert data["user"]["last_signed_in"] is not None


def test_login_invalid_credentials(client, user):
    response = client.post("/api/auth/login", json={"email": user.email, "password": "wrong-password"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_anonymous_returns_null(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.json() is None


def test_me_with_token(client, user, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == user.email


def test_protected_route_requires_token(client):
    response = client.get("/api/resumes")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_logout(client, auth_headers):
    response = client.post("/api/auth/logout", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}
