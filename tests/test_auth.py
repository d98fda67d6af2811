from datetime import timedelta

import jwt
import pytest
from sqlalchemy.orm import Session

from rentify.core.config import settings
from rentify.core.security import (
    create_access_token,
    decode_token,
    user_id_from_token,
    validate_password,
)


# ============================================================================
# LOGIN TESTS
# ============================================================================


def test_login_success(client, db: Session, admin_user: dict):
    """Test successful login returns access token and user info."""
    response = client.post(
        "/api/v1/auth/login",
        data={
            "username": admin_user["email"],
            "password": admin_user["password"],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == admin_user["email"]
    assert data["user"]["role"]["name"] == "admin"


def test_login_token_subject_is_user_id(client, owner_user: dict):
    response = client.post(
        "/api/v1/auth/login",
        data={"username": owner_user["email"], "password": owner_user["password"]},
    )
    assert response.status_code == 200
    payload = decode_token(response.json()["access_token"])
    assert payload["sub"] == str(owner_user["id"])
    assert payload["type"] == "access"


def test_login_invalid_email(client, db: Session):
    """Test login with non-existent email."""
    response = client.post(
        "/api/v1/auth/login",
        data={
            "username": "nonexistent@example.com",
            "password": "Password123!",
        },
    )
    assert response.status_code == 401
    data = response.json()
    assert data["success"] is False
    assert data["code"] == "UNAUTHORIZED"
    assert "Incorrect email or password" in data["detail"]


def test_login_wrong_password(client, db: Session, admin_user: dict):
    """Test login with wrong password."""
    response = client.post(
        "/api/v1/auth/login",
        data={
            "username": admin_user["email"],
            "password": "WrongPassword123!",
        },
    )
    assert response.status_code == 401
    assert "Incorrect email or password" in response.json()["detail"]


def test_login_missing_fields(client):
    response = client.post("/api/v1/auth/login", data={"username": "someone@example.com"})
    assert response.status_code == 422


# ============================================================================
# CURRENT USER TESTS
# ============================================================================


def test_me_returns_current_user(client, renter_user: dict, renter_token: str):
    response = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {renter_token}"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == renter_user["id"]
    assert data["email"] == renter_user["email"]
    assert data["name"] == renter_user["name"]
    assert data["role"]["name"] == "renter"
    assert "password_hash" not in data


def test_me_without_token(client):
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401


def test_me_with_invalid_token(client):
    response = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


def test_me_with_expired_token(client, renter_user: dict):
    token = create_access_token(renter_user["id"], expires_delta=timedelta(minutes=-5))
    response = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


def test_me_for_unknown_user(client, db: Session):
    token = create_access_token(9999)
    response = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"


# ============================================================================
# TOKEN AND PASSWORD RULE TESTS
# ============================================================================


def test_user_id_from_token_rejects_other_token_types():
    token = jwt.encode(
        {"sub": "1", "type": "refresh"}, settings.secret_key, algorithm=settings.algorithm
    )
    assert user_id_from_token(token) is None
    assert user_id_from_token(create_access_token(7)) == 7


@pytest.mark.parametrize(
    "password, message",
    [
        ("Ab1!", "Password must be at least 8 characters long"),
        ("abcdefg1!", "Password must contain at least one uppercase letter"),
        ("ABCDEFG1!", "Password must contain at least one lowercase letter"),
        ("Abcdefgh!", "Password must contain at least one number"),
        ("Abcdefgh1", "Password must contain at least one symbol"),
        ("Abcdefg1!", None),
    ],
)
def test_validate_password(password, message):
    assert validate_password(password) == (message is None, message)
