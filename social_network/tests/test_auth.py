import pytest
from datetime import timedelta

from social_network.config import settings
from social_network.services.auth_service import AuthService
from social_network.tests.conftest import TEST_PASSWORD

API = "/api/v1/auth"


@pytest.mark.asyncio
async def test_register_user(test_client):
    """Test user registration"""
    user_data = {
        "username": "newuser",
        "email": "newuser@example.com",
        "password": "Password123!",
        "full_name": "New User"
    }

    response = await test_client.post(f"{API}/register", json=user_data)

    assert response.status_code == 200
    data = response.json()
    assert data["username"] == user_data["username"]
    assert data["email"] == user_data["email"]
    assert data["role"] == "User"
    assert "id" in data
    assert "password" not in data
    assert "hashed_password" not in data


@pytest.mark.asyncio
async def test_register_duplicate(test_client, users):
    response = await test_client.post(f"{API}/register", json={
        "username": "alice",
        "email": "other@example.com",
        "password": "Password123!",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Username already taken"

    response = await test_client.post(f"{API}/register", json={
        "username": "alice2",
        "email": "alice@example.com",
        "password": "Password123!",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


@pytest.mark.asyncio
async def test_register_validation(test_client):
    response = await test_client.post(f"{API}/register", json={
        "username": "bad name!",
        "email": "not-an-email",
        "password": "short",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_sets_cookie(test_client, users):
    """Test user login"""
    alice = users[0]

    response = await test_client.post(f"{API}/login", json={
        "username": "alice",
        "password": TEST_PASSWORD
    })

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == alice.id
    assert data["role"] == "User"
    assert data["token_type"] == "bearer"
    assert data["expires_in"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{settings.AUTH_COOKIE_NAME}={data['access_token']}")
    assert "HttpOnly" in set_cookie

    # The client keeps the cookie for later requests
    response = await test_client.get(f"/api/v1/users/{alice.id}/profile")
    assert response.status_code == 200
    assert response.json()["last_active_at"] is not None


@pytest.mark.asyncio
async def test_login_with_email(test_client, users):
    response = await test_client.post(f"{API}/login", json={
        "username": "bob@example.com",
        "password": TEST_PASSWORD
    })
    assert response.status_code == 200
    assert response.json()["user_id"] == users[1].id


@pytest.mark.asyncio
async def test_login_wrong_password(test_client, users):
    response = await test_client.post(f"{API}/login", json={
        "username": "alice",
        "password": "WrongPassword1!"
    })
    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect username or password"


@pytest.mark.asyncio
async def test_protected_endpoint_requires_cookie(test_client, client_factory, users):
    response = await test_client.get("/api/v1/users")
    assert response.status_code == 401

    response = await client_factory(users[0]).get("/api/v1/users")
    assert response.status_code == 200
    assert [u["username"] for u in response.json()["items"]] == ["alice", "bob", "carol"]


@pytest.mark.asyncio
async def test_invalid_and_expired_tokens(client_factory, test_db, users):
    alice = users[0]
    client = client_factory()

    client.cookies.set(settings.AUTH_COOKIE_NAME, "not-a-jwt")
    response = await client.get("/api/v1/users")
    assert response.status_code == 401

    expired, _ = AuthService(test_db).create_access_token(alice, expires_delta=timedelta(seconds=-10))
    client.cookies.set(settings.AUTH_COOKIE_NAME, expired)
    response = await client.get("/api/v1/users")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_blacklists_token(client_factory, fake_redis, users):
    client = client_factory(users[0])
    token = client.cookies.get(settings.AUTH_COOKIE_NAME)

    response = await client.post(f"{API}/logout")
    assert response.status_code == 200
    assert fake_redis[f"blacklist:{token}"] == "1"

    # Reuse of the old token is rejected
    reused = client_factory()
    reused.cookies.set(settings.AUTH_COOKIE_NAME, token)
    response = await reused.get("/api/v1/users")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_without_cookie(test_client):
    response = await test_client.post(f"{API}/logout")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_inactive_user_rejected(client_factory, test_db, users):
    alice = users[0]
    client = client_factory(alice)
    alice.is_active = False
    await test_db.commit()

    response = await client.get("/api/v1/users")
    assert response.status_code == 400
    assert response.json()["detail"] == "Inactive user"


@pytest.mark.asyncio
async def test_password_hashing(test_db):
    auth_service = AuthService(test_db)
    hashed = auth_service.get_password_hash("Password123!")

    assert hashed != "Password123!"
    assert auth_service.verify_password("Password123!", hashed)
    assert not auth_service.verify_password("Password124!", hashed)
