import pytest

from social_network.config import settings
from social_network.tests.conftest import FakeRedis

API = "/api/v1/users"


@pytest.mark.asyncio
async def test_get_users_paginated(client_factory, users):
    client = client_factory(users[0])

    response = await client.get(API, params={"limit": 2})
    assert response.status_code == 200
    page = response.json()
    assert [u["username"] for u in page["items"]] == ["alice", "bob"]
    assert page["limit"] == 2
    assert page["cursor"] == 0
    assert page["next_cursor"] == 2

    response = await client.get(API, params={"limit": 2, "cursor": 2})
    page = response.json()
    assert [u["username"] for u in page["items"]] == ["carol"]
    assert page["next_cursor"] is None

    response = await client.get(API, params={"limit": settings.MAX_PAGE_SIZE + 1})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_profile_is_cached(client_factory, fake_redis, users):
    alice, bob, _ = users
    client = client_factory(bob)

    response = await client.get(f"{API}/{alice.id}/profile")
    assert response.status_code == 200
    profile = response.json()
    assert profile["username"] == "alice"
    assert profile["full_name"] == "Alice"
    assert "email" not in profile
    assert f"user:{alice.id}:profile" in fake_redis

    # Served from the cache on the next read
    fake_redis[f"user:{alice.id}:profile"] = fake_redis[f"user:{alice.id}:profile"].replace(
        '"Alice"', '"Cached Alice"'
    )
    response = await client.get(f"{API}/{alice.id}/profile")
    assert response.json()["full_name"] == "Cached Alice"


@pytest.mark.asyncio
async def test_get_unknown_profile(client_factory, users):
    response = await client_factory(users[0]).get(f"{API}/9999/profile")
    assert response.status_code == 400
    assert response.json()["detail"] == "User with this id doesn't exist"


@pytest.mark.asyncio
async def test_change_profile_invalidates_cache(client_factory, fake_redis, users):
    alice = users[0]
    client = client_factory(alice)
    await client.get(f"{API}/{alice.id}/profile")
    assert f"user:{alice.id}:profile" in fake_redis

    response = await client.patch(f"{API}/profile", json={"status": "Busy", "sex": "female"})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Busy"
    assert data["sex"] == "female"
    # Fields not sent are left alone
    assert data["full_name"] == "Alice"
    assert f"user:{alice.id}:profile" not in fake_redis

    response = await client.get(f"{API}/{alice.id}/profile")
    assert response.json()["status"] == "Busy"


@pytest.mark.asyncio
async def test_profile_survives_redis_outage(client_factory, monkeypatch, users):
    original_get = FakeRedis.get

    async def broken_get(self, key):
        if key.startswith("user:"):
            raise ConnectionError("redis is down")
        return await original_get(self, key)

    async def broken_setex(self, key, expire, value):
        raise ConnectionError("redis is down")

    monkeypatch.setattr(FakeRedis, "get", broken_get)
    monkeypatch.setattr(FakeRedis, "setex", broken_setex)

    alice = users[0]
    response = await client_factory(alice).get(f"{API}/{alice.id}/profile")
    assert response.status_code == 200
    assert response.json()["username"] == "alice"
