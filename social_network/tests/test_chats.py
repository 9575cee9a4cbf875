import pytest

API = "/api/v1/chats"


async def create_chat(client, name="General"):
    response = await client.post(API, json={"name": name})
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_create_chat_makes_caller_owner(client_factory, users):
    alice = users[0]
    client = client_factory(alice)

    chat = await create_chat(client)
    assert chat["name"] == "General"

    response = await client.get(f"{API}/{chat['id']}/members")
    assert response.status_code == 200
    members = response.json()["items"]
    assert [(m["user_id"], m["type"]) for m in members] == [(alice.id, "owner")]

    response = await client.get("/api/v1/users/chats")
    assert [c["id"] for c in response.json()["items"]] == [chat["id"]]


@pytest.mark.asyncio
async def test_non_member_cannot_view(client_factory, users):
    alice, bob, _ = users
    chat = await create_chat(client_factory(alice))
    bob_client = client_factory(bob)

    response = await bob_client.get(f"{API}/{chat['id']}")
    assert response.status_code == 403
    assert response.json()["detail"] == "User isn't chat member"

    response = await bob_client.post(f"{API}/{chat['id']}/messages", json={"content": "hi"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_unknown_chat(client_factory, users):
    response = await client_factory(users[0]).get(f"{API}/9999")
    assert response.status_code == 400
    assert response.json()["detail"] == "Chat with request Id doesn't exist"


@pytest.mark.asyncio
async def test_members_and_messages(client_factory, users):
    alice, bob, carol = users
    alice_client = client_factory(alice)
    bob_client = client_factory(bob)
    chat = await create_chat(alice_client)

    response = await alice_client.post(f"{API}/{chat['id']}/members", json={"user_id": bob.id})
    assert response.status_code == 200
    assert response.json()["type"] == "member"

    response = await alice_client.post(f"{API}/{chat['id']}/members", json={"user_id": bob.id})
    assert response.status_code == 400
    assert response.json()["detail"] == "User is already chat member"

    response = await alice_client.post(f"{API}/{chat['id']}/members", json={"user_id": 9999})
    assert response.status_code == 400

    # Ordinary members may invite others
    response = await bob_client.post(f"{API}/{chat['id']}/members", json={"user_id": carol.id})
    assert response.status_code == 200

    for text in ("first", "second", "third"):
        response = await bob_client.post(f"{API}/{chat['id']}/messages", json={"content": text})
        assert response.status_code == 200
        assert response.json()["sender_id"] == bob.id

    response = await alice_client.get(f"{API}/{chat['id']}/messages", params={"limit": 2})
    page = response.json()
    assert [m["content"] for m in page["items"]] == ["third", "second"]
    assert page["next_cursor"] == 2


@pytest.mark.asyncio
async def test_member_roles(client_factory, users):
    alice, bob, carol = users
    alice_client = client_factory(alice)
    bob_client = client_factory(bob)
    chat = await create_chat(alice_client)
    await alice_client.post(f"{API}/{chat['id']}/members", json={"user_id": bob.id})
    await alice_client.post(f"{API}/{chat['id']}/members", json={"user_id": carol.id})

    # Members can't rename or manage others
    response = await bob_client.put(f"{API}/{chat['id']}", json={"name": "Renamed"})
    assert response.status_code == 403
    assert response.json()["detail"] == "User hasn't chat admin permissions"

    response = await alice_client.patch(f"{API}/{chat['id']}/members/{bob.id}", json={"type": "admin"})
    assert response.status_code == 200
    assert response.json()["type"] == "admin"

    response = await bob_client.put(f"{API}/{chat['id']}", json={"name": "Renamed"})
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"

    response = await bob_client.patch(f"{API}/{chat['id']}/members/{alice.id}", json={"type": "member"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Chat owner's status can't be changed"

    response = await bob_client.patch(f"{API}/{chat['id']}/members/{carol.id}", json={"type": "owner"})
    assert response.status_code == 400

    response = await bob_client.patch(f"{API}/{chat['id']}/members/9999", json={"type": "admin"})
    assert response.status_code == 404
    assert response.json()["detail"] == "ChatMemberNotFound"

    response = await bob_client.delete(f"{API}/{chat['id']}/members/{carol.id}")
    assert response.status_code == 200
    assert response.json()["user_id"] == carol.id

    response = await bob_client.delete(f"{API}/{chat['id']}/members/{alice.id}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Chat owner can't be removed from chat"

    # Only the owner deletes the chat
    response = await bob_client.delete(f"{API}/{chat['id']}")
    assert response.status_code == 403
    assert response.json()["detail"] == "You are not chat Owner"


@pytest.mark.asyncio
async def test_delete_chat(client_factory, users):
    alice, bob, _ = users
    alice_client = client_factory(alice)
    chat = await create_chat(alice_client)
    await alice_client.post(f"{API}/{chat['id']}/members", json={"user_id": bob.id})
    await alice_client.post(f"{API}/{chat['id']}/messages", json={"content": "bye"})

    response = await alice_client.delete(f"{API}/{chat['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == chat["id"]

    response = await alice_client.get(f"{API}/{chat['id']}")
    assert response.status_code == 400

    response = await client_factory(bob).get("/api/v1/users/chats")
    assert response.json()["items"] == []


@pytest.mark.asyncio
async def test_admin_manages_any_chat(client_factory, users, admin):
    alice = users[0]
    chat = await create_chat(client_factory(alice))
    admin_client = client_factory(admin)

    response = await admin_client.get(f"{API}/{chat['id']}/messages")
    assert response.status_code == 200

    response = await admin_client.delete(f"{API}/{chat['id']}")
    assert response.status_code == 200
