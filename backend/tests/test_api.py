async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_register_login_and_me(client, signup):
    user_id, headers = await signup("alice")

    response = await client.get("/api/auth/me", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == user_id
    assert body["username"] == "alice"
    assert "hashed_password" not in body


async def test_wrong_password_is_rejected(client, signup):
    await signup("alice")
    response = await client.post("/api/auth/login", json={"username": "alice", "password": "nope-nope"})
    assert response.status_code == 401


async def test_duplicate_username(client, signup):
    await signup("alice")
    response = await client.post("/api/auth/register", json={"username": "alice", "password": "secret123"})
    assert response.status_code == 400
    assert response.json()["type"] == "ValidationError"


async def test_missing_token_is_unauthenticated(client):
    response = await client.get("/api/chat/messages")
    assert response.status_code == 401


async def test_refresh_token_cannot_be_used_as_access_token(client, signup):
    await signup("alice")
    response = await client.post("/api/auth/login", json={"username": "alice", "password": "secret123"})
    refresh = response.json()["refresh_token"]

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {refresh}"})
    assert response.status_code == 401

    response = await client.post("/api/auth/refresh", json={"refresh_token": refresh})
    assert response.status_code == 200
    assert response.json()["access_token"]


async def test_public_chat_flow(client, signup):
    alice_id, alice = await signup("alice")
    bob_id, bob = await signup("bob")

    response = await client.post("/api/chat/messages", json={"message": "hello all"}, headers=alice)
    assert response.status_code == 201
    message = response.json()
    assert message["sender"]["username"] == "alice"

    response = await client.patch(f"/api/chat/messages/{message['id']}", json={"message": "mine now"}, headers=bob)
    assert response.status_code == 403
    assert response.json()["type"] == "UnauthorizedError"

    response = await client.post(
        f"/api/chat/messages/{message['id']}/reactions", json={"reaction": "👍"}, headers=bob
    )
    assert response.status_code == 200

    response = await client.get("/api/chat/messages", headers=bob)
    [listed] = response.json()
    assert listed["message"] == "hello all"
    assert listed["reactions"] == {"👍": [bob_id]}

    response = await client.delete(f"/api/chat/messages/{message['id']}", headers=alice)
    assert response.status_code == 200
    response = await client.get("/api/chat/messages", headers=bob)
    assert response.json() == []


async def test_blank_message_is_a_client_error(client, signup):
    _, alice = await signup("alice")
    response = await client.post("/api/chat/messages", json={"message": "   "}, headers=alice)
    assert response.status_code == 400
    assert response.json() == {"detail": "Message cannot be empty", "type": "ValidationError"}


async def test_conversation_flow(client, signup):
    alice_id, alice = await signup("alice")
    bob_id, bob = await signup("bob")
    _, carol = await signup("carol")

    response = await client.post("/api/conversations", json={"participant_ids": [bob_id]}, headers=alice)
    assert response.status_code == 200
    conversation = response.json()
    assert conversation["participant_ids"] == sorted([alice_id, bob_id])

    # Same pair from the other side resolves to the same conversation
    response = await client.post("/api/conversations", json={"participant_ids": [alice_id]}, headers=bob)
    assert response.json()["id"] == conversation["id"]

    url = f"/api/conversations/{conversation['id']}/messages"
    response = await client.post(url, json={"message": "hi bob"}, headers=alice)
    assert response.status_code == 201
    first = response.json()
    await client.post(url, json={"message": "hi alice"}, headers=bob)
    await client.delete(f"{url}/{first['id']}", headers=alice)

    response = await client.get(url, headers=bob)
    messages = response.json()
    assert [m["message"] for m in messages] == ["hi bob", "hi alice"]
    assert [m["is_deleted"] for m in messages] == [True, False]

    response = await client.get("/api/conversations", headers=alice)
    [item] = response.json()
    assert item["last_message"] == "hi alice"

    # Outsiders cannot read or post
    response = await client.get(url, headers=carol)
    assert response.status_code == 404
    response = await client.post(url, json={"message": "let me in"}, headers=carol)
    assert response.status_code == 404


async def test_conversation_with_only_self_is_rejected(client, signup):
    alice_id, alice = await signup("alice")
    response = await client.post("/api/conversations", json={"participant_ids": [alice_id]}, headers=alice)
    assert response.status_code == 400


async def test_conversation_with_unknown_user(client, signup):
    _, alice = await signup("alice")
    response = await client.post("/api/conversations", json={"participant_ids": [9999]}, headers=alice)
    assert response.status_code == 404


async def test_group_creation(client, signup):
    alice_id, alice = await signup("alice")
    bob_id, _ = await signup("bob")
    carol_id, _ = await signup("carol")

    body = {"participant_ids": [bob_id, carol_id], "group_name": "Physics squad"}
    first = await client.post("/api/conversations/group", json=body, headers=alice)
    second = await client.post("/api/conversations/group", json=body, headers=alice)

    assert first.status_code == 201
    assert first.json()["id"] != second.json()["id"]
    assert first.json()["creator_id"] == alice_id

    response = await client.post(
        "/api/conversations/group", json={"participant_ids": [bob_id], "group_name": "Duo"}, headers=alice
    )
    assert response.status_code == 400


async def test_heartbeat_and_online_users(client, signup):
    alice_id, alice = await signup("alice")
    _, bob = await signup("bob")

    response = await client.post("/api/presence/heartbeat", json={"is_online": True}, headers=alice)
    assert response.status_code == 200
    assert response.json()["is_live"] is True

    response = await client.get("/api/online-users", headers=bob)
    assert [p["user_id"] for p in response.json()] == [alice_id]

    await client.post("/api/presence/heartbeat", json={"is_online": False}, headers=alice)
    response = await client.get("/api/online-users", headers=bob)
    assert response.json() == []


async def test_directory_and_sheets(client, signup):
    alice_id, alice = await signup("alice")

    sheet = {
        "name": "Week 1",
        "physics": {"present": 3, "chapters": {"Elasticity": {"done": True}}},
        "chemistry": {},
        "biology": {},
    }
    response = await client.post("/api/sheets", json=sheet, headers=alice)
    assert response.status_code == 201

    response = await client.get("/api/users", headers=alice)
    [entry] = response.json()
    assert entry["sheet_count"] == 1

    response = await client.get("/api/activity", headers=alice)
    assert response.json()[0]["user"]["username"] == "alice"

    response = await client.get(f"/api/users/{alice_id}", headers=alice)
    assert [s["name"] for s in response.json()["sheets"]] == ["Week 1"]


async def test_recommendation_vote_over_api(client, signup):
    _, alice = await signup("alice")
    _, bob = await signup("bob")

    response = await client.post(
        "/api/recommendations", json={"subject": "physics", "chapter_name": "Optics"}, headers=alice
    )
    rec_id = response.json()["id"]

    await client.post(f"/api/recommendations/{rec_id}/approve", headers=alice)
    response = await client.post(f"/api/recommendations/{rec_id}/approve", headers=bob)
    assert response.json()["status"] == "approved"

    response = await client.get("/api/chapters")
    assert "Optics" in response.json()["physics"]


async def test_moderator_routes_require_flag(client, signup):
    alice_id, alice = await signup("alice")
    _, moderator = await signup("moderator")

    response = await client.get("/api/moderator/users", headers=alice)
    assert response.status_code == 403

    response = await client.get("/api/moderator/users", headers=moderator)
    assert response.status_code == 200
    assert all("hashed_password" not in row for row in response.json())

    response = await client.post(
        f"/api/moderator/users/{alice_id}/reset-password", json={"new_password": "fresh-pass"}, headers=moderator
    )
    assert response.status_code == 200

    response = await client.post("/api/auth/login", json={"username": "alice", "password": "fresh-pass"})
    assert response.status_code == 200


async def open_conversation(client, headers, other_id):
    response = await client.post("/api/conversations", json={"participant_ids": [other_id]}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["id"]


async def test_typing_routes(client, signup):
    alice_id, alice = await signup("alice")
    bob_id, bob = await signup("bob")
    conversation_id = await open_conversation(client, alice, bob_id)

    response = await client.post(
        "/api/typing", json={"chat_type": "conversation", "conversation_id": conversation_id}, headers=alice
    )
    assert response.status_code == 200

    response = await client.get(
        "/api/typing", params={"chat_type": "conversation", "conversation_id": conversation_id}, headers=bob
    )
    assert [t["user_id"] for t in response.json()] == [alice_id]

    # Alice is not listed to herself, and the public chat is separate
    response = await client.get(
        "/api/typing", params={"chat_type": "conversation", "conversation_id": conversation_id}, headers=alice
    )
    assert response.json() == []
    response = await client.get("/api/typing", headers=bob)
    assert response.json() == []

    await client.post(
        "/api/typing",
        json={"chat_type": "conversation", "conversation_id": conversation_id, "is_typing": False},
        headers=alice
    )
    response = await client.get(
        "/api/typing", params={"chat_type": "conversation", "conversation_id": conversation_id}, headers=bob
    )
    assert response.json() == []


async def test_typing_in_conversations_is_members_only(client, signup):
    _, alice = await signup("alice")
    bob_id, _ = await signup("bob")
    _, carol = await signup("carol")
    conversation_id = await open_conversation(client, alice, bob_id)
    await client.post(
        "/api/typing", json={"chat_type": "conversation", "conversation_id": conversation_id}, headers=alice
    )

    response = await client.get("/api/typing", params={"chat_type": "conversation"}, headers=carol)
    assert response.status_code == 400
    assert response.json()["type"] == "ValidationError"

    response = await client.get(
        "/api/typing", params={"chat_type": "conversation", "conversation_id": conversation_id}, headers=carol
    )
    assert response.status_code == 404

    response = await client.post(
        "/api/typing", json={"chat_type": "conversation", "conversation_id": conversation_id}, headers=carol
    )
    assert response.status_code == 404


async def test_conversation_reactions(client, signup):
    _, alice = await signup("alice")
    bob_id, bob = await signup("bob")
    _, carol = await signup("carol")
    ours = await open_conversation(client, alice, bob_id)
    theirs = await open_conversation(client, carol, bob_id)

    response = await client.post(f"/api/conversations/{ours}/messages", json={"message": "quiz tonight?"}, headers=alice)
    message_id = response.json()["id"]
    reactions_url = f"/api/conversations/{ours}/messages/{message_id}/reactions"

    for _ in range(2):
        response = await client.post(reactions_url, json={"reaction": "✅"}, headers=bob)
        assert response.status_code == 200

    response = await client.get(f"/api/conversations/{ours}/messages", headers=alice)
    assert response.json()[0]["reactions"] == {"✅": [bob_id]}

    # Non-members cannot react, and a message id is only valid in its own conversation
    response = await client.post(reactions_url, json={"reaction": "❌"}, headers=carol)
    assert response.status_code == 404
    response = await client.delete(
        f"/api/conversations/{theirs}/messages/{message_id}/reactions", params={"reaction": "✅"}, headers=bob
    )
    assert response.status_code == 404

    response = await client.delete(reactions_url, params={"reaction": "✅"}, headers=bob)
    assert response.status_code == 200
    response = await client.get(f"/api/conversations/{ours}/messages", headers=alice)
    assert response.json()[0]["reactions"] == {}


async def test_conversation_message_owner_vs_outsider(client, signup):
    _, alice = await signup("alice")
    bob_id, bob = await signup("bob")
    _, carol = await signup("carol")
    conversation_id = await open_conversation(client, alice, bob_id)

    response = await client.post(
        f"/api/conversations/{conversation_id}/messages", json={"message": "mine"}, headers=alice
    )
    message_url = f"/api/conversations/{conversation_id}/messages/{response.json()['id']}"

    # A member who did not send it is forbidden
    response = await client.patch(message_url, json={"message": "edited by bob"}, headers=bob)
    assert response.status_code == 403
    assert response.json()["type"] == "UnauthorizedError"
    response = await client.delete(message_url, headers=bob)
    assert response.status_code == 403

    # A non-member does not learn the conversation exists
    response = await client.patch(message_url, json={"message": "edited by carol"}, headers=carol)
    assert response.status_code == 404
    assert response.json()["type"] == "NotFoundError"

    response = await client.patch(f"/api/conversations/{conversation_id}/messages/999", json={"message": "x"}, headers=bob)
    assert response.status_code == 404


async def test_auth_failures_use_domain_errors(client, signup):
    _, alice = await signup("alice")

    response = await client.post("/api/auth/login", json={"username": "alice", "password": "wrong-one"})
    assert response.status_code == 401
    assert response.json()["type"] == "AuthenticationError"
    assert response.headers["www-authenticate"] == "Bearer"

    access = alice["Authorization"].split()[1]
    response = await client.post("/api/auth/refresh", json={"refresh_token": access})
    assert response.status_code == 401

    response = await client.put(
        "/api/auth/password", json={"current_password": "wrong-one", "new_password": "another1"}, headers=alice
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Current password is incorrect", "type": "ValidationError"}

    response = await client.put(
        "/api/auth/password", json={"current_password": "secret123", "new_password": "another1"}, headers=alice
    )
    assert response.status_code == 200
    response = await client.post("/api/auth/login", json={"username": "alice", "password": "another1"})
    assert response.status_code == 200
