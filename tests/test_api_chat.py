"""
Tests for the chat, chats and welcome endpoints.
"""
import pytest

from untire.coach.turn import FALLBACK_REPLY
from untire.coach.welcome import DEFAULT_WELCOME
from untire.services import llm


@pytest.fixture
def model_reply(monkeypatch):
    state = {"reply": "", "systems": []}

    async def fake_complete(system, history, model=None, temperature=None, max_tokens=None):
        state["systems"].append(system)
        return state["reply"]

    monkeypatch.setattr(llm, "is_configured", lambda provider=None: True)
    monkeypatch.setattr(llm, "complete", fake_complete)
    return state


async def test_first_message_without_provider(client, auth_headers):
    resp = await client.post("/api/chat", json={"message": "hello", "chatId": "c1"}, headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body == {"chatId": "c1", "response": FALLBACK_REPLY.strip()}

    detail = (await client.get("/api/chat/c1", headers=auth_headers)).json()
    assert detail["chat"]["title"] == "hello"
    assert [m["role"] for m in detail["messages"]] == ["user", "assistant"]
    assert detail["messages"][1]["videos"] is None
    assert detail["messages"][1]["breathing"] is None


async def test_reply_media_is_returned_and_stored(client, auth_headers, model_reply):
    model_reply["reply"] = "Try this: [VIDEO:Deep Meditation:https://www.youtube.com/embed/abc] Any better?"

    resp = await client.post(
        "/api/chat",
        json={"message": "I feel anxious", "chatId": "c1", "initialFatigueLevel": 6},
        headers=auth_headers,
    )

    body = resp.json()
    assert body["response"] == "Try this:  Any better?"
    assert body["videos"] == [{"title": "Deep Meditation", "embedUrl": "https://www.youtube.com/embed/abc"}]
    assert "breathing" not in body

    detail = (await client.get("/api/chat/c1", headers=auth_headers)).json()
    assert detail["chat"]["initial_fatigue_level"] == 6
    assert detail["messages"][1]["videos"] == body["videos"]
    assert "current fatigue level is 6/10" in model_reply["systems"][0]


@pytest.mark.parametrize("message", ["", "   "])
async def test_empty_message_is_rejected(client, auth_headers, message):
    resp = await client.post("/api/chat", json={"message": message}, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required field: message"


async def test_overlong_message_is_rejected(client, auth_headers):
    resp = await client.post("/api/chat", json={"message": "x" * 10001}, headers=auth_headers)
    assert resp.status_code == 400


async def test_fatigue_out_of_range_is_rejected(client, auth_headers):
    resp = await client.post(
        "/api/chat", json={"message": "hello", "initialFatigueLevel": 11}, headers=auth_headers,
    )
    assert resp.status_code == 422


async def test_chat_requires_login(client):
    resp = await client.post("/api/chat", json={"message": "hello"})
    assert resp.status_code == 401


async def test_other_users_chat_is_forbidden(client, auth_headers, other_headers):
    await client.post("/api/chat", json={"message": "hello", "chatId": "c1"}, headers=auth_headers)

    post = await client.post("/api/chat", json={"message": "hi", "chatId": "c1"}, headers=other_headers)
    read = await client.get("/api/chat/c1", headers=other_headers)
    delete = await client.delete("/api/chat/c1", headers=other_headers)

    assert (post.status_code, read.status_code, delete.status_code) == (403, 403, 403)
    detail = (await client.get("/api/chat/c1", headers=auth_headers)).json()
    assert len(detail["messages"]) == 2


async def test_missing_chat_is_404(client, auth_headers):
    assert (await client.get("/api/chat/nope", headers=auth_headers)).status_code == 404
    assert (await client.delete("/api/chat/nope", headers=auth_headers)).status_code == 404


async def test_list_and_delete_chats(client, auth_headers, other_headers):
    await client.post("/api/chat", json={"message": "first chat", "chatId": "c1"}, headers=auth_headers)
    await client.post("/api/chat", json={"message": "second chat", "chatId": "c2"}, headers=auth_headers)
    await client.post("/api/chat", json={"message": "not mine", "chatId": "c3"}, headers=other_headers)

    chats = (await client.get("/api/chats", headers=auth_headers)).json()
    assert sorted(c["id"] for c in chats) == ["c1", "c2"]

    resp = await client.delete("/api/chat/c1", headers=auth_headers)
    assert resp.json() == {"success": True}

    chats = (await client.get("/api/chats", headers=auth_headers)).json()
    assert [c["id"] for c in chats] == ["c2"]


async def test_init_message_creates_empty_chat(client, auth_headers):
    resp = await client.post(
        "/api/chat",
        json={"message": "__INIT__", "chatId": "c1", "initialFatigueLevel": 3},
        headers=auth_headers,
    )

    assert resp.json()["chatId"] == "c1"
    detail = (await client.get("/api/chat/c1", headers=auth_headers)).json()
    assert detail["messages"] == []
    assert detail["chat"]["title"] == "New Chat"


async def test_second_exchange_queues_profile_update(client, auth_headers, updater, extracted, session_factory):
    extracted["text"] = "Mentions a cat named Pip."

    for text in ("hello there", "my cat Pip is poorly"):
        await client.post("/api/chat", json={"message": text, "chatId": "c1"}, headers=auth_headers)

    assert updater.pending == 1
    await updater.run_pending()

    profile = (await client.get("/api/profile", headers=auth_headers)).json()["profile"]
    assert profile["dynamic_profile"] == "Mentions a cat named Pip."


async def test_welcome_message_without_provider(client, auth_headers):
    resp = await client.post("/api/welcome-message", json={}, headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json() == {"message": DEFAULT_WELCOME}


async def test_welcome_message_is_personalized(client, auth_headers, model_reply):
    model_reply["reply"] = "  Welcome back, Maya!  "
    await client.post("/api/profile", json={"name": "Maya"}, headers=auth_headers)

    resp = await client.post(
        "/api/welcome-message", json={"currentFatigueLevel": 8}, headers=auth_headers,
    )

    assert resp.json() == {"message": "Welcome back, Maya!"}
    assert "current fatigue level is 8/10" in model_reply["systems"][0]
