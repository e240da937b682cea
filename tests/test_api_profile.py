"""
Tests for profile, settings, fatigue check-in and saved memories.
"""
from datetime import date

from untire.services.fatigue_quiz import should_ask_fatigue
from untire.stores.records import ProfileRecord


# ── Profile ──────────────────────────────────────────────────────────

async def test_profile_is_null_until_saved(client, auth_headers):
    resp = await client.get("/api/profile", headers=auth_headers)
    assert resp.json() == {"profile": None}


async def test_profile_partial_update(client, auth_headers):
    await client.post("/api/profile", json={"name": "Maya", "age": 52}, headers=auth_headers)
    resp = await client.post("/api/profile", json={"cancer_type": "breast", "name": None}, headers=auth_headers)

    profile = resp.json()["profile"]
    assert profile["name"] == "Maya"
    assert profile["age"] == 52
    assert profile["cancer_type"] == "breast"


async def test_profile_rejects_bad_fatigue(client, auth_headers):
    resp = await client.post("/api/profile", json={"current_fatigue_level": 12}, headers=auth_headers)
    assert resp.status_code == 422


async def test_set_typical_fatigue(client, auth_headers):
    resp = await client.post("/api/profile/fatigue", json={"fatigueLevel": 6.5}, headers=auth_headers)
    assert resp.json()["profile"]["current_fatigue_level"] == 6.5


async def test_delete_user_data(client, auth_headers):
    await client.post("/api/profile", json={"name": "Maya"}, headers=auth_headers)
    await client.post("/api/chat", json={"message": "hello", "chatId": "c1"}, headers=auth_headers)

    resp = await client.delete("/api/user/data", headers=auth_headers)
    assert resp.json() == {"success": True}

    # The session went with the data
    assert (await client.get("/api/profile", headers=auth_headers)).status_code == 401


# ── Fatigue check-in ─────────────────────────────────────────────────

def test_should_ask_fatigue_rules():
    today = date(2026, 5, 4)

    assert should_ask_fatigue(None, today) == {"shouldAsk": True, "reason": "no_profile"}
    assert should_ask_fatigue(ProfileRecord(user_id="u1", current_fatigue_level=4.0), today) == {
        "shouldAsk": False, "reason": "has_typical_fatigue", "typicalFatigue": 4.0,
    }
    assert should_ask_fatigue(ProfileRecord(user_id="u1", last_fatigue_asked_date=today), today) == {
        "shouldAsk": False, "reason": "asked_today",
    }
    assert should_ask_fatigue(
        ProfileRecord(user_id="u1", last_fatigue_asked_date=date(2026, 5, 3)), today,
    ) == {"shouldAsk": True, "reason": "not_asked_today"}


async def test_fatigue_check_in_once_a_day(client, auth_headers):
    first = await client.get("/api/profile/should-ask-fatigue", headers=auth_headers)
    assert first.json()["reason"] == "no_profile"

    await client.post("/api/profile/fatigue-asked", headers=auth_headers)

    second = await client.get("/api/profile/should-ask-fatigue", headers=auth_headers)
    assert second.json() == {"shouldAsk": False, "reason": "asked_today"}


# ── Settings ─────────────────────────────────────────────────────────

async def test_settings_defaults_and_update(client, auth_headers):
    resp = await client.get("/api/settings", headers=auth_headers)
    settings = resp.json()["settings"]
    assert settings["behavior_type"] == "empathetic"
    assert settings["agentic_features"] is True
    assert settings["chat_only"] is False

    resp = await client.post("/api/settings", json={"behavior_type": "practical"}, headers=auth_headers)
    settings = resp.json()["settings"]
    assert settings["behavior_type"] == "practical"
    assert settings["agentic_features"] is True


async def test_settings_reject_unknown_behavior(client, auth_headers):
    resp = await client.post("/api/settings", json={"behavior_type": "stoic"}, headers=auth_headers)
    assert resp.status_code == 422


# ── Saved memories ───────────────────────────────────────────────────

async def test_memories_crud(client, auth_headers):
    created = await client.post(
        "/api/memories", json={"title": "Pip", "content": "My cat", "category": "family"}, headers=auth_headers,
    )
    memory_id = created.json()["id"]

    updated = await client.put(
        f"/api/memories/{memory_id}", json={"title": "Pip", "content": "My tabby cat"}, headers=auth_headers,
    )
    assert updated.json()["content"] == "My tabby cat"
    assert updated.json()["category"] is None

    listed = (await client.get("/api/memories", headers=auth_headers)).json()
    assert [m["id"] for m in listed] == [memory_id]

    assert (await client.delete(f"/api/memories/{memory_id}", headers=auth_headers)).status_code == 200
    assert (await client.get("/api/memories", headers=auth_headers)).json() == []


async def test_memories_are_private(client, auth_headers, other_headers):
    created = await client.post(
        "/api/memories", json={"title": "Pip", "content": "My cat"}, headers=auth_headers,
    )
    memory_id = created.json()["id"]

    assert (await client.get("/api/memories", headers=other_headers)).json() == []
    assert (await client.delete(f"/api/memories/{memory_id}", headers=other_headers)).status_code == 404
