"""
Tests for the admin surface: AI settings, users, catalogs, stats, quiz and seeding.
"""
import pytest

from untire.core.database import session_scope
from untire.seed import BREATHING, QUIZ, VIDEOS, seed
from untire.services.fatigue_quiz import fatigue_level_from_scores


# ── Access ───────────────────────────────────────────────────────────

@pytest.mark.parametrize("method,path", [
    ("get", "/api/admin/ai-settings"),
    ("get", "/api/admin/users"),
    ("get", "/api/admin/stats"),
    ("delete", "/api/videos/some-id"),
])
async def test_admin_routes_need_admin(client, auth_headers, method, path):
    resp = await getattr(client, method)(path, headers=auth_headers)
    assert resp.status_code == 403


# ── AI settings ──────────────────────────────────────────────────────

async def test_ai_settings_round_trip(client, admin_headers):
    defaults = (await client.get("/api/admin/ai-settings", headers=admin_headers)).json()["settings"]
    assert defaults["model"] == "gpt-4o"
    assert defaults["memory_enabled"] is True

    resp = await client.post(
        "/api/admin/ai-settings",
        json={"verbosity": "low", "enabled_tools": ["breathing"], "system_prompt": "Be brief."},
        headers=admin_headers,
    )
    settings = resp.json()["settings"]
    assert settings["verbosity"] == "low"
    assert settings["enabled_tools"] == ["breathing"]
    assert settings["system_prompt"] == "Be brief."
    assert settings["model"] == "gpt-4o"


async def test_blank_system_prompt_restores_default_persona(client, admin_headers):
    await client.post("/api/admin/ai-settings", json={"system_prompt": "Be brief."}, headers=admin_headers)
    resp = await client.post("/api/admin/ai-settings", json={"system_prompt": "  "}, headers=admin_headers)

    assert resp.json()["settings"]["system_prompt"] is None


@pytest.mark.parametrize("payload", [
    {"enabled_tools": ["teleport"]},
    {"verbosity": "extreme"},
    {"temperature": 3},
    {"accessible_user_fields": ["password"]},
])
async def test_ai_settings_validation(client, admin_headers, payload):
    resp = await client.post("/api/admin/ai-settings", json=payload, headers=admin_headers)
    assert resp.status_code == 422


# ── Users ────────────────────────────────────────────────────────────

async def test_admin_manages_users(client, admin_headers):
    created = await client.post(
        "/api/admin/users", json={"username": "carol", "password": "carol-pass"}, headers=admin_headers,
    )
    assert created.status_code == 200
    carol_id = created.json()["id"]

    duplicate = await client.post(
        "/api/admin/users", json={"username": "carol", "password": "another"}, headers=admin_headers,
    )
    assert duplicate.status_code == 400

    names = [u["username"] for u in (await client.get("/api/admin/users", headers=admin_headers)).json()]
    assert "carol" in names

    assert (await client.delete(f"/api/admin/users/{carol_id}", headers=admin_headers)).status_code == 200
    assert (await client.delete(f"/api/admin/users/{carol_id}", headers=admin_headers)).status_code == 404


async def test_admin_cannot_delete_self(client, admin_headers):
    me = (await client.get("/api/auth/me", headers=admin_headers)).json()
    resp = await client.delete(f"/api/admin/users/{me['id']}", headers=admin_headers)
    assert resp.status_code == 400


async def test_stats(client, admin_headers, auth_headers):
    await client.post("/api/chat", json={"message": "hello", "chatId": "c1"}, headers=auth_headers)

    stats = (await client.get("/api/admin/stats", headers=admin_headers)).json()

    assert stats["users"] == 2
    assert stats["chats"] == 1
    assert stats["messages"] == 2
    assert stats["llm_configured"] is False


# ── Catalogs ─────────────────────────────────────────────────────────

async def test_catalog_management(client, admin_headers, auth_headers):
    video = await client.post(
        "/api/videos",
        json={"title": "Calm", "url": "https://youtu.be/c", "embed_url": "https://embed/c", "category": "meditation"},
        headers=admin_headers,
    )
    breathing = await client.post(
        "/api/breathing-exercises",
        json={"title": "Box Breathing", "duration": 60, "pattern": "4-4-4-4"},
        headers=admin_headers,
    )
    assert video.status_code == 200 and breathing.status_code == 200

    videos = (await client.get("/api/videos?category=meditation", headers=auth_headers)).json()["videos"]
    assert [v["title"] for v in videos] == ["Calm"]
    assert (await client.get("/api/videos?category=yoga", headers=auth_headers)).json()["videos"] == []

    exercises = (await client.get("/api/breathing-exercises", headers=auth_headers)).json()["exercises"]
    assert exercises[0]["duration"] == 60

    exercise_id = breathing.json()["exercise"]["id"]
    assert (await client.delete(f"/api/breathing-exercises/{exercise_id}", headers=admin_headers)).status_code == 200
    assert (await client.delete(f"/api/breathing-exercises/{exercise_id}", headers=admin_headers)).status_code == 404


async def test_regular_users_cannot_add_videos(client, auth_headers):
    resp = await client.post(
        "/api/videos",
        json={"title": "Calm", "url": "https://youtu.be/c", "embed_url": "https://embed/c"},
        headers=auth_headers,
    )
    assert resp.status_code == 403


async def test_breathing_needs_positive_duration(client, admin_headers):
    resp = await client.post(
        "/api/breathing-exercises",
        json={"title": "Box", "duration": 0, "pattern": "4-4-4-4"},
        headers=admin_headers,
    )
    assert resp.status_code == 422


@pytest.mark.parametrize("path,payload", [
    ("/api/videos", {"title": "Calm: part 2", "url": "https://youtu.be/c", "embed_url": "https://embed/c"}),
    ("/api/videos", {"title": "Calm", "url": "https://youtu.be/c", "embed_url": "https://embed/c]"}),
    ("/api/breathing-exercises", {"title": "Box: slow", "duration": 60, "pattern": "4-4-4-4"}),
    ("/api/breathing-exercises", {"title": "Box", "duration": 60, "pattern": "in:4 out:4"}),
    ("/api/breathing-exercises", {"title": "Box", "duration": 60, "pattern": "4-4-4-4", "embed_code": "<a>]</a>"}),
])
async def test_catalog_rejects_entries_that_break_their_tag(client, admin_headers, path, payload):
    resp = await client.post(path, json=payload, headers=admin_headers)
    assert resp.status_code == 422


async def test_catalog_accepts_brackets_and_colons_where_tags_allow_them(client, admin_headers):
    video = await client.post(
        "/api/videos",
        json={"title": "Calm [HD]", "url": "https://youtu.be/c", "embed_url": "https://embed/c?t=1:30"},
        headers=admin_headers,
    )
    breathing = await client.post(
        "/api/breathing-exercises",
        json={"title": "Box", "duration": 60, "pattern": "4-4-4-4", "embed_code": "<div data-x='[1'>"},
        headers=admin_headers,
    )

    assert video.status_code == 200
    assert breathing.status_code == 200


# ── Fatigue quiz ─────────────────────────────────────────────────────

@pytest.mark.parametrize("scores,expected", [
    ([], 5.0),
    ([(0.5, 0.0)], 5.0),
    ([(0.1, 1.0)], 1.0),
    ([(0.9, 1.0)], 9.0),
    ([(0.0, 1.0)], 1.0),
    ([(1.0, 1.0)], 10.0),
    ([(0.3, 1.5), (0.7, 1.0)], 4.6),
    ([(0.25, 1.0), (0.5, 1.0)], 3.8),
])
def test_fatigue_level_from_scores(scores, expected):
    assert fatigue_level_from_scores(scores) == expected


async def test_quiz_over_the_api(client, auth_headers, session_factory):
    async with session_scope(session_factory) as db:
        await seed(db)

    questions = (await client.get("/api/fatigue-quiz/questions", headers=auth_headers)).json()["questions"]
    assert [q["question_order"] for q in questions] == [1, 2, 3, 4, 5]

    answers = [{"questionId": q["id"], "optionValue": 0.7} for q in questions]
    answers.append({"questionId": "unknown", "optionValue": 0.1})
    resp = await client.post("/api/fatigue-quiz/calculate", json={"answers": answers}, headers=auth_headers)

    assert resp.json() == {"suggestedFatigueLevel": 7.0}


async def test_quiz_rejects_out_of_range_answer(client, auth_headers):
    resp = await client.post(
        "/api/fatigue-quiz/calculate",
        json={"answers": [{"questionId": "q1", "optionValue": 2}]},
        headers=auth_headers,
    )
    assert resp.status_code == 422


async def test_seed_is_idempotent(session_factory):
    async with session_scope(session_factory) as db:
        first = await seed(db)
    async with session_scope(session_factory) as db:
        second = await seed(db)

    assert first == {"videos": len(VIDEOS), "breathing": len(BREATHING), "questions": len(QUIZ)}
    assert second == {"videos": 0, "breathing": 0, "questions": 0}
