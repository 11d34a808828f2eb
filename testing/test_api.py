import base64
import json

import pytest
from fastapi import FastAPI, WebSocket
from fastapi.testclient import TestClient

from conftest import FakeLLM
from nosabos.api import exercise_endpoints
from nosabos.api.endpoints import get_managers
from nosabos.api.endpoints import router as api_router
from nosabos.api.exercise_endpoints import exercise_router, proxy_router
from nosabos.api.team_endpoints import team_router
from nosabos.api.websocket_handler import WebSocketHandler
from nosabos.config import settings
from nosabos.content.skill_tree import SkillTreeLoader
from nosabos.exercises.generator import ExerciseGenerator
from nosabos.managers import nostr_manager as nostr
from nosabos.managers.nostr_manager import NostrManager
from nosabos.managers.progress_manager import ProgressManager
from nosabos.managers.team_manager import TeamManager
from nosabos.utils.audio import AudioProcessor

LEARNER = "npub_learner"
FRIEND = "npub_friend"

MC_STREAM = [
    {"type": "verb_mc", "phase": "q", "question": "Yo ___ estudiante."},
    {"type": "verb_mc", "phase": "choices", "choices": ["soy", "eres", "es", "somos"]},
    {"type": "verb_mc", "phase": "meta", "hint": "ser, yo", "answer": "soy", "translation": "I am a student."},
    {"type": "done"},
]


class FakeNotes:
    def __init__(self):
        self.notes = []

    async def list_notes(self, npub, target_lang=None):
        return [n for n in self.notes if n["npub"] == npub and target_lang in (None, n.get("targetLang"))]

    async def add_note(self, npub, note):
        if not npub:
            raise ValueError("npub is required")
        saved = {**note, "id": f"note{len(self.notes) + 1}", "npub": npub}
        self.notes.append(saved)
        return saved

    async def create_note_for_answer(self, npub, concept, **kwargs):
        return await self.add_note(npub, {"lessonTitle": kwargs.get("lesson_title"), "summary": f"About {concept}"})

    async def remove_note(self, npub, note_id):
        before = len(self.notes)
        self.notes = [n for n in self.notes if not (n["npub"] == npub and n["id"] == note_id)]
        return len(self.notes) < before

    async def clear_notes(self, npub):
        before = len(self.notes)
        self.notes = [n for n in self.notes if n["npub"] != npub]
        return before - len(self.notes)


@pytest.fixture
def managers(firestore_manager, cache_manager):
    llm = FakeLLM(objects=MC_STREAM)
    built = {
        'cache': cache_manager,
        'firestore': firestore_manager,
        'teams': TeamManager(firestore_manager),
        'progress': ProgressManager(firestore_manager),
        'llm': llm,
        'generator': ExerciseGenerator(llm, cache_manager),
        'notes': FakeNotes(),
        'skill_tree': SkillTreeLoader(cache_manager),
        'nostr': NostrManager(relays=["wss://relay.test"]),
        'audio': AudioProcessor(),
    }
    built['websocket'] = WebSocketHandler(built)
    return built


@pytest.fixture
def client(managers):
    app = FastAPI()
    app.include_router(api_router)
    app.include_router(team_router)
    app.include_router(exercise_router)
    app.include_router(proxy_router)
    app.dependency_overrides[get_managers] = lambda: managers

    @app.websocket("/ws/exercises/{npub}")
    async def exercises_socket(websocket: WebSocket, npub: str):
        await managers['websocket'].handle_connection(websocket, npub)

    return TestClient(app)


def _ndjson(response):
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


# ==================== USERS AND PROGRESS ====================

def test_user_lifecycle(client):
    assert client.get(f"/api/users/{LEARNER}").status_code == 404
    assert client.get(f"/api/users/{LEARNER}/exists").json()["exists"] is False

    created = client.post(f"/api/users/{LEARNER}", json={"profile": {"displayName": "Ana"}})
    assert created.status_code == 200
    assert created.json()["profile"] == {"displayName": "Ana"}
    assert client.get(f"/api/users/{LEARNER}/exists").json()["exists"] is True

    xp = client.post(f"/api/users/{LEARNER}/xp", json={"amount": 12, "target_lang": "es"})
    assert xp.status_code == 200 and xp.json()["xp"] == 12
    assert client.post(f"/api/users/{LEARNER}/xp", json={"amount": 0}).status_code == 400

    progress = client.get(f"/api/users/{LEARNER}/progress", params={"target_lang": "es"}).json()
    assert progress["languageXp"] == 12
    assert progress["levels"]["A1"]["percentage"] == 0


def test_lesson_endpoints(client):
    assert client.post(f"/api/users/{LEARNER}/lessons/lesson-a1-1-1/start", json={}).status_code == 404

    client.post(f"/api/users/{LEARNER}", json={})
    started = client.post(f"/api/users/{LEARNER}/lessons/lesson-a1-1-1/start", json={"target_lang": "es"})
    assert started.json() == {"success": True, "lessonId": "lesson-a1-1-1"}
    assert client.post(f"/api/users/{LEARNER}/lessons/lesson-a1-1-1/attempt", json={}).json()["success"]

    completed = client.post(f"/api/users/{LEARNER}/lessons/lesson-a1-1-1/complete", json={"xp_reward": 40})
    assert completed.json()["success"] is True

    lessons = client.get(f"/api/users/{LEARNER}/progress").json()["progress"]["languageLessons"]
    assert lessons["es"]["lesson-a1-1-1"]["status"] == "completed"

    milestone = client.post(f"/api/users/{LEARNER}/milestones", json={"milestone_type": "unit-a1-1", "bonus_xp": 25})
    assert milestone.json() == {"success": True, "milestone": "unit-a1-1"}


# ==================== SKILL TREE ====================

def test_skill_tree_levels(client):
    a1 = client.get("/api/skill-tree/a1").json()
    assert a1["level"] == "A1"
    assert all("totalXp" in unit for unit in a1["units"])
    assert client.get("/api/skill-tree/Z9").status_code == 404

    cefr = client.get("/api/cefr/b2").json()
    assert cefr["level"] == "B2" and cefr["promptHint"]


def test_user_skill_tree_points_at_first_lesson(client):
    assert client.get(f"/api/users/{LEARNER}/skill-tree").status_code == 404

    client.post(f"/api/users/{LEARNER}", json={})
    tree = client.get(f"/api/users/{LEARNER}/skill-tree", params={"target_lang": "es"}).json()
    assert tree["languageXp"] == 0
    assert tree["nextLesson"]["lesson"]["id"] == "lesson-tutorial-1"
    first = tree["units"][0]["lessons"][0]
    assert first["status"] == "available"


def test_completed_lessons_move_unit_and_level_progress(client):
    client.post(f"/api/users/{LEARNER}", json={})
    unit = client.get("/api/skill-tree/a2").json()["units"][0]
    for lesson in unit["lessons"]:
        done = client.post(f"/api/users/{LEARNER}/lessons/{lesson['id']}/complete",
                           json={"xp_reward": 10, "target_lang": "es"})
        assert done.json()["success"] is True

    tree = client.get(f"/api/users/{LEARNER}/skill-tree", params={"target_lang": "es"}).json()
    first = tree["units"][0]
    assert first["id"] == unit["id"]
    assert {lesson["status"] for lesson in first["lessons"]} == {"completed"}
    assert first["progress"] == 100
    assert tree["completion"] > 0
    assert not any(u["id"].startswith("unit-a1") for u in tree["units"])

    # Another language has no lessons yet and starts from the beginning
    french = client.get(f"/api/users/{LEARNER}/skill-tree", params={"target_lang": "fr"}).json()
    assert french["units"][0]["lessons"][0]["status"] != "completed"


# ==================== NOTES ====================

def test_notes_endpoints(client):
    added = client.post(f"/api/users/{LEARNER}/notes", json={"lesson_title": "Greetings", "example": "Hola"})
    assert added.json()["lessonTitle"] == "Greetings"

    generated = client.post(f"/api/users/{LEARNER}/notes/generate", json={"concept": "ser", "lesson_title": "Being"})
    assert generated.json()["summary"] == "About ser"

    listed = client.get(f"/api/users/{LEARNER}/notes").json()
    assert listed["count"] == 2

    note_id = added.json()["id"]
    assert client.delete(f"/api/users/{LEARNER}/notes/{note_id}").json()["success"]
    assert client.delete(f"/api/users/{LEARNER}/notes/{note_id}").status_code == 404
    assert client.delete(f"/api/users/{LEARNER}/notes").json()["removed"] == 1


# ==================== TOOLS ====================

def test_keyboard_endpoints(client):
    ja = client.get("/api/keyboards/ja", params={"mode": "katakana"}).json()
    assert "ア" in ja["rows"][0]
    assert client.get("/api/keyboards/ja", params={"mode": "romaji"}).status_code == 400
    assert client.get("/api/keyboards/es").status_code == 404

    pressed = client.post("/api/keyboards/el/press", json={"key": "α", "text": "γει"})
    assert pressed.json() == {"text": "γεια"}


def test_financial_parse(client):
    data = client.post("/api/financial/parse", json={"text": "rent 1500\nincome 4000\nfood 500"}).json()
    assert data["remaining"] == 2000.0
    assert len(data["chart"]["bars"]) == 2


def test_audio_wav(client):
    pcm = base64.b64encode(b"\x01\x00" * 240).decode("ascii")
    wav = client.post("/api/audio/wav", json={"pcm_base64": pcm})
    assert wav.headers["content-type"] == "audio/wav"
    assert wav.content[:4] == b"RIFF" and len(wav.content) == 44 + 480

    encoded = client.post("/api/audio/wav/base64", json={"pcm_base64": pcm, "sample_rate": 24000}).json()
    assert encoded["sampleRate"] == 24000
    assert encoded["duration"] == pytest.approx(0.01)

    assert client.post("/api/audio/wav", json={"pcm_base64": "not base64!!"}).status_code == 400


# ==================== NOSTR ====================

def test_nostr_keys_and_dm_validation(client):
    keys = client.post("/api/nostr/keys").json()
    assert keys["npub"].startswith("npub1")

    bad = client.post("/api/nostr/dm", json={"target_npub": keys["npub"], "message": "hi", "nsec": "nsec1bad"})
    assert bad.status_code == 400
    empty = client.post("/api/nostr/dm", json={"target_npub": keys["npub"], "message": "", "nsec": keys["nsec"]})
    assert empty.status_code == 400


def test_nostr_feed(client, managers, monkeypatch):
    tags = []

    async def fake_fetch(tag, limit=50):
        tags.append(tag)
        return [{"content": "hola"}]

    monkeypatch.setattr(managers['nostr'], "fetch_hashtag_notes", fake_fetch)
    feed = client.get("/api/nostr/feed", params={"ui_lang": "es"}).json()
    assert feed == {"hashtag": "AprendeConNostr", "notes": [{"content": "hola"}]}
    assert tags == ["AprendeConNostr"]


# ==================== TEAMS ====================

def test_team_flow(client, firestore_manager):
    client.post(f"/api/users/{LEARNER}", json={"profile": {"displayName": "Ana"}})
    client.post(f"/api/users/{FRIEND}", json={"profile": {"displayName": "Ben"}})

    created = client.post("/api/teams", json={
        "creator_npub": LEARNER,
        "team_name": " Club ",
        "creator_name": "Ana",
        "invitees": [FRIEND, FRIEND, LEARNER, " "],
    }).json()
    assert created["teamName"] == "Club"
    assert [(i["npub"], i["success"], i["userExists"]) for i in created["invites"]] == [(FRIEND, True, True)]
    assert "dmSent" not in created["invites"][0]

    team_id = created["teamId"]
    invites = client.get(f"/api/teams/{FRIEND}/invites", params={"status": "pending"}).json()
    assert invites["count"] == 1

    invite_id = created["invites"][0]["inviteId"]
    accepted = client.post(f"/api/teams/invites/{invite_id}/accept", json={"user_npub": FRIEND})
    assert accepted.json()["status"] == "accepted"
    assert client.get(f"/api/teams/{FRIEND}").json()["count"] == 1

    members = client.get(f"/api/teams/{LEARNER}/{team_id}/members").json()["members"]
    assert {row["npub"] for row in members} == {LEARNER, FRIEND}

    again = client.post(f"/api/teams/{team_id}/invites", json={
        "creator_npub": LEARNER, "team_name": "Club", "invitee_npub": FRIEND})
    assert again.status_code == 400

    assert client.post(f"/api/teams/{LEARNER}/{team_id}/leave", json={"user_npub": FRIEND}).json()["success"]
    assert client.delete(f"/api/teams/{LEARNER}/{team_id}").json()["success"]


def test_team_errors_map_to_status_codes(client):
    assert client.post("/api/teams", json={"creator_npub": LEARNER, "team_name": "  "}).status_code == 422
    assert client.post("/api/teams/invites/missing/accept", json={"user_npub": FRIEND}).status_code == 404
    assert client.get(f"/api/teams/{LEARNER}/team_missing/members").status_code == 404
    missing = client.post("/api/teams/team_missing/invites", json={
        "creator_npub": LEARNER, "team_name": "Club", "invitee_npub": FRIEND})
    assert missing.status_code == 404


# ==================== EXERCISES ====================

def test_generate_stream_hides_answer(client, managers):
    response = client.post("/api/exercises/generate", json={"kind": "mc", "cefr_level": "a2"})
    assert response.headers["content-type"].startswith("application/x-ndjson")

    events = _ndjson(response)
    assert [e["type"] for e in events] == ["phase", "phase", "phase", "exercise", "done"]
    assert "answer" not in events[2]["data"]
    exercise = events[3]["exercise"]
    assert "answer" not in exercise
    assert exercise["cefrLevel"] == "A2"

    fetched = client.get(f"/api/exercises/{exercise['id']}").json()
    assert fetched["question"] == "Yo ___ estudiante." and "answer" not in fetched


def test_generate_without_stream(client):
    exercise = client.post("/api/exercises/generate", params={"stream": False}, json={"kind": "ma"}).json()
    assert exercise["source"] == "fixed"
    assert "answers" not in exercise
    assert len(exercise["choices"]) == 5

    assert client.post("/api/exercises/generate", json={"kind": "essay"}).status_code == 422


def test_submit_grades_and_credits_xp(client):
    client.post(f"/api/users/{LEARNER}", json={})
    exercise = _ndjson(client.post("/api/exercises/generate", json={"kind": "mc"}))[3]["exercise"]

    result = client.post(f"/api/exercises/{exercise['id']}/submit", json={
        "npub": LEARNER, "answer": {"choice": "soy"}}).json()
    assert result["correct"] and result["xp"] == 5
    assert result["solution"] == {"answer": "soy"}
    assert result["xpUpdate"]["xp"] == 5

    quiz_exercise = _ndjson(client.post("/api/exercises/generate", json={"kind": "mc"}))[3]["exercise"]
    quiz = client.post(f"/api/exercises/{quiz_exercise['id']}/submit", json={
        "npub": LEARNER, "answer": {"choice": "soy"}, "final_quiz": True}).json()
    assert quiz["xp"] == 0 and "xpUpdate" not in quiz

    assert client.post("/api/exercises/missing/submit", json={"answer": {}}).status_code == 404
    assert client.get("/api/exercises/missing").status_code == 404


def test_exercise_is_graded_once(client, firestore_manager):
    client.post(f"/api/users/{LEARNER}", json={})
    exercise = _ndjson(client.post("/api/exercises/generate", json={"kind": "mc"}))[3]["exercise"]
    body = {"npub": LEARNER, "answer": {"choice": "soy"}}

    first = client.post(f"/api/exercises/{exercise['id']}/submit", json=body)
    assert first.json()["xpUpdate"]["xp"] == 5

    again = client.post(f"/api/exercises/{exercise['id']}/submit", json=body)
    assert again.status_code == 404
    assert client.get(f"/api/exercises/{exercise['id']}").status_code == 404
    assert client.get(f"/api/users/{LEARNER}").json()["xp"] == 5


def test_malformed_match_answer_is_a_bad_request(client, managers):
    exercise = client.post("/api/exercises/generate", params={"stream": False}, json={"kind": "match"}).json()
    response = client.post(f"/api/exercises/{exercise['id']}/submit", json={"answer": {"pairs": [[0, None]]}})
    assert response.status_code == 400


def test_reaching_daily_goal_returns_plain_json(client, firestore_manager):
    client.post(f"/api/users/{LEARNER}", json={})
    firestore_manager.user_ref(LEARNER).set({"dailyGoalXp": 5}, merge=True)
    exercise = _ndjson(client.post("/api/exercises/generate", json={"kind": "mc"}))[3]["exercise"]

    response = client.post(f"/api/exercises/{exercise['id']}/submit", json={
        "npub": LEARNER, "answer": {"choice": "soy"}})
    assert response.status_code == 200
    update = response.json()["xpUpdate"]
    assert update["dailyHasCelebrated"] is True
    assert update["lastDailyGoalHitAt"].endswith("Z")

    # Goal already celebrated today, so the direct award carries no timestamp
    more = client.post(f"/api/users/{LEARNER}/xp", json={"amount": 3})
    assert more.status_code == 200 and "lastDailyGoalHitAt" not in more.json()


def test_explain(client):
    body = {"question": "Yo ___", "user_answer": "es", "correct_answer": "soy"}
    assert client.post("/api/exercises/explain", json=body).json() == {"explanation": "Because soy fits."}


# ==================== RESPONSES PROXY ====================

class FakeUpstream:
    status_code = 201
    text = '{"output_text": "YES"}'
    headers = {"content-type": "application/json; charset=utf-8"}


def test_proxy_validation(client, monkeypatch):
    assert client.post("/proxyResponses", json={}).json() == {"error": "Missing 'model' in request body."}
    rejected = client.post("/proxyResponses", json={"model": "gpt-99"})
    assert rejected.status_code == 400 and "not allowed" in rejected.json()["error"]

    monkeypatch.setattr(settings, "openai_api_key", None)
    missing_key = client.post("/proxyResponses", json={"model": "gpt-4o-mini"})
    assert missing_key.status_code == 500


def test_proxy_forwards_status_and_body(client, monkeypatch):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append((url, json, headers))
        return FakeUpstream()

    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    monkeypatch.setattr(exercise_endpoints.requests, "post", fake_post)

    response = client.post("/proxyResponses", json={"model": "gpt-4o-mini", "input": "Hola"})
    assert response.status_code == 201
    assert response.json() == {"output_text": "YES"}
    url, body, headers = calls[0]
    assert url == settings.openai_responses_endpoint
    assert body["input"] == "Hola"
    assert headers["Authorization"] == "Bearer sk-test"


# ==================== WEBSOCKET ====================

def test_websocket_session(client, managers):
    client.post(f"/api/users/{LEARNER}", json={})

    with client.websocket_connect(f"/ws/exercises/{LEARNER}") as ws:
        ws.send_text("{not json")
        assert ws.receive_json() == {"type": "error", "message": "Invalid JSON"}

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

        ws.send_json({"type": "dance"})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "generate", "kind": "mc", "options": {"target_lang": "es"}})
        phases = [ws.receive_json() for _ in range(3)]
        assert [p["phase"] for p in phases] == ["q", "choices", "meta"]
        exercise = ws.receive_json()["exercise"]
        assert "answer" not in exercise

        ws.send_json({"type": "submit", "exercise_id": exercise["id"], "answer": {"choice": "eres"}})
        graded = ws.receive_json()
        assert graded["type"] == "graded"
        assert graded["correct"] is False and graded["method"] == "judge"
        assert graded["solution"] == {"answer": "soy"}

        ws.send_json({"type": "submit", "exercise_id": "missing", "answer": {}})
        assert ws.receive_json()["type"] == "error"

        assert managers['websocket'].get_connection_stats()["learners"] == [LEARNER]
