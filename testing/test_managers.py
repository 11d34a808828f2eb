import json
from datetime import datetime, timedelta, timezone

import pytest
from firebase_admin import firestore

from nosabos.managers import llm_manager as llm_module
from nosabos.managers import nostr_manager as nostr
from nosabos.managers.cache_manager import InMemoryCache
from nosabos.managers.llm_manager import LLMManager, extract_response_text
from nosabos.managers.notes_manager import NotesManager
from nosabos.managers.progress_manager import ProgressManager, compute_xp_update
from nosabos.managers.team_manager import TeamError, TeamManager

CREATOR = "npub_creator"
MEMBER = "npub_member"


@pytest.fixture
def teams(firestore_manager):
    return TeamManager(firestore_manager)


@pytest.fixture
def progress(firestore_manager):
    return ProgressManager(firestore_manager)


# ==================== USERS ====================

async def test_ensure_user_creates_once(firestore_manager):
    user = await firestore_manager.ensure_user(CREATOR, {"displayName": "Ana"})
    assert user["id"] == CREATOR
    assert user["progress"]["totalXp"] == 0
    assert isinstance(user["createdAt"], datetime)

    firestore_manager.user_ref(CREATOR).update({"progress.targetLang": "fr"})
    again = await firestore_manager.ensure_user(CREATOR, {"displayName": "Someone else"})
    assert again["profile"] == {"displayName": "Ana"}
    assert again["progress"]["targetLang"] == "fr"
    assert await firestore_manager.get_user("npub_missing") is None


def test_require_db_without_client(firestore_manager):
    firestore_manager.db = None
    assert not firestore_manager.connected
    with pytest.raises(RuntimeError):
        firestore_manager.user_ref(CREATOR)


# ==================== TEAMS ====================

async def test_invite_accept_and_leaderboard(teams, firestore_manager):
    await firestore_manager.ensure_user(CREATOR, {"displayName": "Ana"})
    await firestore_manager.ensure_user(MEMBER, {"displayName": "Ben"})
    firestore_manager.user_ref(MEMBER).update({"xp": 300})

    team_id = await teams.create_team(CREATOR, "Club", "Ana")
    assert team_id.startswith("team_")
    invite_id = await teams.invite_user_to_team(CREATOR, team_id, "Club", MEMBER, "Ana")

    with pytest.raises(TeamError, match="already invited"):
        await teams.invite_user_to_team(CREATOR, team_id, "Club", MEMBER, "Ana")

    invites = await teams.get_user_team_invites(MEMBER)
    assert [(i["id"], i["status"], i["teamName"]) for i in invites] == [(invite_id, "pending", "Club")]

    # Pending members are not on the leaderboard yet
    rows = await teams.get_team_member_progress(CREATOR, team_id)
    assert [row["npub"] for row in rows] == [CREATOR]

    await teams.accept_team_invite(MEMBER, invite_id)
    joined = await teams.get_user_teams(MEMBER)
    assert len(joined) == 1
    assert joined[0]["id"] == team_id
    assert joined[0]["isCreator"] is False
    assert joined[0]["createdBy"] == CREATOR

    owned = await teams.get_user_teams(CREATOR)
    assert owned[0]["isCreator"] is True
    assert owned[0]["members"][0]["status"] == "accepted"

    rows = await teams.get_team_member_progress(CREATOR, team_id)
    assert [(row["name"], row["totalXp"], row["isCreator"]) for row in rows] == [
        ("Ana", 0, True),
        ("Ben", 300, False),
    ]


async def test_reject_removes_pending_member(teams):
    team_id = await teams.create_team(CREATOR, "Club")
    invite_id = await teams.invite_user_to_team(CREATOR, team_id, "Club", MEMBER)
    await teams.reject_team_invite(MEMBER, invite_id)

    team = (await teams.get_user_teams(CREATOR))[0]
    assert team["members"] == []
    assert (await teams.get_user_team_invites(MEMBER))[0]["status"] == "rejected"
    assert await teams.get_user_teams(MEMBER) == []


async def test_leave_and_delete(teams):
    team_id = await teams.create_team(CREATOR, "Club")
    invite_id = await teams.invite_user_to_team(CREATOR, team_id, "Club", MEMBER)
    await teams.accept_team_invite(MEMBER, invite_id)

    await teams.leave_team(MEMBER, CREATOR, team_id)
    assert (await teams.get_user_teams(CREATOR))[0]["members"] == []
    assert await teams.get_user_team_invites(MEMBER) == []

    await teams.invite_user_to_team(CREATOR, team_id, "Club", "npub_other")
    await teams.delete_team(CREATOR, team_id)
    assert await teams.get_user_teams(CREATOR) == []
    assert await teams.get_user_team_invites("npub_other") == []

    with pytest.raises(TeamError, match="does not exist"):
        await teams.get_team_member_progress(CREATOR, team_id)
    with pytest.raises(TeamError, match="does not exist"):
        await teams.delete_team(CREATOR, team_id)


async def test_team_input_validation(teams):
    with pytest.raises(TeamError):
        await teams.create_team(CREATOR, "")
    with pytest.raises(TeamError, match="does not exist"):
        await teams.invite_user_to_team(CREATOR, "team_missing", "Club", MEMBER)
    with pytest.raises(TeamError, match="Invite does not exist"):
        await teams.accept_team_invite(MEMBER, "invite_missing")
    assert await teams.check_user_exists("") is False


def test_member_row_fallbacks():
    row = TeamManager._member_row(
        {"npub": "npub_x", "name": "Bea", "isCreator": False},
        {
            "xp": "120",
            "dailyGoalXp": 50,
            "dailyXp": 30,
            "progress": {"streak": 4, "level": "A2"},
            "stats": {"answeredStepsCount": 12},
        },
    )
    assert row["name"] == "Bea"
    assert row["totalXp"] == 120
    assert row["progressPercent"] == 60
    assert row["streak"] == 4
    assert row["answeredStepsCount"] == 12
    assert row["level"] == "A2"

    empty = TeamManager._member_row({"npub": "npub_y", "isCreator": True}, {})
    assert empty["name"] == "Learner"
    assert empty["progressPercent"] == 0 and empty["level"] == "-"


async def test_invite_subscription(teams):
    seen = []
    unsubscribe = teams.subscribe_to_team_invites(MEMBER, seen.append)
    assert seen == [[]]

    team_id = await teams.create_team(CREATOR, "Club")
    await teams.invite_user_to_team(CREATOR, team_id, "Club", MEMBER)
    assert seen[-1][0]["teamId"] == team_id

    unsubscribe()
    count = len(seen)
    await teams.invite_user_to_team(CREATOR, team_id, "Club", "npub_other")
    await teams.leave_team(MEMBER, CREATOR, team_id)
    assert len(seen) == count


async def test_team_subscription_reports_deletion(teams):
    team_id = await teams.create_team(CREATOR, "Club")
    seen = []
    teams.subscribe_to_team_updates(CREATOR, team_id, seen.append)
    assert seen[0]["teamName"] == "Club"

    await teams.delete_team(CREATOR, team_id)
    assert seen[-1] is None


# ==================== PROGRESS ====================

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_xp_update_starts_new_day():
    update = compute_xp_update({}, 10, NOW, "es")
    assert update["xp"] == 10
    assert update["dailyXp"] == 10
    assert update["dailyHasCelebrated"] is False
    assert update["dailyResetAt"] == "2025-03-02T12:00:00Z"
    assert update["progress"] == {"languageXp": {"es": 10}, "totalXp": 10}


def test_xp_update_celebrates_goal_once():
    data = {
        "xp": 100,
        "dailyXp": 40,
        "dailyGoalXp": 50,
        "dailyHasCelebrated": False,
        "dailyResetAt": (NOW + timedelta(hours=5)).isoformat(),
        "progress": {"languageXp": {"es": 90, "fr": 10}, "totalXp": 100},
    }
    update = compute_xp_update(data, 12.4, NOW, "es")
    assert update["dailyXp"] == 52
    assert update["xp"] == 112
    assert update["dailyHasCelebrated"] is True
    assert update["lastDailyGoalHitAt"] is firestore.SERVER_TIMESTAMP
    assert update["progress"]["languageXp"] == {"es": 102, "fr": 10}
    assert "dailyResetAt" not in update

    data.update(dailyXp=52, dailyHasCelebrated=True)
    assert "lastDailyGoalHitAt" not in compute_xp_update(data, 5, NOW, "es")


def test_xp_update_resets_after_window_and_rounds_up_to_one():
    data = {"xp": 100, "dailyXp": 80, "dailyResetAt": "2025-03-01T11:00:00Z"}
    update = compute_xp_update(data, 0.2, NOW)
    assert update["dailyXp"] == 1
    assert update["xp"] == 101
    assert "progress" not in update


async def test_award_xp_merges_into_user(progress, firestore_manager):
    await firestore_manager.ensure_user(CREATOR)
    await progress.award_xp(CREATOR, 20, "es")
    update = await progress.award_xp(CREATOR, 5, "fr")

    assert update["xp"] == 25
    user = await firestore_manager.get_user(CREATOR)
    assert user["xp"] == 25
    assert user["progress"]["languageXp"] == {"es": 20, "fr": 5}
    assert user["progress"]["totalXp"] == 25
    assert user["progress"]["lessons"] == {}

    assert await progress.award_xp(CREATOR, 0) is None
    assert await progress.award_xp("", 10) is None


async def test_award_xp_reports_goal_time_as_text(progress, firestore_manager):
    await firestore_manager.ensure_user(CREATOR)
    firestore_manager.user_ref(CREATOR).set({"dailyGoalXp": 10}, merge=True)

    update = await progress.award_xp(CREATOR, 10, "es")
    assert update["dailyHasCelebrated"] is True
    assert isinstance(update["lastDailyGoalHitAt"], str)
    json.dumps(update)

    user = await firestore_manager.get_user(CREATOR)
    assert user["lastDailyGoalHitAt"] is not firestore.SERVER_TIMESTAMP


async def test_lesson_lifecycle(progress, firestore_manager):
    await firestore_manager.ensure_user(CREATOR)
    await progress.start_lesson(CREATOR, "lesson-a1-1-1", "ES", None, 30)

    lessons = await firestore_manager.get_language_lessons(CREATOR)
    started = lessons["es"]["lesson-a1-1-1"]
    assert started["status"] == "in_progress"
    assert started["lessonStartXp"] == 30
    assert (await firestore_manager.get_user(CREATOR))["progress"]["currentLesson"] == "lesson-a1-1-1"

    assert await progress.track_lesson_attempt(CREATOR, "lesson-a1-1-1", "es")
    assert await progress.track_lesson_attempt(CREATOR, "lesson-a1-1-1", "es")

    assert await progress.complete_lesson(CREATOR, "lesson-a1-1-1", 45, "es")
    done = (await firestore_manager.get_language_lessons(CREATOR, "es"))["es"]["lesson-a1-1-1"]
    assert done["status"] == "completed"
    assert done["attempts"] == 2
    assert done["xpEarned"] == 45
    assert "lessonStartXp" not in done
    assert (await firestore_manager.get_user(CREATOR))["progress"]["currentLesson"] is None

    # Restarting a completed lesson leaves it completed
    await progress.start_lesson(CREATOR, "lesson-a1-1-1", "es", {"languageLessons": {"es": {"lesson-a1-1-1": done}}})
    assert (await firestore_manager.get_language_lessons(CREATOR))["es"]["lesson-a1-1-1"]["status"] == "completed"
    assert await firestore_manager.get_language_lessons(CREATOR, "fr") == {}


async def test_abandon_and_missing_user(progress, firestore_manager):
    await firestore_manager.ensure_user(CREATOR)
    await progress.start_lesson(CREATOR, "lesson-a1-2-1", "es", None, 0)
    assert await progress.abandon_lesson(CREATOR, "lesson-a1-2-1", "es")
    lesson = (await firestore_manager.get_language_lessons(CREATOR))["es"]["lesson-a1-2-1"]
    assert lesson["status"] == "available"
    assert "lessonStartXp" not in lesson

    assert await progress.track_lesson_attempt("npub_missing", "lesson-a1-2-1") is False
    assert await progress.complete_lesson(CREATOR, "lesson-a1-2-1", 0) is False


async def test_milestone_bonus(progress, firestore_manager):
    await firestore_manager.ensure_user(CREATOR)
    assert await progress.award_milestone_bonus(CREATOR, "unit-a1-1", 25)
    user = await firestore_manager.get_user(CREATOR)
    assert user["xp"] == 25
    assert user["dailyXp"] == 25
    assert user["progress"]["totalXp"] == 25
    assert isinstance(user["progress"]["milestones"]["unit-a1-1"], datetime)


# ==================== LLM ====================

def test_extract_response_text_shapes():
    assert extract_response_text({"output_text": "YES"}) == "YES"
    assert extract_response_text({"output": [{"content": [{"text": "Hola"}, {"text": "!"}]}]}) == "Hola!"
    assert extract_response_text({"content": [{"text": "NO"}]}) == "NO"
    assert extract_response_text({"choices": [{"message": {"content": "Y"}}]}) == "Y"
    assert extract_response_text("plain") == "plain"
    assert extract_response_text(None) == ""


@pytest.fixture
def llm(monkeypatch):
    monkeypatch.setattr(llm_module.settings, "gemini_api_key", None)
    return LLMManager(responses_url="http://proxy.test/")


class FakeResponse:
    def __init__(self, payload, content_type="application/json"):
        self.payload = payload
        self.headers = {"content-type": content_type}
        self.text = payload if isinstance(payload, str) else ""

    def json(self):
        return self.payload


async def test_call_responses_and_judge(llm, monkeypatch):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append((url, json))
        return FakeResponse({"output_text": "Yes, it is."})

    monkeypatch.setattr(llm_module.requests, "post", fake_post)
    assert not llm.gemini_available
    assert await llm.judge("Is it right?") is True
    assert calls[0][0] == "http://proxy.test/proxyResponses"
    assert calls[0][1]["model"] == llm.responses_model
    assert calls[0][1]["input"] == "Is it right?"


async def test_call_responses_failure_is_empty(llm, monkeypatch):
    def broken_post(*args, **kwargs):
        raise ConnectionError("down")

    monkeypatch.setattr(llm_module.requests, "post", broken_post)
    assert await llm.call_responses("hello") == ""
    assert await llm.judge("anything") is False


async def test_stream_text_requires_gemini(llm):
    with pytest.raises(RuntimeError):
        async for _ in llm.stream_text("prompt"):
            pass


async def test_stream_objects_parses_ndjson(llm, monkeypatch):
    async def fake_stream(prompt):
        for chunk in ['{"type": "question", "q', 'uestion": "¿Qué?"}\n', '{"type": "done"}']:
            yield chunk

    monkeypatch.setattr(llm, "stream_text", fake_stream)
    objects = [obj async for obj in llm.stream_objects("prompt")]
    assert objects == [{"type": "question", "question": "¿Qué?"}, {"type": "done"}]


async def test_note_content_parsing(llm, monkeypatch):
    replies = iter([
        'Here: {"example": "Tengo un gato.", "summary": "tener = to have"}',
        "no json at all",
        "{not valid}",
    ])

    async def fake_call(prompt, model=None):
        return next(replies)

    monkeypatch.setattr(llm, "call_responses", fake_call)
    assert await llm.generate_note_content("tener") == {"example": "Tengo un gato.", "summary": "tener = to have"}
    assert (await llm.generate_note_content("tener"))["example"] == "Example: tener"
    assert (await llm.generate_note_content("tener", cefr_level="B1"))["summary"] == (
        "Keep practicing this B1 level concept."
    )


# ==================== NOTES ====================

@pytest.fixture
async def notes(tmp_path, fake_llm):
    manager = NotesManager(f"sqlite+aiosqlite:///{tmp_path}/notes.db", fake_llm)
    await manager.initialize()
    yield manager
    await manager.close()


async def test_notes_are_listed_newest_first(notes):
    first = await notes.add_note(CREATOR, {"lessonTitle": "Greetings", "example": "Hola", "targetLang": "es"})
    second = await notes.add_note(CREATOR, {"lessonTitle": "Numbers", "example": "Un", "targetLang": "fr"})
    await notes.add_note(MEMBER, {"lessonTitle": "Other"})

    listed = await notes.list_notes(CREATOR)
    assert [n["id"] for n in listed] == [second["id"], first["id"]]
    assert [n["lessonTitle"] for n in await notes.list_notes(CREATOR, "es")] == ["Greetings"]
    assert first["cefrLevel"] == "A1" and first["moduleType"] == "vocabulary"

    assert await notes.remove_note(CREATOR, first["id"]) is True
    assert await notes.remove_note(CREATOR, first["id"]) is False
    assert await notes.clear_notes(CREATOR) == 1
    assert await notes.list_notes(CREATOR) == []
    assert len(await notes.list_notes(MEMBER)) == 1


async def test_generated_note(notes):
    note = await notes.create_note_for_answer(
        CREATOR, "ser vs estar", lesson_title="Being", was_correct=True, cefr_level="A2", module_type="grammar"
    )
    assert note["example"] == "Example with ser vs estar"
    assert note["summary"] == "About ser vs estar"
    assert note["lessonTitle"] == "Being"
    assert note["wasCorrect"] is True

    with pytest.raises(ValueError):
        await notes.add_note("", {})


# ==================== NOSTR ====================

def test_keys_round_trip_through_bech32():
    keys = nostr.generate_keys()
    assert keys["npub"].startswith("npub1") and keys["nsec"].startswith("nsec1")
    assert nostr.npub_to_hex(keys["npub"]) == keys["pubkey"]
    assert nostr.hex_to_npub(keys["pubkey"]) == keys["npub"]
    assert nostr.nsec_to_private_key(keys["nsec"]).public_key_xonly.format().hex() == keys["pubkey"]

    with pytest.raises(nostr.NostrError):
        nostr.npub_to_hex(keys["nsec"])
    with pytest.raises(nostr.NostrError):
        nostr.npub_to_hex("garbage")


def test_signed_events_verify():
    key = nostr.nsec_to_private_key(nostr.generate_keys()["nsec"])
    event = nostr.build_event(key, "¡Hola!", tags=[["t", "learnwithnostr"]], created_at=1700000000)
    assert len(event["id"]) == 64
    assert event["id"] == nostr.compute_event_id(event["pubkey"], 1700000000, 1, event["tags"], "¡Hola!")
    assert nostr.verify_event(event)
    assert not nostr.verify_event({**event, "content": "Hola"})
    assert not nostr.verify_event({"id": "x"})


def test_feed_hashtag():
    assert nostr.feed_hashtag("es") == "AprendeConNostr"
    assert nostr.feed_hashtag("en") == "LearnWithNostr"


async def test_direct_message_tags_target(monkeypatch):
    sender = nostr.generate_keys()
    target = nostr.generate_keys()
    manager = nostr.NostrManager(relays=["wss://relay.test"])
    published = []

    async def fake_publish(event):
        published.append(event)
        return ["wss://relay.test"]

    monkeypatch.setattr(manager, "publish", fake_publish)
    result = await manager.send_direct_message(target["npub"], "Join us", sender["nsec"])
    assert result["relays"] == ["wss://relay.test"]
    assert published[0]["tags"] == [["p", target["pubkey"]]]
    assert published[0]["pubkey"] == sender["pubkey"]
    assert await manager.send_direct_message(target["npub"], "", sender["nsec"]) is None


async def test_hashtag_feed_dedupes_and_attaches_profiles(monkeypatch):
    author = nostr.nsec_to_private_key(nostr.generate_keys()["nsec"])
    older = nostr.build_event(author, "one", tags=[["t", "learnwithnostr"]], created_at=100)
    newer = nostr.build_event(author, "two", tags=[["t", "learnwithnostr"]], created_at=200)
    forged = {**nostr.build_event(author, "three", created_at=300), "content": "tampered"}
    profile = nostr.build_event(author, '{"name": "Ana"}', kind=nostr.KIND_METADATA, created_at=50)

    manager = nostr.NostrManager(relays=["wss://a.test", "wss://b.test"])
    filters_seen = []

    async def fake_query(relay, filters):
        filters_seen.append(filters)
        if filters["kinds"] == [nostr.KIND_METADATA]:
            return [profile]
        return [older, newer, forged] if relay == "wss://a.test" else [newer]

    monkeypatch.setattr(manager, "_query", fake_query)
    notes = await manager.fetch_hashtag_notes("LearnWithNostr", limit=10)

    assert [n["content"] for n in notes] == ["two", "one"]
    assert notes[0]["profile"] == {"name": "Ana"}
    assert notes[0]["npub"] == nostr.hex_to_npub(older["pubkey"])
    assert filters_seen[0]["#t"] == ["learnwithnostr"]


# ==================== CACHE ====================

async def test_fallback_cache_sweeps_expired_keys_on_write():
    cache = InMemoryCache()
    await cache.set("exercise:old", "{}", ex=60)
    cache._expires_at["exercise:old"] = datetime.utcnow() - timedelta(seconds=1)
    await cache.set("exercise:kept", "{}")
    await cache.set("exercise:fresh", "{}", ex=60)

    assert len(cache) == 2
    assert await cache.get("exercise:old") is None
    assert await cache.get("exercise:fresh") == "{}"


async def test_exercise_round_trip_through_fallback(cache_manager):
    await cache_manager.set_exercise("ex1", {"kind": "mc", "answer": "soy"})
    stored = await cache_manager.get_exercise("ex1")
    assert stored["answer"] == "soy" and "cachedAt" in stored

    await cache_manager.delete_exercise("ex1")
    assert await cache_manager.get_exercise("ex1") is None
    assert (await cache_manager.get_connection_status())["type"] == "fallback"
