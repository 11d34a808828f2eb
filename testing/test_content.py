import copy

from nosabos.content import cefr
from nosabos.content.levels.a1 import SKILL_TREE_A1
from nosabos.content.levels.b1 import SKILL_TREE_B1
from nosabos.content.scaffolding import (
    ALLOWED_MODULES,
    MAX_LESSON_MODES,
    MIN_LESSON_MODES,
    apply_cefr_scaffolding,
    assign_sub_levels,
    ensure_mode_content,
)
from nosabos.content.skill_tree import (
    LEVEL_SOURCES,
    SkillStatus,
    SkillTreeLoader,
    calculate_level_completion,
    find_next_lesson,
    get_language_xp,
    get_lesson_status,
    get_levels_to_load,
    get_unit_progress,
    get_unit_total_xp,
    initialize_progress,
)


# ==================== CEFR ====================

def test_extract_cefr_level():
    assert cefr.extract_cefr_level("lesson-b2-3-1") == "B2"
    assert cefr.extract_cefr_level("unit-c1-2") == "C1"
    assert cefr.extract_cefr_level("lesson-pre-a1-2") == "A1"
    assert cefr.extract_cefr_level("lesson-tutorial-1") == "A1"
    assert cefr.extract_cefr_level(None) == "A1"


def test_prompt_hint_includes_goal_complexity_for_advanced_levels():
    assert "Goals:" in cefr.get_cefr_prompt_hint("c1")
    assert "Goals:" not in cefr.get_cefr_prompt_hint("A2")
    assert cefr.get_cefr_description("zz")["name"] == "Beginner"


def test_lesson_completion_per_language():
    progress = {
        "languageLessons": {
            "es": {f"lesson-a1-1-{i}": {"status": "completed"} for i in range(1, 5)},
            "fr": {"lesson-a1-1-1": {"status": "completed"}},
        }
    }
    progress["languageLessons"]["es"]["lesson-a1-2-1"] = {"status": "in_progress"}

    # 4 of 77
    assert cefr.calculate_lesson_completion(progress, "A1", "es") == 5
    assert cefr.calculate_lesson_completion(progress, "A1", "fr") == 1
    assert cefr.calculate_lesson_completion(progress, "B1", "es") == 0
    assert cefr.calculate_lesson_completion(None, "A1") == 0

    levels = cefr.get_all_lesson_progress(progress, "es")
    assert set(levels) == set(cefr.CEFR_LEVELS)
    assert levels["A1"] == {"percentage": 5, "total": 77}


# ==================== PROGRESS HELPERS ====================

LESSON = {"id": "lesson-a1-1-1", "xpRequired": 110}


def test_levels_to_load():
    assert get_levels_to_load(None) == ["A1", "A2"]
    assert get_levels_to_load({"lessons": {"lesson-b1-2-1": {}, "lesson-a2-1-1": {}}}) == ["B1", "B2"]
    assert get_levels_to_load({"lessons": {"lesson-c2-1-quiz": {}}}) == ["C2"]


def test_language_xp_has_no_cross_language_fallback():
    assert get_language_xp({"languageXp": {"es": 120}, "totalXp": 500}, "fr") == 0
    assert get_language_xp({"totalXp": 200}, "fr") == 200
    assert get_language_xp({"languageXp": {"es": True}}, "es") == 0
    assert get_language_xp(None) == 0


def test_lesson_status():
    assert get_lesson_status({"languageXp": {"es": 120}}, LESSON, "es") == SkillStatus.AVAILABLE
    assert get_lesson_status({"languageXp": {"es": 50}}, LESSON, "es") == SkillStatus.LOCKED

    started = {"languageXp": {"es": 0}, "languageLessons": {"es": {"lesson-a1-1-1": {"status": "in_progress"}}}}
    assert get_lesson_status(started, LESSON, "es") == SkillStatus.IN_PROGRESS
    assert get_lesson_status(started, LESSON, "fr") == SkillStatus.LOCKED

    legacy = {"lessons": {"lesson-a1-1-1": {"status": "completed"}}}
    assert get_lesson_status(legacy, LESSON, "es") == SkillStatus.COMPLETED


def test_find_next_lesson_skips_completed_and_locked():
    units = [{"id": "u1", "lessons": [
        {"id": "l1", "xpRequired": 0},
        {"id": "l2", "xpRequired": 10},
        {"id": "l3", "xpRequired": 1000},
    ]}]
    progress = {"languageXp": {"es": 20}, "languageLessons": {"es": {"l1": {"status": "completed"}}}}
    found = find_next_lesson(units, progress, "es")
    assert found["lesson"]["id"] == "l2"
    assert found["status"] == "available"

    progress["languageLessons"]["es"]["l2"] = {"status": "completed"}
    assert find_next_lesson(units, progress, "es") is None


def test_unit_totals():
    unit = {"lessons": [{"id": "a", "xpReward": 40}, {"id": "b", "xpReward": 60}]}
    assert get_unit_total_xp(unit) == 100
    assert get_unit_progress(unit, {"lessons": {"a": {"status": "completed"}}}) == 50
    assert get_unit_progress({"lessons": []}, None) == 0


def test_progress_helpers_read_per_language_lessons():
    unit = {"id": "u1", "lessons": [{"id": "lesson-b1-1-1"}, {"id": "lesson-b1-1-2"}]}
    progress = {
        "lessons": {"lesson-a1-1-1": {"status": "completed"}},
        "languageLessons": {"es": {
            "lesson-b1-1-1": {"status": "completed"},
            "lesson-b1-1-2": {"status": "completed"},
        }},
    }
    assert get_unit_progress(unit, progress, "es") == 100
    assert calculate_level_completion([unit], progress, "es") == 100
    assert get_levels_to_load(progress, "es") == ["B1", "B2"]

    # A language with no lesson documents falls back to the legacy map
    assert get_unit_progress(unit, progress, "fr") == 0
    assert get_levels_to_load(progress, "fr") == ["A1", "A2"]
    assert cefr.lessons_for_language(progress, "fr") == progress["lessons"]
    assert cefr.lessons_for_language(None) == {}


def test_initialize_progress():
    progress = initialize_progress()
    assert progress["totalXp"] == 0
    assert progress["languageXp"] == {} and progress["languageLessons"] == {}


# ==================== SCAFFOLDING ====================

def test_sub_levels_and_milestones():
    staged = assign_sub_levels({"A1": SKILL_TREE_A1})["A1"]
    assert [unit["subLevel"] for unit in staged] == ["A1.1"] * 7 + ["A1.2"] * 7 + ["A1.3"] * 6
    milestones = [index for index, unit in enumerate(staged) if unit.get("milestone")]
    assert milestones == [6, 13, 19]
    assert "milestone" not in SKILL_TREE_A1[1]


def test_level_tables_match_lesson_counts():
    sizes = {level: len(source()) for level, source in LEVEL_SOURCES.items()}
    assert sizes == {"A1": 20, "A2": 18, "B1": 15, "B2": 12, "C1": 10, "C2": 8}

    for level, source in LEVEL_SOURCES.items():
        lesson_ids = [
            lesson["id"] for unit in source() for lesson in unit["lessons"]
            if "tutorial" not in lesson["id"]
        ]
        assert len(lesson_ids) == len(set(lesson_ids))
        assert all(cefr.extract_cefr_level(lesson_id) == level for lesson_id in lesson_ids)
        assert len(lesson_ids) == cefr.LESSON_COUNTS[level]


def test_standard_units_follow_map_layout():
    b2 = LEVEL_SOURCES["B2"]()
    assert [unit["position"] for unit in b2[:3]] == [
        {"row": 0, "offset": 0}, {"row": 0, "offset": 1}, {"row": 1, "offset": 0},
    ]
    assert b2[6]["color"] == "#06B6D4"
    assert LEVEL_SOURCES["C1"]()[0]["lessons"][-1]["quizConfig"] == {"questionsRequired": 12, "passingScore": 10}
    first_words = SKILL_TREE_A1[2]["lessons"]
    assert first_words[0]["description"]["en"] == "Learn essential greetings and farewells"
    assert first_words[-1]["description"]["en"] == "Test your knowledge of first words"


def test_scaffolding_inserts_supplemental_lessons_before_quiz():
    original = copy.deepcopy(SKILL_TREE_A1)
    unit = apply_cefr_scaffolding({"A1": SKILL_TREE_A1})["A1"][2]
    ids = [lesson["id"] for lesson in unit["lessons"]]
    assert ids == [
        "lesson-a1-1-1",
        "lesson-a1-1-2",
        "lesson-a1-1-3",
        "unit-a1-1-skill-builder",
        "unit-a1-1-integrated-practice",
        "lesson-a1-1-quiz",
    ]

    by_id = {lesson["id"]: lesson for lesson in unit["lessons"]}
    assert by_id["unit-a1-1-skill-builder"]["xpRequired"] == 155
    assert by_id["unit-a1-1-integrated-practice"]["xpRequired"] == 170
    assert by_id["lesson-a1-1-quiz"]["xpRequired"] == 185
    assert by_id["lesson-a1-1-quiz"]["modes"] == ["grammar", "vocabulary"]
    assert "objectives" in by_id["lesson-a1-1-1"]

    # Source content is left untouched
    assert SKILL_TREE_A1 == original


def test_scaffolded_modes_are_balanced():
    for unit in apply_cefr_scaffolding({"A1": SKILL_TREE_A1})["A1"]:
        covered = set()
        for lesson in unit["lessons"]:
            assert set(lesson["modes"]) <= set(ALLOWED_MODULES)
            for mode in lesson["modes"]:
                assert lesson["content"].get(mode) is not None
            covered.update(lesson["modes"])
            if not lesson.get("isFinalQuiz") and "skill-builder" not in lesson["id"]:
                assert MIN_LESSON_MODES <= len(lesson["modes"]) <= MAX_LESSON_MODES
        assert covered == set(ALLOWED_MODULES)


def test_advanced_levels_get_functional_tasks():
    unit = apply_cefr_scaffolding({"B1": SKILL_TREE_B1})["B1"][0]
    tasks = unit["lessons"][0]["advancedTasks"]
    assert [task["mode"] for task in tasks] == ["listening", "writing"]
    assert "(B1)" in tasks[0]["prompt"]


def test_ensure_mode_content_is_idempotent():
    lesson = {"content": {"grammar": {"topic": "ser"}}}
    once = ensure_mode_content("realtime", "Greetings", lesson)
    twice = ensure_mode_content("realtime", "Greetings", {"content": once})
    assert once == twice
    assert once["realtime"]["scenario"] == "greetings exchange"
    assert ensure_mode_content("grammar", "x", lesson)["grammar"] == {"topic": "ser"}


def test_ensure_mode_content_fills_empty_blocks():
    lesson = {"content": {"reading": "", "stories": {}, "vocabulary": None}}
    content = ensure_mode_content("reading", "Food", lesson)
    assert content["reading"]["topic"] == "Food"
    assert ensure_mode_content("stories", "Food", lesson)["stories"]["topic"] == "Food"
    assert ensure_mode_content("vocabulary", "Food", lesson)["vocabulary"]["topic"] == "Food"


# ==================== LOADER ====================

async def test_loader_caches_levels(cache_manager):
    loader = SkillTreeLoader(cache_manager)
    units = await loader.load_level("A1")
    assert len(units) == len(SKILL_TREE_A1)
    assert await loader.load_level("A1") is units
    assert await cache_manager.get_skill_tree("A1") is not None

    # A second loader reuses the scaffolded copy shared through the cache
    other = SkillTreeLoader(cache_manager)
    shared = await other.load_level("A1")
    assert [unit["id"] for unit in shared] == [unit["id"] for unit in units]

    assert await loader.load_level("Z9") == []
    assert loader.cache_stats()["cachedLevels"] == ["A1"]


async def test_loader_relevant_levels():
    loader = SkillTreeLoader(scaffold=False)
    units = await loader.load_relevant({"lessons": {"lesson-b1-1-1": {}}})
    assert units[0]["id"] == "unit-b1-1"
    assert units[-1]["id"].startswith("unit-b2")
    loader.clear_cache()
    assert loader.cache_stats()["cachedCount"] == 0
