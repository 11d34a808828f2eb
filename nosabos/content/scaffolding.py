# nosabos/content/scaffolding.py - CEFR scaffolding applied on top of the raw level units

import copy
import logging
import math
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

ALLOWED_MODULES = ["vocabulary", "grammar", "stories", "reading", "realtime"]
FILLER_ORDER = ["vocabulary", "grammar", "reading", "stories", "realtime"]
MAX_LESSON_MODES = 4
MIN_LESSON_MODES = 3
SUPPLEMENTAL_XP_STEP = 15

SUB_LEVEL_SEGMENTS = {
    level: [f"{level}.1", f"{level}.2", f"{level}.3"]
    for level in ("A1", "A2", "B1", "B2", "C1", "C2")
}

CEFR_LEVEL_PROFILES: Dict[str, Dict[str, Any]] = {
    "A1": {
        "interaction": "exchange short, formulaic turns",
        "production": "share personal details and immediate needs",
        "mediation": "relay single facts or key words",
        "accuracy": "use memorized phrases with understandable pronunciation",
        "discourseSkills": ["turn-taking", "formulaic exchanges"],
    },
    "A2": {
        "interaction": "handle simple transactions and social routines",
        "production": "describe familiar topics in short phrases",
        "mediation": "summarize main points of brief messages",
        "accuracy": "combine rehearsed sentences with basic connectors",
        "discourseSkills": ["connected phrases", "short descriptions"],
    },
    "B1": {
        "interaction": "sustain conversations about experiences and plans",
        "production": "narrate events and explain opinions",
        "mediation": "relay key details from longer texts or dialogue",
        "accuracy": "use past and future frames with emerging control",
        "discourseSkills": ["narration", "linking devices", "reformulation"],
    },
    "B2": {
        "interaction": "negotiate viewpoints and manage breakdowns",
        "production": "develop arguments with supporting detail",
        "mediation": "summarize and compare sources or positions",
        "accuracy": "use complex clauses with generally consistent control",
        "discourseSkills": ["argumentation", "clarification", "hedging"],
    },
    "C1": {
        "interaction": "lead discussions with nuanced register control",
        "production": "deliver structured analyses and persuasive discourse",
        "mediation": "reframe ideas for different audiences",
        "accuracy": "maintain natural flow with precise vocabulary",
        "discourseSkills": ["synthesizing", "stance-taking", "register shifts"],
    },
    "C2": {
        "interaction": "switch effortlessly across formal and informal contexts",
        "production": "craft subtle argumentation and stylistic effects",
        "mediation": "mediate complex content, positions, or emotions",
        "accuracy": "demonstrate near-native control and nuance",
        "discourseSkills": ["stylistic control", "idiomatic range", "critical response"],
    },
}

ADVANCED_MODES = {
    "B1": ["listening", "writing"],
    "B2": ["listening", "writing", "mediation"],
    "C1": ["listening", "writing", "mediation"],
    "C2": ["listening", "writing", "mediation"],
}

FUNCTIONAL_PROMPTS = {
    "listening": "Interpret authentic audio about {topic} and capture the main points ({level})",
    "writing": "Write a short response that applies the lesson topic to a real scenario ({level})",
    "mediation": "Bridge information about {topic} for someone with less background knowledge ({level})",
}


def _en(block: Optional[Dict[str, Any]]) -> str:
    return (block or {}).get("en") or ""


def _is_skill_builder(lesson: Dict[str, Any]) -> bool:
    return "skill-builder" in (lesson.get("id") or "")


def _is_integrated_practice(lesson: Dict[str, Any]) -> bool:
    return "integrated-practice" in (lesson.get("id") or "")


def derive_lesson_topic(unit: Dict[str, Any], lesson: Dict[str, Any]) -> str:
    content = lesson.get("content") or {}
    return (
        (content.get("vocabulary") or {}).get("topic")
        or (content.get("grammar") or {}).get("topic")
        or _en(unit.get("title"))
        or _en(lesson.get("title"))
        or "lesson focus"
    )


def add_supplemental_lessons(level: str, unit: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Insert a skill builder and an integrated practice lesson before the unit quiz"""
    lessons = unit.get("lessons") or []
    core = [lesson for lesson in lessons if not lesson.get("isFinalQuiz")]
    max_core_xp = max([lesson.get("xpRequired") or 0 for lesson in core] + [0])
    topic = _en(unit.get("title")) or _en(unit.get("description")) or "unit theme"
    title_en = _en(unit.get("title")) or "Unit"
    title_es = (unit.get("title") or {}).get("es") or _en(unit.get("title")) or "Unidad"

    supplemental = [
        {
            "id": f"{unit['id']}-skill-builder",
            "title": {"en": f"{title_en} Skill Builder", "es": f"Refuerzo de {title_es}"},
            "description": {
                "en": "Short targeted drills to consolidate the unit language before the quiz.",
                "es": "Ejercicios breves para consolidar el lenguaje de la unidad antes del cuestionario.",
            },
            "xpRequired": max_core_xp + SUPPLEMENTAL_XP_STEP,
            "xpReward": 35,
            "modes": ["grammar", "vocabulary"],
            "content": {
                "grammar": {"topic": topic, "focusPoints": ["pattern recycling", "micro-drills"]},
                "vocabulary": {
                    "topic": topic,
                    "prompt": f"Cycle through quick recall of {topic} phrases before applying them.",
                },
            },
            "cefrStage": level,
            "pathway": "granularity",
        },
        {
            "id": f"{unit['id']}-integrated-practice",
            "title": {"en": f"{title_en} Integrated Practice", "es": f"Práctica integrada de {title_es}"},
            "description": {
                "en": "Link vocabulary and grammar from the unit in a guided scenario.",
                "es": "Vincula vocabulario y gramática de la unidad en un escenario guiado.",
            },
            "xpRequired": max_core_xp + SUPPLEMENTAL_XP_STEP * 2,
            "xpReward": 60,
            "modes": ["realtime", "reading", "stories"],
            "content": {
                "realtime": {
                    "scenario": f"{topic.lower()} integrated task",
                    "prompt": f"Produce longer turns that connect earlier lesson points for {topic}.",
                },
                "reading": {
                    "topic": topic,
                    "prompt": f"Interpret scaffolded prompts about {topic} before responding live.",
                },
                "stories": {
                    "topic": topic,
                    "prompt": f"Follow a mini scenario that blends the unit's core language for {topic}.",
                },
            },
            "cefrStage": level,
            "pathway": "granularity",
        },
    ]

    quiz_index = next((i for i, lesson in enumerate(lessons) if lesson.get("isFinalQuiz")), -1)
    if quiz_index == -1:
        return list(lessons) + supplemental

    quiz = dict(lessons[quiz_index])
    min_quiz_xp = max_core_xp + SUPPLEMENTAL_XP_STEP * (len(supplemental) + 1)
    quiz["xpRequired"] = max(quiz.get("xpRequired") or 0, min_quiz_xp)
    trailing = lessons[quiz_index + 1:]
    return core + supplemental + [quiz] + trailing


def build_lesson_objectives(level: str, unit: Dict[str, Any], lesson: Dict[str, Any]) -> Dict[str, Any]:
    profile = CEFR_LEVEL_PROFILES.get(level, CEFR_LEVEL_PROFILES["A1"])
    topic = derive_lesson_topic(unit, lesson)
    modes = lesson.get("modes") or []

    if lesson.get("isFinalQuiz"):
        assessment = (
            f"Meet the {_en(lesson.get('title')) or 'lesson'} pass criteria "
            f"to show readiness for the next sub-stage."
        )
    else:
        assessment = (
            f"Complete guided practice showing control of {topic} in "
            f"{', '.join(modes) or 'core'} tasks."
        )

    return {
        "cefrLevel": level,
        "communicativeObjectives": [
            f"Can {profile['interaction']} when discussing {topic}.",
            f"Can {profile['production']} while keeping conversation aligned to "
            f"{_en(unit.get('title')).lower()}.",
            f"Can {profile['mediation']} related to {topic} when peers need support.",
        ],
        "successCriteria": [
            f"Uses lesson language to {profile['interaction']} with {profile['accuracy']}.",
            f"Shows {', '.join(profile['discourseSkills']) or 'connected speech'} across "
            f"{len(modes) or 1} activity modes.",
            assessment,
        ],
    }


def append_advanced_modes(level: str, lesson: Dict[str, Any], unit: Dict[str, Any]) -> Dict[str, Any]:
    additions = ADVANCED_MODES.get(level)
    if not additions:
        return lesson

    topic = derive_lesson_topic(unit, lesson)
    tasks = []
    for mode in additions:
        template = FUNCTIONAL_PROMPTS.get(mode)
        prompt = (
            template.format(topic=topic, level=level) if template
            else f"Apply {topic} in a {mode} task for level {level}."
        )
        tasks.append({"mode": mode, "topic": topic, "prompt": prompt})

    updated = dict(lesson)
    updated["advancedTasks"] = list(lesson.get("advancedTasks") or []) + tasks
    return updated


def ensure_mode_content(mode: str, topic: Any, lesson: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of the lesson content with a default block for ``mode`` when it has none.

    Missing or empty blocks are filled; non-empty ones are never replaced, so applying
    this twice gives the same result.
    """
    label = topic if isinstance(topic, str) else str(topic or "topic")
    content = dict(lesson.get("content") or {})

    defaults = {
        "vocabulary": lambda: {
            "topic": label,
            "prompt": f"Learn and recycle {label} vocabulary in context.",
        },
        "grammar": lambda: {"topic": label, "focusPoints": ["form", "use"]},
        "stories": lambda: {
            "topic": label,
            "prompt": f"Follow a short story that highlights {label} language.",
        },
        "reading": lambda: {
            "topic": label,
            "prompt": f"Interpret written prompts about {label}.",
        },
        "realtime": lambda: {
            "scenario": f"{label.lower()} exchange",
            "prompt": f"Respond in real time using {label} language.",
        },
    }

    if mode in defaults and not content.get(mode):
        content[mode] = defaults[mode]()
    return content


def normalize_lesson_modes(unit: Dict[str, Any], lesson: Dict[str, Any]) -> Dict[str, Any]:
    """Restrict modes to the five modules and keep three or four of them per core lesson"""
    topic = derive_lesson_topic(unit, lesson)

    modes: List[str] = []
    for mode in lesson.get("modes") or []:
        if mode in ALLOWED_MODULES and mode not in modes:
            modes.append(mode)

    if lesson.get("isFinalQuiz") or _is_skill_builder(lesson):
        modes = ["grammar", "vocabulary"]
    elif _is_integrated_practice(lesson):
        modes = ["realtime", "reading", "stories"]
    else:
        if not modes:
            modes = ["vocabulary", "realtime", "reading"]

        if len(modes) == 2 and "vocabulary" in modes and "grammar" in modes:
            modes.append("realtime")

        while len(modes) < MIN_LESSON_MODES:
            filler = next((mode for mode in FILLER_ORDER if mode not in modes), None)
            if filler is None:
                break
            modes.append(filler)

        modes = modes[:MAX_LESSON_MODES]

    content = dict(lesson.get("content") or {})
    for mode in modes:
        content = ensure_mode_content(mode, topic, {**lesson, "content": content})

    return {**lesson, "modes": modes, "content": content}


def ensure_unit_module_coverage(unit: Dict[str, Any], lessons: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Make every allowed module appear at least once across a unit's core lessons.

    Lessons are updated in place and the same list is returned.
    """
    counts: Dict[str, int] = {}
    for lesson in lessons:
        for mode in lesson.get("modes") or []:
            counts[mode] = counts.get(mode, 0) + 1

    missing = [module for module in ALLOWED_MODULES if not counts.get(module)]
    eligible = [
        lesson for lesson in lessons
        if not lesson.get("isFinalQuiz")
        and not _is_skill_builder(lesson)
        and not _is_integrated_practice(lesson)
    ]

    for module in missing:
        target = next(
            (lesson for lesson in eligible
             if len(lesson.get("modes") or []) < MAX_LESSON_MODES
             and module not in (lesson.get("modes") or [])),
            None,
        )

        if target is None:
            # Swap out a mode that other lessons already cover
            for lesson in eligible:
                lesson_modes = lesson.get("modes") or []
                if module in lesson_modes or len(lesson_modes) != MAX_LESSON_MODES:
                    continue
                if any(counts.get(mode, 0) > 1 for mode in lesson_modes):
                    target = lesson
                    break

            if target is not None:
                replace = next(mode for mode in target["modes"] if counts.get(mode, 0) > 1)
                target["modes"] = [mode for mode in target["modes"] if mode != replace] + [module]
                counts[replace] -= 1

        if target is None:
            continue

        modes = list(target.get("modes") or [])
        if module not in modes:
            modes.append(module)
        target["modes"] = modes
        target["content"] = ensure_mode_content(module, derive_lesson_topic(unit, target), target)
        counts[module] = counts.get(module, 0) + 1

    return lessons


def tag_lesson_with_function(level: str, unit: Dict[str, Any], lesson: Dict[str, Any]) -> Dict[str, Any]:
    topic = derive_lesson_topic(unit, lesson)
    profile = CEFR_LEVEL_PROFILES.get(level, CEFR_LEVEL_PROFILES["A1"])
    scenario_head = _en(unit.get("description")) or _en(unit.get("title"))
    scenario_tail = _en(lesson.get("description")) or _en(lesson.get("title")) or "lesson"
    return {
        **lesson,
        "objectives": build_lesson_objectives(level, unit, lesson),
        "communicativeFocus": {
            "function": f"{profile['interaction']} on {topic}",
            "discourseSkills": profile["discourseSkills"],
            "scenario": f"{scenario_head}: {scenario_tail}",
        },
    }


def _milestone(level: str, sub_level: str, unit: Dict[str, Any]) -> Dict[str, Any]:
    profile = CEFR_LEVEL_PROFILES.get(level) or {}
    quiz = next((lesson for lesson in unit.get("lessons") or [] if lesson.get("isFinalQuiz")), None)
    passing = ((quiz or {}).get("quizConfig") or {}).get("passingScore") or "target"
    return {
        "title": f"{sub_level} milestone",
        "summary": f"Checkpoint for {sub_level} to verify readiness before advancing to the next sub-stage.",
        "checks": [
            f"Completed {_en(unit.get('title')) or 'unit'} quiz with {passing} passing score target.",
            f"Can {profile.get('interaction', 'interact in everyday situations')} "
            f"using the themes from this segment.",
            f"Demonstrates {profile.get('accuracy', 'steady control')} across {sub_level} topics.",
        ],
    }


def assign_sub_levels(units_by_level: Dict[str, List[Dict[str, Any]]]) -> Dict[str, List[Dict[str, Any]]]:
    """Split each level's units into X.1/X.2/X.3 stages; the last unit of each stage is a milestone"""
    staged = copy.deepcopy(units_by_level)

    for level, units in staged.items():
        stages = SUB_LEVEL_SEGMENTS.get(level, [level])
        chunk = max(1, math.ceil(len(units) / len(stages)))
        updated = []
        for index, unit in enumerate(units):
            sub_level = stages[min(index // chunk, len(stages) - 1)]
            is_milestone = index == len(units) - 1 or (index + 1) % chunk == 0
            unit = {**unit, "subLevel": sub_level}
            if is_milestone:
                unit["milestone"] = _milestone(level, sub_level, unit)
            updated.append(unit)
        staged[level] = updated

    return staged


def apply_cefr_scaffolding(units_by_level: Dict[str, List[Dict[str, Any]]]) -> Dict[str, List[Dict[str, Any]]]:
    """Full pipeline: sub-levels, supplemental lessons, objectives, advanced tasks, mode balancing"""
    staged = assign_sub_levels(units_by_level)

    for level, units in staged.items():
        profile = CEFR_LEVEL_PROFILES.get(level) or {}
        scaffolded = []
        for unit in units:
            lessons = [
                normalize_lesson_modes(
                    unit,
                    append_advanced_modes(level, tag_lesson_with_function(level, unit, lesson), unit),
                )
                for lesson in add_supplemental_lessons(level, unit)
            ]
            scaffolded.append({
                **unit,
                "communicativeFunctions": [
                    f"Functional focus: {profile.get('interaction', 'interaction')}.",
                    f"Discourse skills: {', '.join(profile.get('discourseSkills', []))}.",
                ],
                "lessons": ensure_unit_module_coverage(unit, lessons),
            })
        staged[level] = scaffolded
        logger.debug(f"Scaffolded {len(scaffolded)} units for {level}")

    return staged
