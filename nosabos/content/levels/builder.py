# nosabos/content/levels/builder.py - Shared shape of a standard four-lesson unit

from typing import Any, Dict, List, Optional, Sequence, Tuple

UNIT_COLORS = [
    "#22C55E", "#3B82F6", "#F59E0B", "#8B5CF6", "#EC4899", "#10B981", "#06B6D4",
    "#EF4444", "#F97316", "#84CC16", "#14B8A6", "#A855F7", "#DB2777", "#0EA5E9",
]

DEFAULT_QUIZ_CONFIG = {"questionsRequired": 10, "passingScore": 8}

# (title_en, title_es, xp_required, xp_reward)
LessonRow = Tuple[str, str, int, int]

# (en, es)
Text = Tuple[str, str]


def _lessons_for(unit_id: str, name_en: str, name_es: str, topic: str,
                 rows: Sequence[LessonRow], quiz_config: Dict[str, int],
                 descriptions: Optional[Sequence[Text]]) -> List[Dict[str, Any]]:
    prefix = unit_id.replace("unit-", "lesson-", 1)
    en, es = name_en.lower(), name_es.lower()
    vocab_row, practice_row, apply_row, quiz_row = rows

    lessons = [
        {
            "id": f"{prefix}-1",
            "title": {"en": vocab_row[0], "es": vocab_row[1]},
            "description": {
                "en": f"Learn key vocabulary for {en}",
                "es": f"Aprende vocabulario clave para {es}",
            },
            "xpRequired": vocab_row[2],
            "xpReward": vocab_row[3],
            "modes": ["vocabulary", "grammar"],
            "content": {
                "vocabulary": {"topic": topic},
                "grammar": {
                    "topic": f"{topic} structures",
                    "focusPoints": ["basic patterns", "common phrases"],
                },
            },
        },
        {
            "id": f"{prefix}-2",
            "title": {"en": practice_row[0], "es": practice_row[1]},
            "description": {
                "en": f"Practice {en} in conversation",
                "es": f"Practica {es} en conversación",
            },
            "xpRequired": practice_row[2],
            "xpReward": practice_row[3],
            "modes": ["realtime", "stories"],
            "content": {
                "realtime": {
                    "scenario": f"{topic} conversation",
                    "prompt": f"Practice using {topic} in real conversation",
                },
                "stories": {"topic": topic, "prompt": f"Read and discuss {topic}"},
            },
        },
        {
            "id": f"{prefix}-3",
            "title": {"en": apply_row[0], "es": apply_row[1]},
            "description": {
                "en": f"Apply {en} skills",
                "es": f"Aplica habilidades de {es}",
            },
            "xpRequired": apply_row[2],
            "xpReward": apply_row[3],
            "modes": ["reading", "realtime"],
            "content": {
                "reading": {"topic": topic, "prompt": f"Advanced {topic} content and comprehension"},
                "realtime": {"scenario": f"{topic} mastery", "prompt": f"Demonstrate mastery of {topic}"},
            },
        },
        {
            "id": f"{prefix}-quiz",
            "title": {"en": quiz_row[0], "es": quiz_row[1]},
            "description": {
                "en": f"Test your knowledge of {en}",
                "es": f"Prueba tus conocimientos de {es}",
            },
            "xpRequired": quiz_row[2],
            "xpReward": quiz_row[3],
            "modes": ["vocabulary", "grammar"],
            "isFinalQuiz": True,
            "quizConfig": dict(quiz_config),
            "content": {
                "vocabulary": {"topic": topic},
                "grammar": {"topics": [f"{topic} structures"], "focusPoints": ["comprehensive review"]},
            },
        },
    ]

    for lesson, (text_en, text_es) in zip(lessons, descriptions or []):
        lesson["description"] = {"en": text_en, "es": text_es}
    return lessons


def standard_unit(unit_id: str, index: int, title: Text, description: Text,
                  topic: str, rows: Sequence[LessonRow],
                  quiz_config: Dict[str, int] = None,
                  lesson_descriptions: Sequence[Text] = None) -> Dict[str, Any]:
    """Vocabulary, conversation, application and quiz lessons around one topic.

    Units sit two to a row on the map. ``lesson_descriptions`` replaces the
    generated descriptions of the leading lessons, in order.
    """
    return {
        "id": unit_id,
        "title": {"en": title[0], "es": title[1]},
        "description": {"en": description[0], "es": description[1]},
        "color": UNIT_COLORS[index % len(UNIT_COLORS)],
        "position": {"row": index // 2, "offset": index % 2},
        "lessons": _lessons_for(unit_id, title[0], title[1], topic, rows,
                                quiz_config or DEFAULT_QUIZ_CONFIG, lesson_descriptions),
    }
