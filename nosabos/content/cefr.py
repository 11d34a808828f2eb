# nosabos/content/cefr.py - CEFR level descriptors and completion math

import re
from typing import Any, Dict, Optional

from nosabos.utils.text import round_half_up

CEFR_LEVELS = ["Pre-A1", "A1", "A2", "B1", "B2", "C1", "C2"]
LOADABLE_LEVELS = ["A1", "A2", "B1", "B2", "C1", "C2"]

# Lessons per level in the full curriculum; used as the completion denominator
LESSON_COUNTS = {
    "A1": 77,
    "A2": 72,
    "B1": 60,
    "B2": 48,
    "C1": 40,
    "C2": 32,
}

_LEVEL_FROM_ID = re.compile(r"(?:lesson|unit)-(?:pre-)?(a1|a2|b1|b2|c1|c2)", re.IGNORECASE)

CEFR_DESCRIPTIONS: Dict[str, Dict[str, str]] = {
    "PRE-A1": {
        "name": "Pre-A1 Foundations",
        "interaction": "Recognize and respond to ultra-common social phrases",
        "production": "Use memorized high-frequency words and short requests",
        "vocabulary": "100 most common words and phrases to start conversations",
        "grammar": "Formula chunks only (I am, this is, where is?)",
        "sentenceComplexity": "Single words or 2-4 word memorized phrases",
        "readingLevel": "Individual words and micro phrases on signs and labels",
        "listeningLevel": "Recognize familiar everyday phrases and key words",
        "culturalContext": "Basic courtesy, greetings, and simple questions",
    },
    "A1": {
        "name": "Beginner",
        "interaction": "Exchange short, formulaic turns in simple situations",
        "production": "Share personal details and immediate needs using simple phrases",
        "vocabulary": "High-frequency everyday vocabulary (500-1000 words)",
        "grammar": "Present tense, basic sentence structures, common verbs",
        "sentenceComplexity": "Simple sentences with 5-10 words, basic connectors (and, but)",
        "readingLevel": "Short, simple texts with familiar vocabulary",
        "listeningLevel": "Slow, clear speech with frequent pauses",
        "culturalContext": "Everyday situations, basic social norms",
    },
    "A2": {
        "name": "Elementary",
        "interaction": "Handle simple, routine exchanges on familiar topics",
        "production": "Describe experiences, plans, and opinions in simple terms",
        "vocabulary": "Extended basic vocabulary for routine matters (1000-2000 words)",
        "grammar": "Past and future tenses, comparatives, basic modal verbs",
        "sentenceComplexity": "Connected sentences with 8-15 words, simple transitions (then, because, so)",
        "readingLevel": "Straightforward texts on familiar subjects",
        "listeningLevel": "Clear standard speech on familiar matters",
        "culturalContext": "Common social situations, basic cultural references",
    },
    "B1": {
        "name": "Intermediate",
        "interaction": "Handle most everyday situations with reasonable fluency",
        "production": "Express opinions, narrate stories, and explain viewpoints",
        "vocabulary": "Broader vocabulary for abstract and concrete topics (2000-3500 words)",
        "grammar": "All major tenses, conditionals, passive voice, subjunctive basics",
        "sentenceComplexity": "Multi-clause sentences with 12-20 words, varied connectors (although, while, since)",
        "readingLevel": "Texts with varied language on familiar and some unfamiliar topics",
        "listeningLevel": "Standard speech at normal speed on familiar topics",
        "culturalContext": "Cultural differences, idiomatic expressions, regional variations",
    },
    "B2": {
        "name": "Upper Intermediate",
        "interaction": "Engage in extended conversations on abstract and concrete topics",
        "production": "Produce detailed texts, argue viewpoints, discuss complex ideas",
        "vocabulary": "Wide vocabulary including idioms and colloquialisms (3500-5000 words)",
        "grammar": "Complex structures, advanced conditionals, nuanced tenses, subjunctive mood",
        "sentenceComplexity": "Complex sentences with 15-25 words, sophisticated linking (nevertheless, moreover, whereas)",
        "readingLevel": "Contemporary prose, opinions, and specialized articles",
        "listeningLevel": "Extended speech, films, complex discussions at normal speed",
        "culturalContext": "Nuanced cultural references, humor, implicit meanings",
    },
    "C1": {
        "name": "Advanced",
        "interaction": "Express yourself fluently and spontaneously without searching for words",
        "production": "Produce clear, well-structured, detailed text on complex subjects",
        "vocabulary": "Broad lexical repertoire with precise expressions (5000-8000 words)",
        "grammar": "Full mastery of complex structures, stylistic variations, subtle nuances",
        "sentenceComplexity": "Sophisticated but concise sentences, advanced discourse markers",
        "goalComplexity": "Complex topics expressed clearly and concisely (max 15 words)",
        "readingLevel": "Long, complex texts, literary works, technical content",
        "listeningLevel": "Extended speech even when poorly structured or implicit",
        "culturalContext": "Deep cultural knowledge, subtle references, literary allusions",
    },
    "C2": {
        "name": "Mastery",
        "interaction": "Take part effortlessly in any conversation with native-like ease",
        "production": "Produce nuanced, precise communication appropriate to any context",
        "vocabulary": "Near-native mastery with specialized and rare terms (8000+ words)",
        "grammar": "Native-like command of all structures, registers, and styles",
        "sentenceComplexity": "Native-like sophistication while remaining clear and direct",
        "goalComplexity": "Nuanced topics expressed concisely (max 15 words)",
        "readingLevel": "All types of texts including abstract, complex, or highly colloquial",
        "listeningLevel": "Any spoken language at native speed, including accents and dialects",
        "culturalContext": "Native-level cultural competence, subtle humor, wordplay",
    },
}


def extract_cefr_level(identifier: Optional[str]) -> str:
    """'lesson-b2-3-1' -> 'B2'; pre-A1 lessons count as A1; unknown ids default to A1"""
    if not identifier or not isinstance(identifier, str):
        return "A1"
    match = _LEVEL_FROM_ID.search(identifier)
    return match.group(1).upper() if match else "A1"


def get_cefr_description(level: Optional[str]) -> Dict[str, str]:
    key = (level or "A1").upper()
    return CEFR_DESCRIPTIONS.get(key, CEFR_DESCRIPTIONS["A1"])


def get_cefr_prompt_hint(level: Optional[str]) -> str:
    """Difficulty line injected into generation prompts"""
    key = (level or "A1").upper()
    desc = get_cefr_description(key)
    goal_hint = f" Goals: {desc['goalComplexity']}." if desc.get("goalComplexity") else ""
    return (
        f"CEFR {key} ({desc['name']}): {desc['sentenceComplexity']}. "
        f"Vocabulary: {desc['vocabulary']}. Grammar: {desc['grammar']}.{goal_hint}"
    )


def lessons_for_language(user_progress: Optional[Dict[str, Any]], target_lang: str = "es") -> Dict[str, Any]:
    """Lesson entries for one language, or the legacy single-language map when there are none"""
    if not user_progress:
        return {}
    by_lang = (user_progress.get("languageLessons") or {}).get(target_lang)
    return by_lang or user_progress.get("lessons") or {}


def calculate_lesson_completion(user_progress: Optional[Dict[str, Any]], level: str, target_lang: str = "es") -> int:
    """Percentage of a level's lessons the learner has completed in one language"""
    if not user_progress or not level:
        return 0

    lessons = lessons_for_language(user_progress, target_lang)
    total = LESSON_COUNTS.get(level, 0)
    if total == 0:
        return 0

    prefix = level.lower()
    completed = sum(
        1 for lesson_id, entry in lessons.items()
        if (f"-{prefix}-" in lesson_id or f"-pre-{prefix}-" in lesson_id)
        and (entry or {}).get("status") == "completed"
    )
    return round_half_up(completed / total * 100)


def get_all_lesson_progress(user_progress: Optional[Dict[str, Any]], target_lang: str = "es") -> Dict[str, Dict[str, Any]]:
    return {
        level: {
            "percentage": calculate_lesson_completion(user_progress, level, target_lang),
            "total": LESSON_COUNTS.get(level, 0),
        }
        for level in CEFR_LEVELS
    }
