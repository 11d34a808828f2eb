# nosabos/content/skill_tree.py - Lazy skill tree loading and lesson status helpers

import logging
import re
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from nosabos.content.cefr import CEFR_LEVELS, lessons_for_language
from nosabos.content.levels.a1 import SKILL_TREE_A1
from nosabos.content.levels.a2 import SKILL_TREE_A2
from nosabos.content.levels.b1 import SKILL_TREE_B1
from nosabos.content.levels.b2 import SKILL_TREE_B2
from nosabos.content.levels.c1 import SKILL_TREE_C1
from nosabos.content.levels.c2 import SKILL_TREE_C2
from nosabos.content.scaffolding import apply_cefr_scaffolding

logger = logging.getLogger(__name__)


class SkillStatus(str, Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


LEVEL_SOURCES: Dict[str, Callable[[], List[Dict[str, Any]]]] = {
    "A1": lambda: SKILL_TREE_A1,
    "A2": lambda: SKILL_TREE_A2,
    "B1": lambda: SKILL_TREE_B1,
    "B2": lambda: SKILL_TREE_B2,
    "C1": lambda: SKILL_TREE_C1,
    "C2": lambda: SKILL_TREE_C2,
}

_LESSON_LEVEL = re.compile(r"lesson-([a-z]\d+)", re.IGNORECASE)


def _language(user_progress: Optional[Dict[str, Any]], target_lang: Optional[str] = None) -> str:
    user_progress = user_progress or {}
    return target_lang or user_progress.get("targetLang") or user_progress.get("language") or "es"


def get_levels_to_load(user_progress: Optional[Dict[str, Any]] = None,
                       target_lang: Optional[str] = None) -> List[str]:
    """Highest level the learner has touched in a language plus the one after it"""
    lessons = lessons_for_language(user_progress, _language(user_progress, target_lang))

    highest = "A1"
    for lesson_id in lessons:
        match = _LESSON_LEVEL.search(lesson_id)
        if not match:
            continue
        level = match.group(1).upper()
        if level in CEFR_LEVELS and CEFR_LEVELS.index(level) > CEFR_LEVELS.index(highest):
            highest = level

    index = CEFR_LEVELS.index(highest)
    levels = [highest]
    if index < len(CEFR_LEVELS) - 1:
        levels.append(CEFR_LEVELS[index + 1])
    return levels


class SkillTreeLoader:
    """Loads skill tree units per CEFR level on first use and keeps them cached.

    When a cache manager is supplied, scaffolded levels are also shared through it
    so other workers skip the scaffolding pass.
    """

    def __init__(self, cache_manager=None, scaffold: bool = True):
        self.cache_manager = cache_manager
        self.scaffold = scaffold
        self._cache: Dict[str, List[Dict[str, Any]]] = {}

    async def load_level(self, level: str) -> List[Dict[str, Any]]:
        if level in self._cache:
            return self._cache[level]

        source = LEVEL_SOURCES.get(level)
        if not source:
            logger.warning(f"No skill tree loader for level {level}")
            return []

        units = None
        if self.cache_manager:
            units = await self.cache_manager.get_skill_tree(level)

        if units is None:
            units = source()
            if self.scaffold:
                units = apply_cefr_scaffolding({level: units})[level]
            if self.cache_manager:
                await self.cache_manager.set_skill_tree(level, units)

        self._cache[level] = units
        logger.info(f"📚 Loaded skill tree for {level}: {len(units)} units")
        return units

    async def load_levels(self, levels: List[str]) -> List[Dict[str, Any]]:
        units: List[Dict[str, Any]] = []
        for level in levels:
            units.extend(await self.load_level(level))
        return units

    async def load_relevant(self, user_progress: Optional[Dict[str, Any]] = None,
                            target_lang: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self.load_levels(get_levels_to_load(user_progress, target_lang))

    async def load_all(self) -> List[Dict[str, Any]]:
        return await self.load_levels(CEFR_LEVELS)

    def clear_cache(self):
        self._cache.clear()

    def cache_stats(self) -> Dict[str, Any]:
        cached_levels = list(self._cache.keys())
        return {
            "cachedLevels": cached_levels,
            "cachedCount": sum(len(self._cache[level]) for level in cached_levels),
            "totalLevels": len(CEFR_LEVELS),
        }


# ==================== PROGRESS HELPERS ====================

def initialize_progress() -> Dict[str, Any]:
    """Progress block for a brand new user"""
    return {
        "totalXp": 0,
        "languageXp": {},
        "languageLessons": {},
        "currentUnit": None,
        "currentLesson": None,
        "lessons": {},
        "units": {},
        "lastActiveAt": datetime.utcnow().isoformat(),
    }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def get_language_xp(progress: Optional[Dict[str, Any]], target_lang: Optional[str] = None) -> int:
    """XP for one language; falls back to totalXp only for progress saved before per-language XP existed"""
    if not progress:
        return 0
    lang = target_lang or progress.get("targetLang") or "es"
    xp_map = progress.get("languageXp")

    if isinstance(xp_map, dict):
        value = xp_map.get(lang)
        return value if _is_number(value) else 0

    total = progress.get("totalXp")
    return total if _is_number(total) else 0


def _lesson_progress(user_progress: Dict[str, Any], lesson_id: str, lang: str) -> Dict[str, Any]:
    by_lang = ((user_progress.get("languageLessons") or {}).get(lang) or {}).get(lesson_id)
    return by_lang or (user_progress.get("lessons") or {}).get(lesson_id) or {}


def get_lesson_status(user_progress: Optional[Dict[str, Any]], lesson: Dict[str, Any],
                      target_lang: Optional[str] = None) -> SkillStatus:
    user_progress = user_progress or {}
    lang = _language(user_progress, target_lang)
    status = _lesson_progress(user_progress, lesson["id"], lang).get("status")

    if status == SkillStatus.COMPLETED.value:
        return SkillStatus.COMPLETED
    if status == SkillStatus.IN_PROGRESS.value:
        return SkillStatus.IN_PROGRESS

    if get_language_xp(user_progress, lang) >= (lesson.get("xpRequired") or 0):
        return SkillStatus.AVAILABLE
    return SkillStatus.LOCKED


def find_next_lesson(units: List[Dict[str, Any]], user_progress: Optional[Dict[str, Any]],
                     target_lang: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """First lesson that is in progress or available, in tree order"""
    for unit in units:
        for lesson in unit.get("lessons") or []:
            status = get_lesson_status(user_progress, lesson, target_lang)
            if status in (SkillStatus.IN_PROGRESS, SkillStatus.AVAILABLE):
                return {"lesson": lesson, "unit": unit, "status": status.value}
    return None


def calculate_level_completion(units: List[Dict[str, Any]], user_progress: Optional[Dict[str, Any]],
                               target_lang: Optional[str] = None) -> float:
    if not units:
        return 0
    lessons = lessons_for_language(user_progress, _language(user_progress, target_lang))
    total = sum(len(unit.get("lessons") or []) for unit in units)
    completed = sum(
        1 for unit in units for lesson in unit.get("lessons") or []
        if (lessons.get(lesson["id"]) or {}).get("status") == SkillStatus.COMPLETED.value
    )
    return completed / total * 100 if total > 0 else 0


def get_unit_total_xp(unit: Dict[str, Any]) -> int:
    return sum(lesson.get("xpReward") or 0 for lesson in unit.get("lessons") or [])


def get_unit_progress(unit: Dict[str, Any], user_progress: Optional[Dict[str, Any]],
                      target_lang: Optional[str] = None) -> float:
    unit_lessons = unit.get("lessons") or []
    if not unit_lessons:
        return 0
    lessons = lessons_for_language(user_progress, _language(user_progress, target_lang))
    completed = [
        lesson for lesson in unit_lessons
        if (lessons.get(lesson["id"]) or {}).get("status") == SkillStatus.COMPLETED.value
    ]
    return len(completed) / len(unit_lessons) * 100
