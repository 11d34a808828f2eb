# nosabos/utils/text.py - Answer normalization and choice helpers

import json
import math
import random
import re
import unicodedata
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s']")
_WHITESPACE = re.compile(r"\s+")
_BLANK = re.compile(r"___")

FALLBACK_DISTRACTORS = {
    "es": ["y", "o", "pero", "muy", "también", "sin", "con"],
    "en": ["and", "or", "but", "very", "also", "without", "with"],
}


def norm(value: Any) -> str:
    """Lowercase, strip diacritics and punctuation (apostrophes survive), collapse spaces"""
    text = str(value if value is not None else "").lower()
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    stripped = _NON_WORD.sub("", stripped)
    return _WHITESPACE.sub(" ", stripped).strip()


def ensure_answer_in_choices(choices: List[str], answer: Optional[str]) -> Tuple[List[str], str]:
    """Guarantee the answer is one of the choices.

    When a choice already matches the answer after normalization the choices
    come back untouched and that exact choice becomes the canonical answer.
    Otherwise a random slot is overwritten with the answer.
    """
    if not answer or not choices:
        return choices, choices[0] if choices else ""

    target = norm(answer)
    for choice in choices:
        if norm(choice) == target:
            return choices, choice

    updated = list(choices)
    updated[random.randrange(len(updated))] = str(answer)
    return updated, str(answer)


def ensure_answers_in_choices(choices: List[str], answers: Optional[Sequence[str]]) -> Tuple[List[str], List[str]]:
    """Multi-answer variant of ensure_answer_in_choices"""
    if not isinstance(answers, (list, tuple)) or not choices:
        return choices, []

    updated = list(choices)
    valid: List[str] = []
    wanted = {norm(a) for a in answers}

    for answer in answers:
        found = next((c for c in updated if norm(c) == norm(answer)), None)
        if found is not None:
            valid.append(found)
            continue

        taken = {norm(v) for v in valid}
        slot = next(
            (i for i, c in enumerate(updated) if norm(c) not in taken and norm(c) not in wanted),
            None,
        )
        if slot is not None:
            updated[slot] = str(answer)
            valid.append(str(answer))

    return updated, valid


def normalize_map(mapping: Any, length: int) -> List[int]:
    """Coerce a match answer map to 0-based indices, or [] when it is unusable"""
    if not isinstance(mapping, (list, tuple)) or not mapping:
        return []

    try:
        values = [int(v) for v in mapping]
    except (TypeError, ValueError):
        return []

    low, high = min(values), max(values)
    if low == 0 and high == length - 1:
        return values
    if low == 1 and high == length:
        return [v - 1 for v in values]
    return []


def safe_parse_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse JSON, falling back to the outermost {...} slice"""
    if not text:
        return None
    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        try:
            parsed = json.loads(text[start:end + 1])
            return parsed if isinstance(parsed, dict) else None
        except ValueError:
            logger.debug(f"Unparseable JSON payload: {text[:80]}")
    return None


def count_blanks(text: str) -> int:
    return len(_BLANK.findall(text or ""))


def stable_hash(text: str) -> int:
    value = 0
    for ch in text or "":
        value = (value * 31 + ord(ch)) & 0xFFFFFFFF
    return value


def should_use_drag_variant(question: str, choices: Sequence[str], answers: Sequence[str] = ()) -> bool:
    """Deterministically pick the drag-and-drop layout for about half of blank questions"""
    if not question or not choices:
        return False
    if not count_blanks(question):
        return False
    signature = f"{question}||{'|'.join(choices)}||{'|'.join(answers)}"
    return stable_hash(signature) % 4 < 2


def build_fallback_distractors(words: Sequence[str], answer_lang: str = "en") -> List[str]:
    """Up to four filler words that are not already in the sentence"""
    existing = {norm(w) for w in words}
    pool = FALLBACK_DISTRACTORS["es"] if answer_lang == "es" else FALLBACK_DISTRACTORS["en"]
    picks = []
    for option in pool:
        if norm(option) not in existing:
            picks.append(option)
        if len(picks) >= 4:
            break
    return picks


def shuffle(items: Sequence[Any]) -> List[Any]:
    result = list(items)
    random.shuffle(result)
    return result


def parse_yes_no(verdict: Optional[str]) -> bool:
    """A judge verdict is affirmative when its trimmed text starts with Y"""
    return (verdict or "").strip().upper().startswith("Y")


def round_half_up(value: float) -> int:
    """Round halves upward, matching the client's percentage math"""
    return int(math.floor(value + 0.5))
