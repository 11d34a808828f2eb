# nosabos/exercises/grading.py - Answer checking for generated exercises

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence

from nosabos.exercises import prompts
from nosabos.exercises.speech import evaluate_attempt_strict, metrics_from_pcm16, speech_reason_tips
from nosabos.utils.audio import SPEECH_SAMPLE_RATE
from nosabos.utils.text import norm
from nosabos.utils.word_bank import WordBank

logger = logging.getLogger(__name__)

XP_REWARDS = {
    "fill": 5,
    "mc": 5,
    "ma": 6,
    "match": 6,
    "translate": 6,
    "repeat": 6,
    "speak": 6,
}


def user_words(answer: Dict[str, Any]) -> List[str]:
    """Words the learner placed, from a plain list or a serialized word bank"""
    if isinstance(answer.get("words"), list):
        return [str(w) for w in answer["words"]]
    if isinstance(answer.get("wordBank"), dict):
        return WordBank.from_dict(answer["wordBank"]).user_answer()
    return []


def _index(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"Invalid match index: {value!r}")
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid match index: {value!r}")


def user_pairs(answer: Dict[str, Any]) -> List[List[int]]:
    """Match answers as [left, right] pairs; ``slots[i]`` is the right index placed next to left item i"""
    if "pairs" in answer:
        pairs = answer["pairs"]
        if not isinstance(pairs, list) or not all(isinstance(p, (list, tuple)) and len(p) == 2 for p in pairs):
            raise ValueError("pairs must be a list of [left, right] index pairs")
        return [[_index(li), _index(ri)] for li, ri in pairs]

    slots = answer.get("slots") or []
    if not isinstance(slots, list):
        raise ValueError("slots must be a list of right-hand indexes")
    return [[li, _index(ri)] for li, ri in enumerate(slots) if ri is not None]


def words_match(expected: Sequence[str], given: Sequence[str]) -> bool:
    return [norm(w) for w in expected] == [norm(w) for w in given]


def map_matches(answer_map: Sequence[int], pairs: Sequence[Sequence[int]]) -> bool:
    if not answer_map or len(pairs) != len(answer_map):
        return False
    placed = dict((li, ri) for li, ri in pairs)
    return all(placed.get(li) == ri for li, ri in enumerate(answer_map))


async def _judge(llm_manager, prompt: str) -> bool:
    if llm_manager is None:
        return False
    return await llm_manager.judge(prompt)


async def grade(exercise: Dict[str, Any], answer: Dict[str, Any], llm_manager=None,
                final_quiz: bool = False) -> Dict[str, Any]:
    """Grade one submission.

    Deterministic checks run first; the YES/NO judge only sees answers they
    could not confirm. Final quiz questions are graded but award no XP.
    """
    kind = exercise.get("kind")
    if kind not in XP_REWARDS:
        raise ValueError(f"Unknown exercise kind: {kind}")

    answer = answer or {}
    target_lang = exercise.get("targetLang", "es")
    method = "exact"
    evaluation: Optional[Dict[str, Any]] = None

    if kind == "fill":
        method = "judge"
        correct = await _judge(llm_manager, prompts.build_fill_judge_prompt(
            target_lang, exercise.get("question", ""), answer.get("answer", ""), exercise.get("hint", "")))

    elif kind == "mc":
        choice = str(answer.get("choice") or "")
        correct = bool(choice) and norm(choice) == norm(exercise.get("answer"))
        if not correct and choice:
            method = "judge"
            correct = await _judge(llm_manager, prompts.build_mc_judge_prompt(
                target_lang, exercise.get("question", ""), exercise.get("choices") or [], choice,
                exercise.get("hint", "")))

    elif kind == "ma":
        picks = [str(c) for c in answer.get("choices") or []]
        correct = bool(picks) and {norm(c) for c in picks} == {norm(a) for a in exercise.get("answers") or []}
        if not correct and picks:
            method = "judge"
            correct = await _judge(llm_manager, prompts.build_ma_judge_prompt(
                target_lang, exercise.get("question", ""), exercise.get("choices") or [], picks,
                exercise.get("hint", "")))

    elif kind == "match":
        correct = map_matches(exercise.get("answerMap") or [], user_pairs(answer))

    elif kind in ("translate", "repeat"):
        given = user_words(answer)
        expected = exercise.get("correctWords") or []
        correct = bool(given) and words_match(expected, given)
        if not correct and given:
            method = "judge"
            correct = await _judge(llm_manager, prompts.build_translate_judge_prompt(
                exercise.get("sourceLang", target_lang), exercise.get("answerLang", "en"),
                exercise.get("sentence", ""), expected, given))

    else:
        # Always scored here; a client-side verdict is never trusted
        method = "speech"
        metrics = answer.get("audioMetrics")
        if answer.get("pcm16"):
            metrics = metrics_from_pcm16(
                base64.b64decode(answer["pcm16"]), int(answer.get("sampleRate") or SPEECH_SAMPLE_RATE))
        evaluation = evaluate_attempt_strict(
            recognized_text=answer.get("recognizedText", ""),
            target_sentence=exercise.get("target", ""),
            lang=target_lang,
            confidence=answer.get("confidence") or 0,
            audio_metrics=metrics if isinstance(metrics, dict) else None,
        )
        correct = bool(evaluation.get("pass"))
        if not correct:
            evaluation = {**evaluation, "tips": speech_reason_tips(
                evaluation.get("reasons") or [], answer.get("uiLang", "en"),
                prompts.lang_name(target_lang, prompts.LANG_NAMES))}

    xp = XP_REWARDS[kind] if correct and not final_quiz else 0
    logger.info(f"Graded {kind} exercise {exercise.get('id')}: {'✅' if correct else '❌'} ({method}, +{xp} XP)")

    result = {
        "exerciseId": exercise.get("id"),
        "kind": kind,
        "correct": correct,
        "method": method,
        "xp": xp,
    }
    if evaluation is not None:
        result["evaluation"] = evaluation
    return result
