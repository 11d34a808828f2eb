# nosabos/exercises/generator.py - Stream-first exercise generation with fallbacks

import logging
import random
import uuid
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from nosabos.exercises import prompts
from nosabos.exercises.prompts import SUPPORT_TO_TARGET, TARGET_TO_SUPPORT
from nosabos.utils.text import (
    build_fallback_distractors,
    ensure_answer_in_choices,
    ensure_answers_in_choices,
    norm,
    normalize_map,
    safe_parse_json,
    should_use_drag_variant,
    shuffle,
)
from nosabos.utils.word_bank import WordBank

logger = logging.getLogger(__name__)

EXERCISE_KINDS = ("fill", "mc", "ma", "speak", "match", "translate", "repeat")

STREAM_TYPES = {
    "fill": "verb_fill",
    "mc": "verb_mc",
    "ma": "verb_ma",
    "speak": "vocab_speak",
    "match": "verb_match",
    "translate": "translate",
    "repeat": "translate",
}

# Repeat-what-you-hear sub-modes
LISTENING_TARGET = "listening-target"
TARGET_TTS_SUPPORT_BANK = "target-tts-support-bank"
SUPPORT_TTS_TARGET_BANK = "support-tts-target-bank"

# Fields a learner must not see before answering
HIDDEN_FIELDS = ("answer", "answers", "answerMap", "map", "correctWords")


class ExerciseContext:
    """Everything a single generation needs to know about the learner"""

    def __init__(self, kind: str, cefr_level: str = "A1", target_lang: str = "es", support_lang: str = "en",
                 ui_lang: str = "en", show_translations: bool = True, recent_good: Sequence[Any] = (),
                 lesson_content: Dict[str, Any] = None, direction: str = None, repeat_mode: str = None):
        if kind not in EXERCISE_KINDS:
            raise ValueError(f"Unknown exercise kind: {kind}")

        self.kind = kind
        self.cefr_level = (cefr_level or "A1").upper()
        self.target_lang = target_lang or "es"
        self.support_lang = support_lang or "en"
        self.ui_lang = ui_lang or "en"
        self.support_code = prompts.resolve_support_lang(self.support_lang, self.ui_lang)
        self.show_translations = show_translations
        self.recent_good = list(recent_good or [])
        self.lesson_content = lesson_content

        self.repeat_mode = None
        if kind == "repeat":
            self.repeat_mode = repeat_mode or _pick_repeat_mode()
            direction = _repeat_direction(self.repeat_mode)
        self.direction = direction or random.choice([TARGET_TO_SUPPORT, SUPPORT_TO_TARGET])

    @property
    def answer_lang(self) -> str:
        return self.support_code if self.direction == TARGET_TO_SUPPORT else self.target_lang

    @property
    def source_lang(self) -> str:
        return self.target_lang if self.direction == TARGET_TO_SUPPORT else self.support_code

    @property
    def tts_lang(self) -> str:
        if self.kind == "repeat":
            if self.repeat_mode in (TARGET_TTS_SUPPORT_BANK, LISTENING_TARGET):
                return self.target_lang
            return self.support_code
        return self.target_lang if self.direction == TARGET_TO_SUPPORT else self.support_code

    def prompt_kwargs(self) -> Dict[str, Any]:
        return {
            "cefr_level": self.cefr_level,
            "target_lang": self.target_lang,
            "support_lang": self.support_lang,
            "ui_lang": self.ui_lang,
            "recent_good": self.recent_good,
            "lesson_content": self.lesson_content,
        }


def _pick_repeat_mode() -> str:
    if random.random() < 0.5:
        return LISTENING_TARGET
    return TARGET_TTS_SUPPORT_BANK if random.random() < 0.5 else SUPPORT_TTS_TARGET_BANK


def _repeat_direction(repeat_mode: str) -> str:
    return TARGET_TO_SUPPORT if repeat_mode == TARGET_TTS_SUPPORT_BANK else SUPPORT_TO_TARGET


def _strings(values: Any) -> List[str]:
    return [str(v) for v in values] if isinstance(values, list) else []


def _unique_by_norm(values: Sequence[Any]) -> List[str]:
    seen = set()
    out = []
    for value in values:
        key = norm(value)
        if key not in seen:
            seen.add(key)
            out.append(str(value))
    return out


def sanitize_ma(parsed: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Multiple-answer payload with 4-6 unique choices containing 2-3 unique answers, or None"""
    if (
        not parsed
        or not isinstance(parsed.get("question"), str)
        or not isinstance(parsed.get("choices"), list)
        or not isinstance(parsed.get("answers"), list)
    ):
        return None

    raw_choices = _unique_by_norm(parsed["choices"])[:6]
    raw_answers = _unique_by_norm(parsed["answers"])
    if len(raw_choices) < 4 or not 2 <= len(raw_answers) <= 3:
        return None

    choices, answers = ensure_answers_in_choices(raw_choices, raw_answers)
    return {
        "question": parsed["question"].strip(),
        "hint": str(parsed.get("hint") or "").strip(),
        "choices": choices,
        "answers": answers,
        "translation": str(parsed.get("translation") or "").strip(),
    }


def public_view(exercise: Dict[str, Any]) -> Dict[str, Any]:
    """Exercise as sent to the learner, without its answer key"""
    return {key: value for key, value in exercise.items() if key not in HIDDEN_FIELDS}


def public_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """Stream event with any answer key stripped from its payload"""
    if event["type"] == "exercise":
        return {**event, "exercise": public_view(event["exercise"])}
    if event["type"] == "phase":
        return {**event, "data": public_view(event.get("data") or {})}
    return event


# ==================== FIXED EXERCISES ====================

def fixed_fill(ctx: ExerciseContext) -> Dict[str, Any]:
    return {
        "question": "Complete: She felt deep ___ after her mistake.",
        "hint": "regret/guilt (noun)",
        "translation": "Completa: Sintió un profundo ___ tras su error."
        if ctx.show_translations and ctx.support_code == "es" else "",
    }


def fixed_mc(ctx: ExerciseContext) -> Dict[str, Any]:
    return {
        "question": "Choose the best synonym for “quick”.",
        "hint": "synonym",
        "choices": ["rapid", "slow", "late", "sleepy"],
        "answer": "rapid",
        "translation": "Elige el mejor sinónimo de “quick”."
        if ctx.show_translations and ctx.support_code == "es" else "",
    }


def fixed_ma(ctx: ExerciseContext) -> Dict[str, Any]:
    return {
        "question": "Select all synonyms of “angry”.",
        "hint": "synonyms",
        "choices": ["furious", "irate", "calm", "content", "mad"],
        "answers": ["furious", "irate", "mad"],
        "translation": "Selecciona todos los sinónimos de “angry”."
        if ctx.show_translations and ctx.support_code == "es" else "",
    }


def fixed_match(ctx: ExerciseContext) -> Dict[str, Any]:
    return {
        "stem": "Match words to their definitions.",
        "left": ["rapid", "generous", "fragile"],
        "right": ["quick", "kind in giving", "easily broken"],
        "hint": "synonym match",
        "answerMap": [0, 1, 2],
    }


def fixed_translate(ctx: ExerciseContext) -> Dict[str, Any]:
    spanish = {
        "sentence": "El gato es negro.",
        "correctWords": ["El", "gato", "es", "negro"],
        "distractors": ["perro", "rojo", "grande"],
    }
    english = {
        "sentence": "The cat is black.",
        "correctWords": ["The", "cat", "is", "black"],
        "distractors": ["dog", "red", "big"],
    }
    target_to_support = ctx.direction == TARGET_TO_SUPPORT

    if ctx.target_lang == "es":
        source, answer = (spanish, english) if target_to_support else (english, spanish)
        hint = "Colors and animals vocabulary"
    else:
        source, answer = (english, spanish) if target_to_support else (spanish, english)
        hint = "Vocabulario de colores y animales"

    return {
        "sentence": source["sentence"],
        "correctWords": list(answer["correctWords"]),
        "distractors": list(answer["distractors"]),
        "hint": hint,
    }


def fixed_speak(ctx: ExerciseContext) -> Dict[str, Any]:
    options = ["repeat", "complete"]
    if prompts.support_differs(ctx.support_code, ctx.target_lang):
        options.insert(1, "translate")
    variant = random.choice(options)
    es_support = ctx.support_code == "es"
    lang = ctx.target_lang if ctx.target_lang in ("es", "nah") else "en"

    if variant == "translate":
        support_word = "bosque" if es_support else "forest"
        return {
            "variant": variant,
            "display": support_word,
            "target": {"es": "bosque", "nah": "kwawitl"}.get(lang, "forest"),
            "prompt": {
                "es": f"Traduce en voz alta: {support_word}.",
                "nah": f"Kijtoa tlen nechicoliz: {support_word}.",
            }.get(lang, f"Translate aloud: {support_word}."),
            "hint": "Di la versión en español" if es_support else "Say it in the target language",
            "translation": support_word if ctx.show_translations else "",
        }

    if variant == "complete":
        return {
            "variant": variant,
            "display": {
                "es": "Completa: La niña ___ una canción.",
                "nah": "Tlatzotzona: Pilli ___ tlahkuiloa.",
            }.get(lang, "Complete: The child ___ a song."),
            "target": {
                "es": "La niña canta una canción.",
                "nah": "Pilli tlahkuiloa tlatzotzontli.",
            }.get(lang, "The child sings a song."),
            "prompt": {
                "es": "Di la oración completa con la palabra que falta.",
                "nah": "Kijtoa nochi tlahtolli tlen mokpano.",
            }.get(lang, "Say the full sentence with the missing word."),
            "hint": "El verbo es 'cantar'" if es_support else "The verb is 'to sing'",
            "translation": ("La niña canta una canción." if es_support else "The girl sings a song.")
            if ctx.show_translations else "",
        }

    word = {"es": "sonrisa", "nah": "yolpaki"}.get(lang, "harmony")
    return {
        "variant": "repeat",
        "display": word,
        "target": word,
        "prompt": {
            "es": "Di la palabra claramente: sonrisa.",
            "nah": "Pronuncia la palabra con calma: yolpaki.",
        }.get(lang, "Say this word out loud: harmony."),
        "hint": "significa felicidad" if es_support else "means happiness",
        "translation": word if ctx.show_translations else "",
    }


FIXED_BUILDERS = {
    "fill": fixed_fill,
    "mc": fixed_mc,
    "ma": fixed_ma,
    "speak": fixed_speak,
    "match": fixed_match,
    "translate": fixed_translate,
    "repeat": fixed_translate,
}


class ExerciseGenerator:
    """Builds exercises from a Gemini NDJSON stream, falling back to the Responses proxy and then to fixed content.

    ``stream()`` yields ``phase`` events as the model emits them followed by one
    ``exercise`` event; ``generate()`` returns just the finished exercise.
    Finished exercises are cached under their id so a later submission can be
    graded against the answer key.
    """

    def __init__(self, llm_manager, cache_manager=None):
        self.llm = llm_manager
        self.cache = cache_manager

    async def generate(self, kind: str, **options) -> Dict[str, Any]:
        exercise = None
        async for event in self.stream(kind, **options):
            if event["type"] == "exercise":
                exercise = event["exercise"]
        return exercise

    async def stream(self, kind: str, **options) -> AsyncIterator[Dict[str, Any]]:
        ctx = ExerciseContext(kind, **options)
        state: Dict[str, Any] = {}
        body = None
        source = "stream"

        if self.llm.gemini_available:
            try:
                async for obj in self.llm.stream_objects(self._stream_prompt(ctx)):
                    if obj.get("type") == "done":
                        break
                    if self._absorb(ctx, state, obj):
                        yield {"type": "phase", "kind": kind, "phase": obj.get("phase") or "full", "data": obj}
                body = self._finish(ctx, state)
                if body is None:
                    logger.warning(f"Incomplete {kind} stream: {sorted(state.keys())}")
            except Exception as e:
                logger.error(f"Streaming {kind} exercise failed: {e}")

        if body is None:
            source = "responses"
            body = await self._responses_fallback(ctx)
        if body is None:
            source = "fixed"
            body = FIXED_BUILDERS[kind](ctx)

        exercise = self._complete(ctx, body, source)
        if self.cache:
            await self.cache.set_exercise(exercise["id"], exercise)
        logger.info(f"🔄 Generated {kind} exercise {exercise['id']} ({source})")
        yield {"type": "exercise", "exercise": exercise}

    # ==================== STREAM ASSEMBLY ====================

    def _stream_prompt(self, ctx: ExerciseContext) -> str:
        kwargs = ctx.prompt_kwargs()
        if ctx.kind == "fill":
            return prompts.build_fill_stream_prompt(show_translations=ctx.show_translations, **kwargs)
        if ctx.kind == "mc":
            return prompts.build_mc_stream_prompt(show_translations=ctx.show_translations, **kwargs)
        if ctx.kind == "ma":
            return prompts.build_ma_stream_prompt(show_translations=ctx.show_translations, **kwargs)
        if ctx.kind == "speak":
            return prompts.build_speak_stream_prompt(show_translations=ctx.show_translations, **kwargs)
        if ctx.kind == "match":
            return prompts.build_match_stream_prompt(**kwargs)
        return prompts.build_translate_stream_prompt(direction=ctx.direction, **kwargs)

    def _absorb(self, ctx: ExerciseContext, state: Dict[str, Any], obj: Dict[str, Any]) -> bool:
        """Fold one streamed object into the partial exercise; False when it is not ours"""
        if obj.get("type") != STREAM_TYPES[ctx.kind]:
            return False
        phase = obj.get("phase")

        if ctx.kind == "match":
            for key in ("stem", "hint"):
                if isinstance(obj.get(key), str):
                    state[key] = obj[key].strip()
            for key in ("left", "right"):
                if isinstance(obj.get(key), list):
                    state[key] = _strings(obj[key])
            if "map" in obj:
                state["map"] = obj["map"]
            return True

        if ctx.kind in ("translate", "repeat"):
            if phase == "q" and isinstance(obj.get("sentence"), str):
                state["sentence"] = obj["sentence"].strip()
            elif phase == "answer":
                state["correctWords"] = _strings(obj.get("correctWords"))
                state["distractors"] = _strings(obj.get("distractors"))
            elif phase == "meta" and obj.get("hint"):
                state["hint"] = str(obj["hint"]).strip()
            return True

        if ctx.kind == "speak":
            if phase == "prompt":
                for key in ("prompt", "target", "display"):
                    if isinstance(obj.get(key), str):
                        state[key] = obj[key].strip()
                if isinstance(obj.get("variant"), str):
                    state["variant"] = prompts.normalize_speak_variant(obj["variant"])
            elif phase == "meta":
                for key in ("hint", "translation"):
                    if isinstance(obj.get(key), str):
                        state[key] = obj[key]
            return True

        if phase == "q" and isinstance(obj.get("question"), str):
            state["question"] = obj["question"].strip()
        elif phase == "choices" and isinstance(obj.get("choices"), list):
            state["choices"] = _strings(obj["choices"])[:4 if ctx.kind == "mc" else 6]
        elif phase == "meta":
            for key in ("hint", "translation"):
                if isinstance(obj.get(key), str):
                    state[key] = obj[key].strip()
            if ctx.kind == "mc" and obj.get("answer") is not None:
                state["answer"] = str(obj["answer"])
            if ctx.kind == "ma" and isinstance(obj.get("answers"), list):
                state["answers"] = _strings(obj["answers"])
        return True

    def _finish(self, ctx: ExerciseContext, state: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        kind = ctx.kind

        if kind == "fill":
            if not state.get("question"):
                return None
            return {
                "question": state["question"],
                "hint": state.get("hint", ""),
                "translation": state.get("translation", ""),
            }

        if kind == "mc":
            if not state.get("question") or len(state.get("choices") or []) < 3:
                return None
            choices, answer = ensure_answer_in_choices(state["choices"], state.get("answer"))
            return {
                "question": state["question"],
                "hint": state.get("hint", ""),
                "choices": choices,
                "answer": answer,
                "translation": state.get("translation", ""),
            }

        if kind == "ma":
            return sanitize_ma(state)

        if kind == "speak":
            if not state.get("target"):
                return None
            return {
                "variant": state.get("variant", "repeat"),
                "display": state.get("display") or state["target"],
                "target": state["target"],
                "prompt": state.get("prompt", ""),
                "hint": state.get("hint", ""),
                "translation": state.get("translation", ""),
            }

        if kind == "match":
            return self._match_body(state)

        if not state.get("sentence") or not state.get("correctWords"):
            return None
        return {
            "sentence": state["sentence"],
            "correctWords": state["correctWords"],
            "distractors": state.get("distractors") or [],
            "hint": state.get("hint", ""),
        }

    @staticmethod
    def _match_body(parsed: Optional[Dict[str, Any]], default_stem: str = "") -> Optional[Dict[str, Any]]:
        if not parsed:
            return None
        left = _strings(parsed.get("left"))
        right = _strings(parsed.get("right"))
        if not 3 <= len(left) <= 6 or len(left) != len(right):
            return None

        answer_map = normalize_map(parsed.get("map"), len(right))
        if len(answer_map) != len(left):
            answer_map = list(range(len(left)))
        return {
            "stem": str(parsed.get("stem") or default_stem),
            "left": left,
            "right": right,
            "hint": str(parsed.get("hint") or ""),
            "answerMap": answer_map,
        }

    # ==================== FALLBACKS ====================

    async def _responses_fallback(self, ctx: ExerciseContext) -> Optional[Dict[str, Any]]:
        """Single non-stream call; None when the reply is unusable"""
        kind = ctx.kind
        if kind in ("translate", "repeat"):
            return None

        if kind == "fill":
            text = await self.llm.call_responses(
                prompts.build_fill_fallback_prompt(ctx.target_lang, ctx.support_code, ctx.show_translations))
            parts = [part.strip() for part in text.split("|||")]
            if not parts[0]:
                return None
            return {
                "question": parts[0],
                "hint": parts[1] if len(parts) > 1 else "",
                "translation": parts[2] if len(parts) > 2 else "",
            }

        if kind == "mc":
            parsed = safe_parse_json(await self.llm.call_responses(
                prompts.build_mc_fallback_prompt(ctx.target_lang, ctx.support_code, ctx.show_translations)))
            if not parsed or not parsed.get("question") or not isinstance(parsed.get("choices"), list) \
                    or len(parsed["choices"]) < 3:
                return None
            choices, answer = ensure_answer_in_choices(_strings(parsed["choices"])[:4], parsed.get("answer"))
            return {
                "question": str(parsed["question"]),
                "hint": str(parsed.get("hint") or ""),
                "choices": choices,
                "answer": answer,
                "translation": str(parsed.get("translation") or ""),
            }

        if kind == "ma":
            return sanitize_ma(safe_parse_json(await self.llm.call_responses(
                prompts.build_ma_fallback_prompt(ctx.target_lang, ctx.support_code, ctx.show_translations))))

        if kind == "match":
            parsed = safe_parse_json(await self.llm.call_responses(
                prompts.build_match_fallback_prompt(ctx.target_lang, ctx.support_code)))
            return self._match_body(parsed, default_stem="Match the words to their definitions.")

        parsed = safe_parse_json(await self.llm.call_responses(
            prompts.build_speak_fallback_prompt(ctx.target_lang, ctx.support_code, ctx.show_translations)))
        if not parsed or not isinstance(parsed.get("target"), str):
            return None
        return {
            "variant": prompts.normalize_speak_variant(parsed.get("variant")),
            "display": str(parsed.get("display") or parsed["target"]).strip(),
            "target": parsed["target"].strip(),
            "prompt": str(parsed.get("prompt") or ""),
            "hint": str(parsed.get("hint") or ""),
            "translation": str(parsed.get("translation") or ""),
        }

    # ==================== FINAL PAYLOAD ====================

    def _complete(self, ctx: ExerciseContext, body: Dict[str, Any], source: str) -> Dict[str, Any]:
        exercise = {
            "id": uuid.uuid4().hex,
            "kind": ctx.kind,
            "targetLang": ctx.target_lang,
            "supportLang": ctx.support_code,
            "cefrLevel": ctx.cefr_level,
            "source": source,
            "createdAt": datetime.utcnow().isoformat(),
            **body,
        }

        if ctx.kind in ("mc", "ma"):
            answers = [exercise["answer"]] if ctx.kind == "mc" else exercise["answers"]
            exercise["dragVariant"] = should_use_drag_variant(exercise["question"], exercise["choices"], answers)

        if ctx.kind == "match":
            exercise["bank"] = shuffle(range(len(exercise["right"])))

        if ctx.kind in ("translate", "repeat"):
            distractors = exercise["distractors"] or build_fallback_distractors(
                exercise["correctWords"], ctx.answer_lang)
            exercise["distractors"] = distractors
            exercise["direction"] = ctx.direction
            exercise["sourceLang"] = ctx.source_lang
            exercise["answerLang"] = ctx.answer_lang
            exercise["ttsLang"] = ctx.tts_lang
            exercise["wordBank"] = WordBank.shuffled(exercise["correctWords"], distractors).to_dict()
            if ctx.kind == "repeat":
                exercise["repeatMode"] = ctx.repeat_mode
                if ctx.repeat_mode == LISTENING_TARGET:
                    exercise["sentence"] = " ".join(exercise["correctWords"])

        return exercise
