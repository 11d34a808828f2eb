import base64

import numpy as np
import pytest

from conftest import FakeLLM
from nosabos.exercises import prompts, speech
from nosabos.exercises.generator import (
    LISTENING_TARGET,
    ExerciseContext,
    ExerciseGenerator,
    public_event,
    public_view,
    sanitize_ma,
)
from nosabos.exercises.grading import grade
from nosabos.exercises.prompts import SUPPORT_TO_TARGET, TARGET_TO_SUPPORT
from nosabos.utils.word_bank import WordBank


def tone_pcm16(frequency=440, duration=1.5, sample_rate=24000, amplitude=0.3):
    t = np.linspace(0, duration, int(sample_rate * duration), False)
    wave = amplitude * np.sin(frequency * 2 * np.pi * t)
    return (wave * 32767).astype(np.int16).tobytes()


# ==================== PROMPTS ====================

def test_language_resolution():
    assert prompts.resolve_support_lang("bilingual", "es") == "es"
    assert prompts.resolve_support_lang("fr") == "en"
    assert prompts.support_differs("en", "es")
    assert not prompts.support_differs("en", "en")
    assert not prompts.wants_translation(True, "es", "es")
    assert prompts.lang_name("nah") == "Huastec Nahuatl"
    assert prompts.lang_name("xx") == "xx"


def test_tenses_and_variants():
    assert "subjunctive past" in prompts.get_verb_tenses_for_level("c1")
    assert prompts.get_verb_tenses_for_level(None) == prompts.SIMPLE_TENSES
    assert prompts.normalize_speak_variant("TRANSLATE") == "translate"
    assert prompts.normalize_speak_variant("sing") == "repeat"


def test_stream_prompts_carry_lesson_content():
    fill = prompts.build_fill_stream_prompt(
        "A1", "es", "en", lesson_content={"topic": "ser", "focusPoints": ["soy", "eres"]})
    assert 'Use verbs/tenses from: ["soy","eres"]' in fill
    assert '"type":"verb_fill","phase":"q"' in fill

    tutorial = prompts.build_translate_stream_prompt(
        "A1", "es", "en", lesson_content={"topic": "tutorial"}, direction=SUPPORT_TO_TARGET)
    assert '"The cat is black" -> "El gato es negro"' in tutorial
    assert prompts.TUTORIAL_DIFFICULTY in tutorial


def test_judge_prompt_fills_the_blank():
    prompt = prompts.build_fill_judge_prompt("es", "Yo ___ estudiante.", " soy ", "ser, yo")
    assert "Yo soy estudiante." in prompt
    assert prompt.endswith("YES or NO")


def test_explain_and_note_prompts():
    assert "opción múltiple" in prompts.build_explain_prompt("q", "a", "b", question_type="mc", user_language="es")
    fallback = prompts.build_explain_prompt("q", "a", "b", question_type="speak", user_language="de")
    assert "fill-in-the-blank" in fallback

    note = prompts.build_note_prompt("tener", "tengo", False, "es", "en", "A1", "grammar")
    assert "common mistakes" in note
    assert '"tengo" (incorrect)' in note


# ==================== GENERATOR ====================

MC_STREAM = [
    {"type": "verb_mc", "phase": "q", "question": " Yo ___ estudiante. "},
    {"type": "verb_mc", "phase": "choices", "choices": ["soy", "eres", "es", "somos", "son"]},
    {"type": "verb_fill", "phase": "q", "question": "not mine"},
    {"type": "verb_mc", "phase": "meta", "hint": "ser, yo, present", "answer": "soy", "translation": "I am a student."},
    {"type": "done"},
    {"type": "verb_mc", "phase": "q", "question": "after done"},
]


async def test_mc_stream_builds_and_caches_exercise(cache_manager):
    generator = ExerciseGenerator(FakeLLM(objects=MC_STREAM), cache_manager)
    events = [event async for event in generator.stream("mc", cefr_level="a2", target_lang="es")]

    phases = [event["phase"] for event in events if event["type"] == "phase"]
    assert phases == ["q", "choices", "meta"]

    exercise = events[-1]["exercise"]
    assert exercise["source"] == "stream"
    assert exercise["cefrLevel"] == "A2"
    assert exercise["question"] == "Yo ___ estudiante."
    assert exercise["choices"] == ["soy", "eres", "es", "somos"]
    assert exercise["answer"] == "soy"
    assert isinstance(exercise["dragVariant"], bool)

    cached = await cache_manager.get_exercise(exercise["id"])
    assert cached["answer"] == "soy"

    public = [public_event(event) for event in events]
    assert "answer" not in public[2]["data"]
    assert "answer" not in public[-1]["exercise"]
    assert public[-1]["exercise"]["choices"] == exercise["choices"]


async def test_match_stream_normalizes_one_based_map():
    llm = FakeLLM(objects=[{
        "type": "verb_match",
        "stem": "Match the forms",
        "left": ["yo", "tú", "ella"],
        "right": ["eres", "soy", "es"],
        "map": [2, 1, 3],
    }])
    events = [event async for event in ExerciseGenerator(llm).stream("match")]
    assert events[0]["phase"] == "full"
    assert "map" not in public_event(events[0])["data"]

    exercise = events[-1]["exercise"]
    assert exercise["answerMap"] == [1, 0, 2]
    assert sorted(exercise["bank"]) == [0, 1, 2]
    assert "answerMap" not in public_view(exercise)


async def test_speak_stream_normalizes_variant():
    llm = FakeLLM(objects=[
        {"type": "vocab_speak", "phase": "prompt", "variant": "TRANSLATE", "target": "bosque",
         "display": "forest", "prompt": "Translate aloud"},
        {"type": "vocab_speak", "phase": "meta", "hint": "nature", "translation": "forest"},
    ])
    exercise = await ExerciseGenerator(llm).generate("speak")
    assert exercise["variant"] == "translate"
    assert exercise["target"] == "bosque"
    assert exercise["display"] == "forest"


async def test_translate_stream_fills_missing_distractors():
    llm = FakeLLM(objects=[
        {"type": "translate", "phase": "q", "sentence": "El perro come."},
        {"type": "translate", "phase": "answer", "correctWords": ["The", "dog", "eats"], "distractors": []},
        {"type": "translate", "phase": "meta", "hint": "animals"},
    ])
    exercise = await ExerciseGenerator(llm).generate("translate", direction=TARGET_TO_SUPPORT)
    assert exercise["source"] == "stream"
    assert exercise["distractors"] == ["and", "or", "but", "very"]
    assert exercise["answerLang"] == "en" and exercise["sourceLang"] == "es"
    assert sorted(exercise["wordBank"]["bankOrder"]) == list(range(7))


async def test_responses_fallback_when_gemini_is_missing():
    llm = FakeLLM(gemini=False, responses=[
        '```json\n{"question": "¿Cuál es rojo?", "choices": ["rojo", "azul", "verde"], "answer": "Rojo"}\n```'
    ])
    exercise = await ExerciseGenerator(llm).generate("mc")
    assert exercise["source"] == "responses"
    assert exercise["answer"] == "rojo"
    assert exercise["choices"] == ["rojo", "azul", "verde"]


async def test_fill_fallback_reads_pipe_format():
    llm = FakeLLM(gemini=False, responses=["Yo ___ feliz. ||| estar, yo ||| I am happy."])
    exercise = await ExerciseGenerator(llm).generate("fill")
    assert (exercise["question"], exercise["hint"], exercise["translation"]) == (
        "Yo ___ feliz.", "estar, yo", "I am happy.")


async def test_incomplete_stream_ends_with_fixed_content():
    llm = FakeLLM(objects=[{"type": "verb_mc", "phase": "q", "question": "Only a stem"}])
    exercise = await ExerciseGenerator(llm).generate("mc")
    assert exercise["source"] == "fixed"
    assert exercise["choices"] == ["rapid", "slow", "late", "sleepy"]
    assert exercise["answer"] == "rapid"


async def test_stream_failure_falls_back():
    class BrokenStream(FakeLLM):
        async def stream_objects(self, prompt):
            raise RuntimeError("quota")
            yield

    llm = BrokenStream(responses=['{"stem": "", "left": ["a", "b", "c"], "right": ["x", "y", "z"]}'])
    exercise = await ExerciseGenerator(llm).generate("match")
    assert exercise["source"] == "responses"
    assert exercise["stem"] == "Match the words to their definitions."
    assert exercise["answerMap"] == [0, 1, 2]


async def test_fixed_translate_directions():
    llm = FakeLLM(gemini=False)
    forward = await ExerciseGenerator(llm).generate("translate", target_lang="es", direction=TARGET_TO_SUPPORT)
    assert forward["source"] == "fixed"
    assert forward["sentence"] == "El gato es negro."
    assert forward["correctWords"] == ["The", "cat", "is", "black"]
    assert forward["ttsLang"] == "es"

    listening = await ExerciseGenerator(llm).generate("repeat", target_lang="es", repeat_mode=LISTENING_TARGET)
    assert listening["direction"] == SUPPORT_TO_TARGET
    assert listening["repeatMode"] == LISTENING_TARGET
    assert listening["sentence"] == "El gato es negro"
    assert listening["ttsLang"] == "es"


async def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        ExerciseContext("essay")
    with pytest.raises(ValueError):
        await ExerciseGenerator(FakeLLM()).generate("essay")


def test_bilingual_support_follows_interface():
    ctx = ExerciseContext("translate", target_lang="fr", support_lang="bilingual", ui_lang="es",
                          direction=SUPPORT_TO_TARGET)
    assert ctx.support_code == "es"
    assert ctx.source_lang == "es" and ctx.answer_lang == "fr"


def test_sanitize_ma():
    clean = sanitize_ma({"question": " Q ", "choices": ["a", "b", "c", "d", "A"], "answers": ["a", "b"]})
    assert clean["choices"] == ["a", "b", "c", "d"]
    assert clean["answers"] == ["a", "b"]
    assert clean["question"] == "Q"
    assert sanitize_ma({"question": "Q", "choices": ["a", "b", "c", "d"], "answers": ["a"]}) is None
    assert sanitize_ma({"question": "Q", "choices": ["a", "b", "c"], "answers": ["a", "b"]}) is None
    assert sanitize_ma(None) is None


# ==================== GRADING ====================

MC = {"id": "e1", "kind": "mc", "targetLang": "es", "question": "Q", "choices": ["Rápido", "lento"], "answer": "Rápido"}


async def test_mc_exact_match_skips_judge(fake_llm):
    result = await grade(MC, {"choice": "rapido"}, fake_llm)
    assert result == {"exerciseId": "e1", "kind": "mc", "correct": True, "method": "exact", "xp": 5}
    assert fake_llm.judged == []


async def test_mc_wrong_choice_goes_to_judge():
    llm = FakeLLM(verdict=False)
    result = await grade(MC, {"choice": "lento"}, llm)
    assert result["method"] == "judge"
    assert not result["correct"] and result["xp"] == 0
    assert "lento" in llm.judged[0]

    lenient = await grade(MC, {"choice": "lento"}, FakeLLM(verdict=True))
    assert lenient["correct"] and lenient["xp"] == 5


async def test_final_quiz_awards_no_xp(fake_llm):
    result = await grade(MC, {"choice": "Rápido"}, fake_llm, final_quiz=True)
    assert result["correct"] and result["xp"] == 0


async def test_multi_answer_is_order_independent(fake_llm):
    exercise = {"id": "e2", "kind": "ma", "answers": ["furious", "mad"], "choices": ["furious", "calm", "mad"]}
    assert (await grade(exercise, {"choices": ["Mad", "furious"]}, fake_llm))["xp"] == 6
    partial = await grade(exercise, {"choices": ["mad"]}, fake_llm)
    assert not partial["correct"] and partial["method"] == "judge"


async def test_match_is_graded_without_judge(fake_llm):
    exercise = {"id": "e3", "kind": "match", "answerMap": [1, 0, 2]}
    assert (await grade(exercise, {"slots": [1, 0, 2]}, fake_llm))["correct"]
    assert (await grade(exercise, {"pairs": [[2, 2], [0, 1], [1, 0]]}, fake_llm))["correct"]
    wrong = await grade(exercise, {"slots": [0, 1, 2]}, fake_llm)
    assert not wrong["correct"] and wrong["method"] == "exact"
    assert not (await grade(exercise, {"slots": [1, 0]}, fake_llm))["correct"]
    assert fake_llm.judged == []


async def test_translate_accepts_word_bank_state(fake_llm):
    exercise = {"id": "e4", "kind": "translate", "correctWords": ["El", "niño", "come"], "sentence": "The boy eats"}
    bank = WordBank(["come", "el", "nino", "perro"])
    for position in (1, 1, 0):
        bank.select(position)
    assert bank.user_answer() == ["el", "nino", "come"]

    result = await grade(exercise, {"wordBank": bank.to_dict()}, fake_llm)
    assert result["correct"] and result["method"] == "exact"

    empty = await grade(exercise, {"words": []}, fake_llm)
    assert not empty["correct"] and fake_llm.judged == []


async def test_fill_is_always_judged():
    exercise = {"id": "e5", "kind": "fill", "question": "Yo ___ feliz.", "hint": "estar"}
    assert (await grade(exercise, {"answer": "estoy"}, FakeLLM(verdict=True)))["xp"] == 5
    assert not (await grade(exercise, {"answer": "estoy"}, None))["correct"]


async def test_speech_grading_from_pcm():
    exercise = {"id": "e6", "kind": "speak", "targetLang": "es", "target": "La niña canta una canción."}
    answer = {
        "recognizedText": "la nina canta una cancion",
        "confidence": 0.9,
        "pcm16": base64.b64encode(tone_pcm16()).decode("ascii"),
    }
    result = await grade(exercise, answer)
    assert result["correct"] and result["method"] == "speech" and result["xp"] == 6
    assert result["evaluation"]["reasons"] == []

    silent = {**answer, "pcm16": base64.b64encode(bytes(48000)).decode("ascii")}
    failed = await grade(exercise, silent)
    assert not failed["correct"]
    assert failed["evaluation"]["reasons"] == ["speech-quality"]
    assert failed["evaluation"]["tips"] == ["Speak a bit louder and keep a steady pace."]


async def test_speech_tips_follow_interface_language():
    exercise = {"id": "e7", "kind": "speak", "targetLang": "es", "target": "La niña canta una canción."}
    result = await grade(exercise, {"recognizedText": "hello world", "confidence": 0.9, "uiLang": "es"})
    assert not result["correct"]
    assert "Acércate más al texto original." in result["evaluation"]["tips"]



async def test_speech_ignores_client_verdict():
    exercise = {"id": "e8", "kind": "speak", "targetLang": "es", "target": "La niña canta una canción."}
    result = await grade(exercise, {"evaluation": {"pass": True, "score": 100}, "recognizedText": ""})
    assert not result["correct"] and result["xp"] == 0
    assert result["evaluation"].get("score") != 100


async def test_match_rejects_malformed_pairs():
    exercise = {"id": "e9", "kind": "match", "answerMap": [1, 0]}
    for answer in ({"pairs": [[0, None]]}, {"pairs": [3, 4]}, {"pairs": "0-1"}, {"slots": [{"x": 1}]}, {"slots": 5}):
        with pytest.raises(ValueError):
            await grade(exercise, answer)

    result = await grade(exercise, {"pairs": [["0", "1"], [1, 0]]})
    assert result["correct"]


async def test_unknown_exercise_kind():
    with pytest.raises(ValueError):
        await grade({"kind": "essay"}, {})


# ==================== SPEECH SCORING ====================

def test_text_similarity_helpers():
    assert speech.levenshtein("kitten", "sitting") == 3
    assert speech.char_similarity("Canción", "cancion") == 1.0
    assert speech.tokenize("¡Hola, mundo!") == ["hola", "mundo"]

    scores = speech.word_prf(["el", "gato", "negro"], ["el", "gato", "blanco"], "es")
    assert scores["precision"] == pytest.approx(0.5)
    assert scores["f1"] == pytest.approx(0.5)


def test_audio_gate():
    config = speech.THRESHOLDS["es"]
    voiced = speech.metrics_from_pcm16(tone_pcm16(), 24000)
    assert voiced["duration"] == pytest.approx(1.5)
    assert speech.passes_speech_quality(voiced, 26, config)

    assert not speech.passes_speech_quality(speech.metrics_from_pcm16(bytes(48000), 24000), 26, config)
    assert not speech.passes_speech_quality(speech.metrics_from_pcm16(tone_pcm16(duration=0.5), 24000), 26, config)
    assert speech.compute_audio_metrics(np.array([]), 24000)["duration"] == 0.0


def test_strict_evaluation_scores_and_reasons():
    good = speech.evaluate_attempt_strict("la nina canta", "La niña canta", "es", 0.9)
    assert good["pass"] and good["score"] >= 90

    low_confidence = speech.evaluate_attempt_strict("la nina canta", "La niña canta", "es", 0.3)
    assert low_confidence["reasons"] == ["low-confidence"]

    assert speech.speech_reason_tips(["not-target-lang"], "es", "francés") == ["Intenta hablar en francés."]
    assert speech.speech_reason_tips([], "en") == ["Try again, speaking clearly."]
