# nosabos/exercises/prompts.py - Prompt text for exercise generation, judging and explanations

import json
import random
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from nosabos.content.cefr import get_cefr_prompt_hint

LANG_NAMES = {
    "en": "English",
    "es": "Spanish",
    "pt": "Brazilian Portuguese",
    "fr": "French",
    "it": "Italian",
    "nl": "Dutch",
    "nah": "Huastec Nahuatl",
    "ru": "Russian",
    "de": "German",
    "el": "Greek",
}

NOTE_LANG_NAMES = {
    **LANG_NAMES,
    "nah": "Eastern Huasteca Nahuatl",
    "pl": "Polish",
    "ga": "Irish",
    "yua": "Yucatec Maya",
    "nv": "Navajo",
}

SIMPLE_TENSES = ["simple present", "simple past", "simple future"]
INTERMEDIATE_TENSES = SIMPLE_TENSES + ["conditional", "present perfect", "past perfect"]
ADVANCED_TENSES = INTERMEDIATE_TENSES + ["subjunctive present", "subjunctive past", "passive voice"]

TARGET_TO_SUPPORT = "target-to-support"
SUPPORT_TO_TARGET = "support-to-target"

SPEAK_VARIANTS = ("repeat", "translate", "complete")
TUTORIAL_DIFFICULTY = "absolute beginner, very easy"


def lang_name(code: Optional[str], table: Dict[str, str] = LANG_NAMES) -> str:
    return table.get(code, code or "")


def resolve_support_lang(support_lang: Optional[str], ui_lang: Optional[str] = "en") -> str:
    """'bilingual' follows the interface language; anything but Spanish means English"""
    if support_lang == "bilingual":
        return "es" if ui_lang == "es" else "en"
    return "es" if support_lang == "es" else "en"


def support_differs(support_code: str, target_lang: str) -> bool:
    return support_code != ("en" if target_lang == "en" else target_lang)


def wants_translation(show_translations: bool, support_code: str, target_lang: str) -> bool:
    return bool(show_translations) and support_differs(support_code, target_lang)


def get_verb_tenses_for_level(cefr_level: Optional[str]) -> List[str]:
    level = (cefr_level or "A1").upper()
    if level in ("B1", "B2"):
        return list(INTERMEDIATE_TENSES)
    if level in ("C1", "C2"):
        return list(ADVANCED_TENSES)
    return list(SIMPLE_TENSES)


def normalize_speak_variant(variant: Any) -> str:
    value = str(variant or "").lower()
    return value if value in SPEAK_VARIANTS else "repeat"


def _js(value: Any) -> str:
    """Compact JSON as embedded in prompt text"""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _is_tutorial(lesson_content: Optional[Dict[str, Any]]) -> bool:
    return (lesson_content or {}).get("topic") == "tutorial"


def _recent(recent_good: Optional[Sequence[Any]]) -> str:
    return _js(list(recent_good or [])[-3:])


def _languages(target_lang: str, support_lang: str, ui_lang: str) -> Tuple[str, str, str]:
    support_code = resolve_support_lang(support_lang, ui_lang)
    return lang_name(target_lang), support_code, lang_name(support_code)


def _vocab_directive(lesson_content: Optional[Dict[str, Any]], tutorial: str, words: str,
                     topic: str, recent_good: Optional[Sequence[Any]], recent_label: str = "corrects") -> str:
    if _is_tutorial(lesson_content):
        return tutorial
    lesson_content = lesson_content or {}
    if lesson_content.get("words"):
        return words.format(words=_js(lesson_content["words"]))
    if lesson_content.get("topic"):
        return topic.format(topic=lesson_content["topic"])
    return f"- Consider learner recent {recent_label}: {_recent(recent_good)}"


def _tense_directive(lesson_content: Optional[Dict[str, Any]], tutorial: str, tense: str,
                     recent_good: Optional[Sequence[Any]]) -> str:
    if _is_tutorial(lesson_content):
        return tutorial
    lesson_content = lesson_content or {}
    if lesson_content.get("focusPoints") or lesson_content.get("topic"):
        focus = lesson_content.get("focusPoints") or [tense]
        return (
            f"- STRICT REQUIREMENT: Focus on verb tense: {lesson_content.get('topic') or tense}. "
            f"Use verbs/tenses from: {_js(focus)}. This is lesson-specific content."
        )
    return f"- Focus on the {tense} tense. Consider learner recent corrects: {_recent(recent_good)}"


# ==================== STREAM PROMPTS (NDJSON phases) ====================

def build_fill_stream_prompt(cefr_level: str, target_lang: str, support_lang: str, show_translations: bool = True,
                             ui_lang: str = "en", recent_good: Sequence[Any] = (),
                             lesson_content: Dict[str, Any] = None, tense: str = None) -> str:
    """Phases: q (question) then meta (hint, translation)"""
    target, support_code, support = _languages(target_lang, support_lang, ui_lang)
    want_tr = wants_translation(show_translations, support_code, target_lang)
    tense = tense or random.choice(get_verb_tenses_for_level(cefr_level))
    directive = _tense_directive(
        lesson_content,
        '- TUTORIAL MODE: Create a VERY SIMPLE verb conjugation question. Use the verb "ser" (to be) or '
        '"tener" (to have) in simple present tense. Example: "Yo ___ estudiante" (answer: soy). '
        "Keep everything at absolute beginner level.",
        tense,
        recent_good,
    )

    return "\n".join([
        f'Create ONE short {target} VERB CONJUGATION sentence with a single blank "___" where a CONJUGATED VERB goes. '
        f"Difficulty: {get_cefr_prompt_hint(cefr_level)}",
        "- ≤ 120 chars; natural context that shows which tense/person is needed.",
        "- The blank MUST be for a conjugated verb form, NOT vocabulary.",
        directive,
        f"- Hint in {support} (≤ 12 words): include the INFINITIVE form, the SUBJECT, and the TENSE name.",
        f"- {support} translation of the full sentence." if want_tr else '- Empty translation "".',
        "",
        "Stream as NDJSON in phases:",
        f'{{"type":"verb_fill","phase":"q","question":"<sentence with ___ for verb in {target}>"}}  // emit ASAP',
        f'{{"type":"verb_fill","phase":"meta","hint":"<{support} hint with infinitive, subject, tense>",'
        f'"translation":"<{support} translation or empty>"}}  // then',
        '{"type":"done"}',
    ])


def build_mc_stream_prompt(cefr_level: str, target_lang: str, support_lang: str, show_translations: bool = True,
                           ui_lang: str = "en", recent_good: Sequence[Any] = (),
                           lesson_content: Dict[str, Any] = None, tense: str = None) -> str:
    """Phases: q, choices (4), meta (hint, answer, translation)"""
    target, support_code, support = _languages(target_lang, support_lang, ui_lang)
    want_tr = wants_translation(show_translations, support_code, target_lang)
    tense = tense or random.choice(get_verb_tenses_for_level(cefr_level))
    tutorial = _is_tutorial(lesson_content)
    directive = _tense_directive(
        lesson_content,
        '- TUTORIAL MODE: Create a VERY SIMPLE verb conjugation question. Use "ser" (to be) or "tener" (to have) '
        "in simple present. Keep at absolute beginner level.",
        tense,
        recent_good,
    )

    return "\n".join([
        f"Create ONE {target} VERB CONJUGATION multiple-choice question (exactly one correct). "
        f"Difficulty: {TUTORIAL_DIFFICULTY if tutorial else get_cefr_prompt_hint(cefr_level)}",
        '- Stem ≤120 chars with a blank "___" where the conjugated verb goes.',
        "- All 4 choices must be DIFFERENT CONJUGATIONS of the SAME verb (different persons, tenses, or moods).",
        "- Only ONE choice is correct for the given subject and context.",
        directive,
        f"- Hint in {support} (≤12 words): include INFINITIVE, SUBJECT, and TENSE.",
        f"- {support} translation of stem." if want_tr else '- Empty translation "".',
        "",
        "Stream as NDJSON:",
        f'{{"type":"verb_mc","phase":"q","question":"<stem in {target} with ___ for verb>"}}  // first',
        '{"type":"verb_mc","phase":"choices","choices":["<conjugation1>","<conjugation2>","<conjugation3>",'
        '"<conjugation4>"]}  // second',
        f'{{"type":"verb_mc","phase":"meta","hint":"<{support} hint with infinitive, subject, tense>",'
        f'"answer":"<exact correct conjugation>","translation":"<{support} translation or empty>"}} // third',
        '{"type":"done"}',
    ])


def build_ma_stream_prompt(cefr_level: str, target_lang: str, support_lang: str, show_translations: bool = True,
                           ui_lang: str = "en", recent_good: Sequence[Any] = (),
                           lesson_content: Dict[str, Any] = None, num_blanks: int = None) -> str:
    """Phases: q, choices (5-6), meta (hint, answers for each blank in order, translation)"""
    target, support_code, support = _languages(target_lang, support_lang, ui_lang)
    want_tr = wants_translation(show_translations, support_code, target_lang)
    num_blanks = num_blanks or (2 if random.random() < 0.5 else 3)
    tutorial = _is_tutorial(lesson_content)
    directive = _vocab_directive(
        lesson_content,
        "- TUTORIAL MODE: Create a VERY SIMPLE question about basic greetings only. The correct answers MUST be "
        'greeting words like "hello", "hola", "hi", "buenos días", "good morning", etc. '
        "Keep everything at absolute beginner level.",
        "- STRICT REQUIREMENT: The correct answers MUST come from this exact list: {words}. Do NOT use any other "
        "words. This is lesson-specific content and you MUST NOT diverge.",
        "- STRICT REQUIREMENT: The vocabulary MUST be directly related to: {topic}. Do NOT use unrelated "
        "vocabulary. This is lesson-specific content.",
        recent_good,
    )
    third = ',"<answer for blank 3>"' if num_blanks == 3 else ""

    return "\n".join([
        f"Create ONE {target} verb conjugation fill-in-the-blanks question with EXACTLY {num_blanks} blanks. "
        f"Difficulty: {TUTORIAL_DIFFICULTY if tutorial else get_cefr_prompt_hint(cefr_level)}",
        f'- Create a sentence in {target} with EXACTLY {num_blanks} blanks written as "___" where {target} '
        "vocabulary words should be inserted.",
        f"- The sentence should test verb conjugation by having the learner fill in {target} words.",
        f'- Each blank has EXACTLY ONE correct answer. The "answers" array MUST have EXACTLY {num_blanks} items, '
        "one for each blank IN ORDER.",
        f'- Example: A {target} sentence like "Yo ___ al parque todos los ___" with answers ["voy", "días"] '
        "means blank 1 = voy, blank 2 = días.",
        f"- 5–6 distinct single-word choices in {target}. Include the {num_blanks} correct answers plus "
        "2-4 distractors.",
        f'- CRITICAL: Each choice MUST be a single {target} word. NEVER combine words with "/" or "or".',
        f"- Hint in {support} (≤8 words).",
        f"- {support} translation showing the complete sentence." if want_tr else '- Empty translation "".',
        directive,
        "",
        "Stream as NDJSON:",
        f'{{"type":"verb_ma","phase":"q","question":"<{target} sentence with EXACTLY {num_blanks} ___ blanks '
        f'for {target} words>"}}  // first',
        f'{{"type":"verb_ma","phase":"choices","choices":["<{target} word1>","<{target} word2>","..."]}}  '
        "// second, 5-6 single words",
        f'{{"type":"verb_ma","phase":"meta","hint":"<{support} hint>","answers":["<answer for blank 1>",'
        f'"<answer for blank 2>"{third}],"translation":"<{support} translation or empty>"}} // third',
        '{"type":"done"}',
    ])


def build_speak_stream_prompt(cefr_level: str, target_lang: str, support_lang: str, show_translations: bool = True,
                              ui_lang: str = "en", recent_good: Sequence[Any] = (),
                              lesson_content: Dict[str, Any] = None) -> str:
    """Phases: prompt (variant, display, target, prompt) then meta (hint, translation)"""
    target, support_code, support = _languages(target_lang, support_lang, ui_lang)
    want_tr = wants_translation(show_translations, support_code, target_lang)
    allow_translate = support_differs(support_code, target_lang)
    tutorial = _is_tutorial(lesson_content)
    directive = _vocab_directive(
        lesson_content,
        "- TUTORIAL MODE: Create a VERY SIMPLE speaking practice about basic greetings only. The word/phrase MUST "
        'be "hello", "hola", "hi", or a simple greeting. Keep everything at absolute beginner level.',
        "- STRICT REQUIREMENT: The word/phrase being practiced MUST be from this exact list: {words}. Do NOT use "
        "any other words. This is lesson-specific content and you MUST NOT diverge.",
        "- STRICT REQUIREMENT: The vocabulary MUST be directly related to: {topic}. Do NOT use unrelated "
        "vocabulary. This is lesson-specific content.",
        recent_good,
        recent_label="successes",
    )

    return "\n".join([
        f"Create ONE {target} speaking drill (difficulty: "
        f"{TUTORIAL_DIFFICULTY if tutorial else get_cefr_prompt_hint(cefr_level)}). Choose VARIANT:",
        f"- repeat: show the {target} word/phrase (≤4 words) to repeat aloud.",
        f"- translate: show a {support} word/phrase (≤3 words) and have them speak the {target} translation aloud."
        if allow_translate else f"- translate: SKIP when support language equals {target}.",
        f"- complete: show a {target} sentence (≤120 chars) with ___ and have them speak the completed sentence aloud.",
        directive,
        f"- Provide a concise instruction sentence in {target} (≤120 chars).",
        f"- Include a hint in {support} (≤10 words).",
        f"- Provide a {support} translation of the stimulus or completed sentence."
        if want_tr else '- Use empty translation "".',
        "",
        "Stream as NDJSON:",
        f'{{"type":"vocab_speak","phase":"prompt","variant":"repeat|translate|complete",'
        f'"display":"<text shown to learner>","target":"<{target} output to evaluate>",'
        f'"prompt":"<instruction in {target}>"}}',
        f'{{"type":"vocab_speak","phase":"meta","hint":"<{support} hint>",'
        f'"translation":"<{support} translation or empty>"}}',
        '{"type":"done"}',
    ])


def build_match_stream_prompt(cefr_level: str, target_lang: str, support_lang: str, ui_lang: str = "en",
                              recent_good: Sequence[Any] = (), lesson_content: Dict[str, Any] = None) -> str:
    """A single line with stem, left (target words), right (support definitions), map and hint"""
    target, _, support = _languages(target_lang, support_lang, ui_lang)
    tutorial = _is_tutorial(lesson_content)
    directive = _vocab_directive(
        lesson_content,
        "- TUTORIAL MODE: Create a VERY SIMPLE matching exercise about basic greetings only. The left column MUST "
        'contain ONLY greeting words like "hello", "hola", "hi", "buenos días", "good morning", "goodbye", etc. '
        "Keep everything at absolute beginner level.",
        "- STRICT REQUIREMENT: The left column MUST contain ONLY words from this list: {words}. Do NOT use any "
        "other words. Select 3-6 words from this list ONLY. This is lesson-specific content and you MUST NOT "
        "diverge.",
        "- STRICT REQUIREMENT: All words MUST be directly related to: {topic}. Do NOT use unrelated vocabulary. "
        "This is lesson-specific content.",
        recent_good,
    )

    return "\n".join([
        f"Create ONE {target} vocabulary matching exercise. "
        f"Difficulty: {TUTORIAL_DIFFICULTY if tutorial else get_cefr_prompt_hint(cefr_level)}",
        directive,
        f"- Left column: {target} words (3–6 items, unique).",
        f"- Right column: {support} short definitions (unique).",
        "- Clear 1:1 mapping; ≤ 4 words per item.",
        '- "map" gives, for each left item in order, the index of its matching right item.',
        f"- Hint in {support} (≤8 words).",
        "",
        "Emit exactly TWO NDJSON lines:",
        f'{{"type":"verb_match","stem":"<{target} stem>","left":["<word>", "..."],'
        f'"right":["<short {support} definition>", "..."],"map":[0,2,1],"hint":"<{support} hint>"}}',
        '{"type":"done"}',
    ])


def build_translate_stream_prompt(cefr_level: str, target_lang: str, support_lang: str, ui_lang: str = "en",
                                  recent_good: Sequence[Any] = (), lesson_content: Dict[str, Any] = None,
                                  direction: str = TARGET_TO_SUPPORT) -> str:
    """Phases: q (sentence), answer (correctWords, distractors), meta (hint)"""
    target, _, support = _languages(target_lang, support_lang, ui_lang)
    target_to_support = direction == TARGET_TO_SUPPORT
    source_lang = target if target_to_support else support
    answer_lang = support if target_to_support else target
    tutorial = _is_tutorial(lesson_content)
    lesson_content = lesson_content or {}

    if tutorial:
        example = ('Example: "El gato es negro" -> "The cat is black"' if target_to_support
                   else 'Example: "The cat is black" -> "El gato es negro"')
        directive = (
            f"- TUTORIAL MODE: Create a VERY SIMPLE sentence using basic vocabulary only. {example}. "
            "Use only common words. Keep everything at absolute beginner level."
        )
    elif lesson_content.get("words") or lesson_content.get("topic"):
        lines = []
        if lesson_content.get("words"):
            lines.append(f"- STRICT REQUIREMENT: Use words from this list: {_js(lesson_content['words'])}. "
                         "This is lesson-specific vocabulary.")
        if lesson_content.get("topic"):
            lines.append(f"- STRICT REQUIREMENT: Focus on vocabulary topic: {lesson_content['topic']}.")
        directive = "\n".join(lines)
    else:
        directive = f"- Consider learner recent corrects: {_recent(recent_good)}"

    return "\n".join([
        "Create ONE sentence translation exercise for VOCABULARY. "
        f"Difficulty: {TUTORIAL_DIFFICULTY if tutorial else get_cefr_prompt_hint(cefr_level)}",
        f"- Source sentence in {source_lang} (4-8 words, showcasing vocabulary).",
        f"- Correct translation as array of {answer_lang} words in order.",
        f"- Provide 3-5 distractor words in {answer_lang} that are plausible but incorrect.",
        f"- Hint in {support} (≤8 words) about key vocabulary.",
        directive,
        "",
        "Stream as NDJSON:",
        f'{{"type":"translate","phase":"q","sentence":"<{source_lang} sentence>"}}',
        '{"type":"translate","phase":"answer","correctWords":["word1","word2",...],'
        '"distractors":["wrong1","wrong2",...]}',
        f'{{"type":"translate","phase":"meta","hint":"<{support} hint>"}}',
        '{"type":"done"}',
    ])


# ==================== NON-STREAM FALLBACK PROMPTS ====================

def build_fill_fallback_prompt(target_lang: str, support_code: str, show_translations: bool) -> str:
    """Pipe-delimited reply: sentence ||| hint ||| translation"""
    translation_slot = "translation" if show_translations else '""'
    return (
        f'Create ONE short {lang_name(target_lang)} VOCAB sentence with a single blank "___" (not grammar), '
        "≤120 chars.\n"
        "Return EXACTLY:\n"
        f"<sentence> ||| <hint in {lang_name(support_code)}> ||| <{translation_slot}>"
    )


def build_mc_fallback_prompt(target_lang: str, support_code: str, show_translations: bool) -> str:
    support = lang_name(support_code)
    return "\n".join([
        f"Create ONE {lang_name(target_lang)} vocab MCQ (1 correct). Return JSON ONLY:",
        "{",
        '  "question":"<stem>",',
        f'  "hint":"<hint in {support}>",',
        '  "choices":["<choice1>","<choice2>","<choice3>","<choice4>"],',
        f'  "notes":"Replace <choiceN> placeholders with actual {support} options.",',
        '  "answer":"<exact correct choice>",',
        f'  "translation":"{"<translation>" if show_translations else ""}"',
        "}",
    ])


def build_ma_fallback_prompt(target_lang: str, support_code: str, show_translations: bool) -> str:
    return "\n".join([
        f"Create ONE {lang_name(target_lang)} vocab MAQ (2–3 correct). Return JSON ONLY:",
        "{",
        '  "question":"<stem>",',
        f'  "hint":"<hint in {lang_name(support_code)}>",',
        '  "choices":["...","...","...","...","..."],',
        '  "answers":["<correct>","<correct>"],',
        f'  "translation":"{"<translation>" if show_translations else ""}"',
        "}",
    ])


def build_match_fallback_prompt(target_lang: str, support_code: str) -> str:
    support = lang_name(support_code)
    return (
        f"Create ONE {lang_name(target_lang)} vocabulary matching set. Return JSON ONLY:\n"
        f'{{"stem":"<stem>","left":["<word>","..."],"right":["<short {support} definition>","..."],'
        f'"hint":"<{support} hint>"}}'
    )


def build_speak_fallback_prompt(target_lang: str, support_code: str, show_translations: bool) -> str:
    target = lang_name(target_lang)
    support = lang_name(support_code)
    translation = f"<{support} translation or context>" if show_translations else ""
    return "\n".join([
        f"Create ONE {target} speaking drill. Randomly choose VARIANT from:",
        f"- repeat: show the {target} word/phrase and have them repeat it aloud.",
        f"- translate: show a {support} word and have them speak the {target} translation aloud.",
        f"- complete: show a {target} sentence with ___ and have them speak the completed sentence aloud.",
        "",
        "Return JSON ONLY:",
        "{",
        '  "variant":"repeat"|"translate"|"complete",',
        f'  "prompt":"<{target} instruction>",',
        '  "display":"<text to show the learner>",',
        f'  "target":"<{target} text they must say>",',
        f'  "hint":"<{support} hint>",',
        f'  "translation":"{translation}"',
        "}",
    ])


# ==================== JUDGE PROMPTS ====================

_BLANK_RUN = re.compile(r"_{2,}")


def build_fill_judge_prompt(target_lang: str, sentence: str, user_answer: str, hint: str = "") -> str:
    filled = _BLANK_RUN.sub(lambda _: str(user_answer or "").strip(), sentence or "", count=1)
    return f"""Judge a VERB CONJUGATION fill-in-the-blank in {lang_name(target_lang)} with leniency.

Sentence:
{sentence}

User's conjugated verb:
{user_answer}

Filled sentence:
{filled}

Hint (contains infinitive, subject, tense):
{hint or ""}

Policy:
- Say YES if the verb conjugation is correct for the given subject and tense.
- Focus on whether the conjugation matches the subject (person/number) and tense indicated.
- Allow minor spelling variations and accent mark differences.
- Be lenient with regional variations (e.g., vosotros vs ustedes forms).
- Accept both formal and informal forms if context allows.
- IMPORTANT: Multiple correct conjugations may be valid depending on context.
- Be lenient - if the conjugation makes grammatical sense, say YES.

Reply ONE WORD ONLY: YES or NO"""


def _numbered(items: Sequence[str]) -> str:
    return "\n".join(f"{i + 1}. {item}" for i, item in enumerate(items))


def build_mc_judge_prompt(target_lang: str, stem: str, choices: Sequence[str], user_choice: str,
                          hint: str = "") -> str:
    return f"""Judge a {lang_name(target_lang)} VERB CONJUGATION multiple-choice answer.

Stem:
{stem}

Choices:
{_numbered(choices)}

User selected:
{user_choice}

Hint (contains infinitive, subject, tense):
{hint or ""}

Rules:
- Say YES if the selected verb conjugation is correct for the subject and tense in context.
- Focus on person, number, and tense correctness.
- Allow regional variations (vosotros/ustedes, tú/vos).
- Allow minor spelling/accent variations.
- IMPORTANT: Multiple conjugations may be valid depending on context.
- Be lenient - if the conjugation makes grammatical sense, say YES.

Reply ONE WORD ONLY: YES or NO"""


def build_ma_judge_prompt(target_lang: str, stem: str, choices: Sequence[str], user_selections: Sequence[str],
                          hint: str = "") -> str:
    picked = "\n".join(f"- {c}" for c in user_selections) or "(none)"
    return f"""Judge a {lang_name(target_lang)} VERB CONJUGATION multiple-answer response (order irrelevant).

Stem:
{stem}

Choices:
{_numbered(choices)}

User selected:
{picked}

Hint (contains infinitive, subject, tense):
{hint or ""}

Policy:
- Determine which verb conjugations are correct for the context.
- Say YES if the user's selection includes ALL correct conjugations and NO incorrect ones.
- Focus on person, number, and tense correctness.
- Allow regional variations and minor spelling differences.
- Be lenient, good enough answers are acceptable.

Reply ONE WORD ONLY: YES or NO"""


def build_match_judge_prompt(stem: str, left: Sequence[str], right: Sequence[str],
                             user_pairs: Sequence[Sequence[int]], hint: str = "") -> str:
    def describe(li: int, ri: int) -> str:
        right_text = right[ri] if 0 <= ri < len(right) and right[ri] else "(none)"
        return f"L{li + 1} -> R{ri + 1}  ({left[li]} -> {right_text})"

    mapping = "\n".join(describe(li, ri) for li, ri in user_pairs) or "(none)"
    return f"""Judge a VERB CONJUGATION matching task with leniency.

Stem:
{stem}

Left (subjects/pronouns):
{_numbered(left)}

Right (conjugated forms):
{_numbered(right)}

User mapping (1:1 intended):
{mapping}

Rules:
- Say YES if each subject/pronoun is matched to the correct conjugated verb form.
- Focus on person and number agreement.
- Allow minor spelling/accent variations.
- If any mapping is wrong or missing, say NO.

Reply ONE WORD ONLY:
YES or NO"""


def build_translate_judge_prompt(source_lang: str, answer_lang: str, sentence: str,
                                 correct_words: Sequence[str], user_words: Sequence[str]) -> str:
    return f"""Judge a VOCABULARY translation exercise.

Source sentence ({lang_name(source_lang)}):
{sentence}

Expected translation ({lang_name(answer_lang)}):
{" ".join(correct_words)}

User's answer:
{" ".join(user_words)}

Instructions:
- Say YES if the user's translation is correct or an acceptable variant.
- Allow minor word order variations if meaning is preserved.
- Allow contractions, minor punctuation differences.
- Allow missing or incorrect accent marks/diacritics.
- Be lenient - good enough translations are acceptable.

Reply with ONE WORD ONLY:
YES or NO"""


# ==================== EXPLANATIONS & NOTES ====================

_EXPLAIN_TEMPLATES = {
    "en": {
        "fill": (
            "You are a helpful language tutor teaching {target}. A student answered a fill-in-the-blank "
            "question incorrectly.\n\n"
            "Question: {question}\nStudent's answer: {user_answer}\nCorrect answer (or hint): {correct}\n\n"
            "IMPORTANT: Provide your explanation in {support}.\n\n"
            "Provide a brief, encouraging explanation (2-3 sentences) that:\n"
            "1. Explains why their answer doesn't fit or what they misunderstood\n"
            "2. Clarifies the correct answer and its meaning\n"
            "3. Provides a helpful tip to remember it\n\n"
            "Keep it concise, supportive, and focused on learning. Write your entire response in {support}."
        ),
        "mc": (
            "You are a helpful language tutor teaching {target}. A student answered a multiple-choice "
            "question incorrectly.\n\n"
            "Question: {question}\nStudent's answer: {user_answer}\nCorrect answer: {correct}\n\n"
            "IMPORTANT: Provide your explanation in {support}.\n\n"
            "Provide a brief, encouraging explanation (2-3 sentences) that:\n"
            "1. Explains why their choice was incorrect\n"
            "2. Clarifies why the correct answer is right\n"
            "3. Provides a helpful tip to remember the difference\n\n"
            "Keep it concise, supportive, and focused on learning. Write your entire response in {support}."
        ),
        "ma": (
            "You are a helpful language tutor teaching {target}. A student answered a multiple-answer "
            "question incorrectly.\n\n"
            "Question: {question}\nStudent's answers: {user_answer}\nCorrect answers: {correct}\n\n"
            "IMPORTANT: Provide your explanation in {support}.\n\n"
            "Provide a brief, encouraging explanation (2-3 sentences) that:\n"
            "1. Explains which answers they missed or incorrectly selected\n"
            "2. Clarifies why the correct answers are right\n"
            "3. Provides a helpful tip to identify correct answers\n\n"
            "Keep it concise, supportive, and focused on learning. Write your entire response in {support}."
        ),
    },
    "es": {
        "fill": (
            "Eres un tutor de idiomas servicial que enseña {target}. Un estudiante respondió incorrectamente "
            "una pregunta de llenar el espacio en blanco.\n\n"
            "Pregunta: {question}\nRespuesta del estudiante: {user_answer}\n"
            "Respuesta correcta (o pista): {correct}\n\n"
            "IMPORTANTE: Proporciona tu explicación en {support}.\n\n"
            "Proporciona una breve explicación alentadora (2-3 oraciones) que:\n"
            "1. Explique por qué su respuesta no encaja o qué malentendieron\n"
            "2. Aclare la respuesta correcta y su significado\n"
            "3. Proporcione un consejo útil para recordarla\n\n"
            "Mantenlo conciso, de apoyo y enfocado en el aprendizaje. Escribe toda tu respuesta en {support}."
        ),
        "mc": (
            "Eres un tutor de idiomas servicial que enseña {target}. Un estudiante respondió incorrectamente "
            "una pregunta de opción múltiple.\n\n"
            "Pregunta: {question}\nRespuesta del estudiante: {user_answer}\nRespuesta correcta: {correct}\n\n"
            "IMPORTANTE: Proporciona tu explicación en {support}.\n\n"
            "Proporciona una breve explicación alentadora (2-3 oraciones) que:\n"
            "1. Explique por qué su elección fue incorrecta\n"
            "2. Aclare por qué la respuesta correcta es la correcta\n"
            "3. Proporcione un consejo útil para recordar la diferencia\n\n"
            "Mantenlo conciso, de apoyo y enfocado en el aprendizaje. Escribe toda tu respuesta en {support}."
        ),
        "ma": (
            "Eres un tutor de idiomas servicial que enseña {target}. Un estudiante respondió incorrectamente "
            "una pregunta de respuesta múltiple.\n\n"
            "Pregunta: {question}\nRespuestas del estudiante: {user_answer}\nRespuestas correctas: {correct}\n\n"
            "IMPORTANTE: Proporciona tu explicación en {support}.\n\n"
            "Proporciona una breve explicación alentadora (2-3 oraciones) que:\n"
            "1. Explique qué respuestas omitieron o seleccionaron incorrectamente\n"
            "2. Aclare por qué las respuestas correctas son correctas\n"
            "3. Proporcione un consejo útil para identificar las respuestas correctas\n\n"
            "Mantenlo conciso, de apoyo y enfocado en el aprendizaje. Escribe toda tu respuesta en {support}."
        ),
    },
}


def build_explain_prompt(question: str, user_answer: str, correct_answer: str, target_lang: str = "Spanish",
                         support_lang: str = "English", question_type: str = "fill",
                         user_language: str = "en") -> str:
    """Tutor explanation for a wrong answer; unknown languages and types fall back to English fill"""
    templates = _EXPLAIN_TEMPLATES.get(user_language) or _EXPLAIN_TEMPLATES["en"]
    template = templates.get(question_type) or templates["fill"]
    return template.format(
        target=target_lang,
        support=support_lang,
        question=question,
        user_answer=user_answer,
        correct=correct_answer,
    )


def build_note_prompt(concept: str, user_answer: Optional[str], was_correct: bool, target_lang: str,
                      support_lang: str, cefr_level: str, module_type: str) -> str:
    target = lang_name(target_lang, NOTE_LANG_NAMES)
    support = lang_name(support_lang, NOTE_LANG_NAMES)
    answer_line = f'User\'s answer: "{user_answer}" ({"correct" if was_correct else "incorrect"})' if user_answer else ""
    tip = "" if was_correct else " Include a brief tip about common mistakes."

    return (
        f"You are a language learning assistant. Generate a study note for a {cefr_level} level student "
        f"learning {target}.\n\n"
        f'Topic/Concept: "{concept}"\n'
        f"{answer_line}\n"
        f"Module: {module_type}\n\n"
        "Generate:\n"
        f"1. EXAMPLE: A short, practical example sentence in {target} using this concept. "
        f"Keep it appropriate for {cefr_level} level.\n"
        f"2. SUMMARY: A 1-2 sentence explanation in {support} that helps the student remember this concept.{tip}\n\n"
        "Reply in this exact JSON format (no markdown, just raw JSON):\n"
        '{"example": "...", "summary": "..."}'
    )
