# nosabos/exercises/speech.py - Strict scoring of a spoken attempt against its target sentence

import math
import re
import unicodedata
from typing import Any, Dict, List, Optional

import numpy as np

STOPWORDS = {
    "es": {
        "de", "la", "que", "el", "en", "y", "a", "los", "del", "se", "las", "por", "un", "para", "con", "no",
        "una", "su", "al", "lo", "como", "más", "pero", "sus", "le", "ya", "o", "este", "sí", "porque", "esta",
        "entre", "cuando", "muy", "sin", "sobre", "también", "me", "hasta", "hay", "donde", "quien", "desde",
        "todo", "nos", "durante", "todos", "uno", "les", "ni", "contra", "otros", "ese", "eso", "ante", "ellos",
        "e", "esto", "mí", "antes", "algunos", "qué", "unos", "yo", "otro", "otras", "otra", "él", "tanto",
        "esa", "estos", "mucho", "quienes", "nada", "muchos", "cual", "poco", "ella", "estar", "estas",
        "algunas", "algo",
    },
    "en": {
        "the", "and", "for", "that", "with", "this", "from", "they", "have", "your", "you", "was", "are", "were",
        "their", "what", "when", "which", "there", "into", "about", "them", "then", "some", "would", "like",
        "just", "over", "more", "than", "been", "being", "such", "each", "very", "because", "these", "those",
        "could", "should", "where", "who", "while", "through", "does", "did", "had", "also", "every", "once",
        "here", "how", "why", "its", "our", "his", "her", "onto", "can", "will", "much", "many", "any", "all",
        "both", "few", "most", "other", "out", "up", "down", "in", "on", "at", "by", "of", "to", "is", "be",
        "whom", "as", "it", "my",
    },
    "nah": set(),
    "yua": set(),
    "tzo": set(),
}

_DEFAULT = {
    "MIN_SPEECH_SEC": 1.1,
    "MIN_RMS": 0.008,
    "MIN_ZCR_PSEC": 500,
    "MAX_ZCR_PSEC": 8000,
    "MIN_CONFIDENCE": 0.55,
    "MIN_CHAR_SIM": 0.7,
    "MIN_WORD_F1": 0.6,
    "MIN_LANG_LIKE": 0.55,
    "DURATION_PER_CHAR_SEC": 0.045,
    "DURATION_TOLERANCE": (0.5, 2.8),
}

_INDIGENOUS = {
    **_DEFAULT,
    "MIN_SPEECH_SEC": 1.0,
    "MIN_ZCR_PSEC": 400,
    "MAX_ZCR_PSEC": 9000,
    "MIN_CONFIDENCE": 0.5,
    "MIN_CHAR_SIM": 0.6,
    "MIN_WORD_F1": 0.5,
    "MIN_LANG_LIKE": 0.45,
    "DURATION_TOLERANCE": (0.5, 3.0),
}

THRESHOLDS = {
    "default": _DEFAULT,
    "es": {**_DEFAULT, "MIN_SPEECH_SEC": 1.2, "MIN_CHAR_SIM": 0.74, "MIN_WORD_F1": 0.65},
    "en": {**_DEFAULT, "MIN_CHAR_SIM": 0.72, "MIN_WORD_F1": 0.62, "DURATION_PER_CHAR_SEC": 0.04},
    "nah": _INDIGENOUS,
    "yua": _INDIGENOUS,
    "tzo": _INDIGENOUS,
}

REASON_MESSAGES = {
    "en": {
        "speech-quality": "Speak a bit louder and keep a steady pace.",
        "not-target-lang": "Try speaking in {target}.",
        "low-char-sim": "Match the wording more closely.",
        "low-word-f1": "Include the key content words.",
        "low-confidence": "Speak clearly and reduce background noise.",
    },
    "es": {
        "speech-quality": "Habla un poco más fuerte y mantén un ritmo constante.",
        "not-target-lang": "Intenta hablar en {target}.",
        "low-char-sim": "Acércate más al texto original.",
        "low-word-f1": "Incluye las palabras clave del contenido.",
        "low-confidence": "Pronuncia con claridad y reduce el ruido de fondo.",
    },
}

_DISALLOWED = re.compile(r"[^a-zñáéíóúüʼ' -]", re.IGNORECASE)
_SPACES = re.compile(r"\s+")
_LETTERS_ONLY = re.compile(r"^[a-zñáéíóúü]+$", re.IGNORECASE)


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_speech(text: str) -> str:
    lowered = _strip_diacritics(text).lower()
    return _SPACES.sub(" ", _DISALLOWED.sub(" ", lowered)).strip()


def tokenize(text: str) -> List[str]:
    return [w for w in normalize_speech(text).split(" ") if w]


def levenshtein(a: str, b: str) -> int:
    if not a:
        return len(b)
    if not b:
        return len(a)
    row = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        prev, row[0] = row[0], i
        for j in range(1, len(b) + 1):
            current = row[j]
            row[j] = prev if a[i - 1] == b[j - 1] else 1 + min(prev, row[j], row[j - 1])
            prev = current
    return row[-1]


def char_similarity(a: str, b: str) -> float:
    left, right = normalize_speech(a), normalize_speech(b)
    longest = max(len(left), len(right)) or 1
    return (longest - levenshtein(left, right)) / longest


def word_prf(recognized: List[str], target: List[str], lang: str, drop_stopwords: bool = True) -> Dict[str, float]:
    """Bag-of-words precision, recall and F1 over content words"""
    stop = STOPWORDS.get(lang, STOPWORDS["en"])
    if drop_stopwords:
        recognized = [w for w in recognized if w not in stop]
        target = [w for w in target if w not in stop]

    counts: Dict[str, int] = {}
    for word in recognized:
        counts[word] = counts.get(word, 0) + 1
    wanted: Dict[str, int] = {}
    for word in target:
        wanted[word] = wanted.get(word, 0) + 1

    hits = sum(min(count, counts.get(word, 0)) for word, count in wanted.items())
    precision = hits / len(recognized) if recognized else 0
    recall = hits / len(target) if target else 0
    f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0
    return {"precision": precision, "recall": recall, "f1": f1}


def language_likelihood(words: List[str], lang: str) -> float:
    if not words:
        return 0
    stop = STOPWORDS.get(lang, STOPWORDS["en"])
    letters_ok = sum(1 for w in words if _LETTERS_ONLY.match(w))
    stop_hits = sum(1 for w in words if w in stop)
    return 0.8 * (letters_ok / len(words)) + 0.2 * (stop_hits / max(2, len(words)))


def compute_audio_metrics(samples: np.ndarray, sample_rate: int) -> Dict[str, float]:
    """Duration, RMS and zero crossings of mono float samples in [-1, 1]"""
    samples = np.asarray(samples, dtype=np.float32)
    if samples.size == 0 or sample_rate <= 0:
        return {"duration": 0.0, "rms": 0.0, "zeroCrossings": 0}

    non_negative = samples >= 0
    return {
        "duration": samples.size / float(sample_rate),
        "rms": float(np.sqrt(np.mean(samples * samples))),
        "zeroCrossings": int(np.count_nonzero(non_negative[1:] != non_negative[:-1])),
    }


def metrics_from_pcm16(pcm: bytes, sample_rate: int) -> Dict[str, float]:
    samples = np.frombuffer(pcm, dtype=np.int16).astype(np.float32) / 32768.0
    return compute_audio_metrics(samples, sample_rate)


def passes_speech_quality(metrics: Dict[str, Any], target_length: int, config: Dict[str, Any]) -> bool:
    duration = metrics.get("duration")
    rms = metrics.get("rms")
    if not isinstance(duration, (int, float)) or not math.isfinite(duration) or duration < config["MIN_SPEECH_SEC"]:
        return False
    if not isinstance(rms, (int, float)) or not math.isfinite(rms) or rms < config["MIN_RMS"]:
        return False

    crossings = metrics.get("zeroCrossings") or 0
    per_second = crossings / duration if duration else 0
    if per_second < config["MIN_ZCR_PSEC"] or per_second > config["MAX_ZCR_PSEC"]:
        return False

    expected = max(config["MIN_SPEECH_SEC"], target_length * config["DURATION_PER_CHAR_SEC"])
    low, high = config["DURATION_TOLERANCE"]
    return low <= duration / expected <= high


def evaluate_attempt_strict(recognized_text: str = "", target_sentence: str = "", lang: str = "es",
                            confidence: float = 0, audio_metrics: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Pass/fail plus a 0-100 score and the reasons an attempt fell short"""
    config = THRESHOLDS.get(lang, THRESHOLDS["default"])
    reasons = []
    recognized_words = tokenize(recognized_text)
    target_words = tokenize(target_sentence)

    if audio_metrics and not passes_speech_quality(audio_metrics, len(target_sentence or ""), config):
        reasons.append("speech-quality")

    lang_like = language_likelihood(recognized_words, lang)
    if lang_like < config["MIN_LANG_LIKE"]:
        reasons.append("not-target-lang")

    char_sim = char_similarity(recognized_text, target_sentence)
    f1 = word_prf(recognized_words, target_words, lang)["f1"]
    if char_sim < config["MIN_CHAR_SIM"]:
        reasons.append("low-char-sim")
    if f1 < config["MIN_WORD_F1"]:
        reasons.append("low-word-f1")
    if confidence and confidence < config["MIN_CONFIDENCE"]:
        reasons.append("low-confidence")

    raw = char_sim * 60 + f1 * 35 + lang_like * 20 + max(confidence or 0.55, 0.55) * 15
    return {
        "pass": not reasons,
        "score": int(math.floor(max(0, min(100, raw)) + 0.5)),
        "reasons": reasons,
        "charSim": char_sim,
        "f1": f1,
        "langLike": lang_like,
        "confidence": confidence,
    }


def speech_reason_tips(reasons: List[str], ui_lang: str = "en", target_label: str = None) -> List[str]:
    lang = "es" if ui_lang == "es" else "en"
    messages = REASON_MESSAGES[lang]
    label = target_label or ("el idioma objetivo" if lang == "es" else "the target language")
    tips = [messages[reason].format(target=label) for reason in reasons if reason in messages]
    if not tips:
        tips.append("Vuelve a intentarlo hablando con claridad." if lang == "es" else "Try again, speaking clearly.")
    return tips
