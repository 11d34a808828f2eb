# nosabos/utils/keyboard.py - Virtual keyboard layouts for non-Latin scripts

import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

BACKSPACE = "BACKSPACE"
SPACE = " "

HIRAGANA = [list(
    "あいうえおかきくけこさしすせそたちつてとなにぬねのはひふへほまみむめもやゆよらりるれろわをん"
    "がぎぐげござじずぜぞだぢづでどばびぶべぼぱぴぷぺぽゃゅょっー"
)]

KATAKANA = [list(
    "アイウエオカキクケコサシスセソタチツテトナニヌネノハヒフヘホマミムメモヤユヨラリルレロワヲン"
    "ガギグゲゴザジズゼゾダヂヅデドバビブベボパピプペポャュョッー"
)]

CYRILLIC = [list("абвгдеёжзийклмнопрстуфхцчшщъыьэюя")]
CYRILLIC_UPPER = [list("АБВГДЕЁЖЗИЙКЛМНОПРСТУФХЦЧШЩЪЫЬЭЮЯ")]

GREEK = [
    list("αβγδεζηθικλμνξοπρσςτυφχψω"),
    list("άέήίόύώϊϋΐΰ"),
]
GREEK_UPPER = [
    list("ΑΒΓΔΕΖΗΘΙΚΛΜΝΞΟΠΡΣΤΥΦΧΨΩ"),
    list("ΆΈΉΊΌΎΏΪΫ"),
]

SUPPORTED_LANGUAGES = ("ja", "ru", "el")


def is_supported(lang: Optional[str]) -> bool:
    return lang in SUPPORTED_LANGUAGES


def apply_key(text: str, key: str) -> str:
    """Apply a key press to the answer being typed"""
    if key == BACKSPACE:
        return text[:-1]
    return text + key


class KeyboardState:
    """Layout selection for one keyboard: kana mode for Japanese, case for Russian and Greek"""

    def __init__(self, lang: str, japanese_mode: str = "hiragana", upper_case: bool = False):
        self.lang = lang
        self.japanese_mode = japanese_mode
        self.upper_case = upper_case

    @property
    def supported(self) -> bool:
        return is_supported(self.lang)

    def set_japanese_mode(self, mode: str):
        if mode not in ("hiragana", "katakana"):
            raise ValueError(f"Unknown Japanese keyboard mode: {mode}")
        self.japanese_mode = mode

    def toggle_case(self):
        self.upper_case = not self.upper_case

    def layout(self) -> List[List[str]]:
        if self.lang == "ja":
            return HIRAGANA if self.japanese_mode == "hiragana" else KATAKANA
        if self.lang == "ru":
            return CYRILLIC_UPPER if self.upper_case else CYRILLIC
        if self.lang == "el":
            return GREEK_UPPER if self.upper_case else GREEK
        return []

    def press(self, key: str, text: str) -> str:
        return apply_key(text, key)

    def to_dict(self) -> Dict:
        return {
            "lang": self.lang,
            "supported": self.supported,
            "mode": self.japanese_mode if self.lang == "ja" else ("upper" if self.upper_case else "lower"),
            "rows": self.layout(),
            "specialKeys": [BACKSPACE, SPACE],
        }
