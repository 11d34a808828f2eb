# nosabos/utils/word_bank.py - Word bank state for sentence reconstruction exercises

import logging
from typing import Any, Dict, List, Optional

from nosabos.utils.text import shuffle

logger = logging.getLogger(__name__)

BANK = "bank"
SELECTED = "selected"


class WordBank:
    """Tracks which tiles sit in the bank and which the learner has placed.

    Both areas hold indices into ``words`` so duplicate words stay distinct.
    Once the exercise is answered correctly the bank is locked and every
    mutation becomes a no-op.
    """

    def __init__(self, words: List[str], bank_order: Optional[List[int]] = None,
                 selected: Optional[List[int]] = None, locked: bool = False):
        self.words = list(words)
        self.bank_order = list(bank_order) if bank_order is not None else list(range(len(self.words)))
        self.selected = list(selected) if selected is not None else []
        self.locked = locked

    @classmethod
    def shuffled(cls, correct_words: List[str], distractors: List[str]) -> "WordBank":
        words = list(correct_words) + list(distractors)
        return cls(words, bank_order=shuffle(range(len(words))))

    def _area(self, name: str) -> List[int]:
        if name == BANK:
            return self.bank_order
        if name == SELECTED:
            return self.selected
        raise ValueError(f"Unknown word bank area: {name}")

    def select(self, bank_position: int) -> bool:
        """Move the tile at bank_position to the end of the answer"""
        if self.locked or not 0 <= bank_position < len(self.bank_order):
            return False
        self.selected.append(self.bank_order.pop(bank_position))
        return True

    def deselect(self, selected_position: int) -> bool:
        """Return the tile at selected_position to the end of the bank"""
        if self.locked or not 0 <= selected_position < len(self.selected):
            return False
        self.bank_order.append(self.selected.pop(selected_position))
        return True

    def move(self, source_area: str, source_index: int, dest_area: str, dest_index: int) -> bool:
        """Drag a tile within an area or across areas"""
        if self.locked:
            return False
        if source_area == dest_area and source_index == dest_index:
            return False

        source = self._area(source_area)
        dest = self._area(dest_area)
        if not 0 <= source_index < len(source):
            return False

        tile = source.pop(source_index)
        dest_index = max(0, min(dest_index, len(dest)))
        dest.insert(dest_index, tile)
        return True

    def lock(self):
        self.locked = True

    def reset(self):
        self.bank_order = list(range(len(self.words)))
        self.selected = []
        self.locked = False

    def user_answer(self) -> List[str]:
        return [self.words[i] for i in self.selected]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "words": self.words,
            "bankOrder": self.bank_order,
            "selected": self.selected,
            "locked": self.locked,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordBank":
        return cls(
            data.get("words", []),
            bank_order=data.get("bankOrder"),
            selected=data.get("selected"),
            locked=bool(data.get("locked", False)),
        )
