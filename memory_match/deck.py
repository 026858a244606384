"""
Deck building for Memory Match.

Creates the paired card set for a difficulty and shuffles it.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence, Tuple, TypeVar, Union
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Difficulty(Enum):
    """Difficulty levels."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union['Difficulty', str, None]) -> 'Difficulty':
        """
        Resolve a difficulty from an enum member or its name.

        Unrecognized values resolve to MEDIUM.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug(f"Unknown difficulty {value!r}, using medium")
            return cls.MEDIUM


# Pairs per difficulty
PAIR_COUNTS: Dict[Difficulty, int] = {
    Difficulty.EASY: 3,
    Difficulty.MEDIUM: 8,
    Difficulty.HARD: 10,
}

# Grid layout per difficulty as (columns, rows)
GRID_LAYOUTS: Dict[Difficulty, Tuple[int, int]] = {
    Difficulty.EASY: (3, 2),
    Difficulty.MEDIUM: (4, 4),
    Difficulty.HARD: (4, 5),
}

# Symbol set in deck order, with display colors
SYMBOLS: List[Tuple[str, str]] = [
    ("Fish", "#00ffff"),
    ("Cat", "#ff71ce"),
    ("Dog", "#01fbac"),
    ("Squirrel", "#ffcc00"),
    ("Turtle", "#ff3864"),
    ("Bird", "#00c3ff"),
    ("Rabbit", "#b967ff"),
    ("Snail", "#ff9c41"),
    ("Rat", "#7cff01"),
    ("Bug", "#ff00ff"),
]

SYMBOL_COLORS: Dict[str, str] = dict(SYMBOLS)


@dataclass
class Card:
    """A single card on the board."""

    id: int
    symbol: str
    matched: bool = False

    @property
    def color(self) -> str:
        return SYMBOL_COLORS.get(self.symbol, "#ffffff")

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'symbol': self.symbol,
            'color': self.color,
            'matched': self.matched,
        }


def pair_count(difficulty: Union[Difficulty, str]) -> int:
    """Number of pairs for a difficulty (medium's count if unrecognized)."""
    return PAIR_COUNTS[Difficulty.parse(difficulty)]


def grid_layout(difficulty: Union[Difficulty, str]) -> Tuple[int, int]:
    """Board layout for a difficulty as (columns, rows)."""
    return GRID_LAYOUTS[Difficulty.parse(difficulty)]


def shuffle(items: Sequence[T], rng=None) -> List[T]:
    """
    Return a uniformly shuffled copy of items (Fisher-Yates).

    Args:
        items: Items to shuffle (left untouched)
        rng: Random source with randrange(), defaults to the random module

    Returns:
        New list holding the same items in random order
    """
    rng = rng or random
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randrange(i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def build_deck(difficulty: Union[Difficulty, str], rng=None) -> List[Card]:
    """
    Build a shuffled deck for a difficulty.

    The first N symbols are each used for one pair, N being the pair count
    of the difficulty. Pair k gets card ids 2k and 2k+1.

    Args:
        difficulty: Difficulty level or its name
        rng: Random source with randrange(), defaults to the random module

    Returns:
        Shuffled list of 2*N cards
    """
    pairs = pair_count(difficulty)
    cards: List[Card] = []
    for index, (symbol, _color) in enumerate(SYMBOLS[:pairs]):
        cards.append(Card(id=index * 2, symbol=symbol))
        cards.append(Card(id=index * 2 + 1, symbol=symbol))

    deck = shuffle(cards, rng)
    logger.debug(f"Built {len(deck)}-card deck for {Difficulty.parse(difficulty).value}")
    return deck
