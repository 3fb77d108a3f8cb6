"""
Playing-card value types shared by the patience and blackjack engines.

A `Card` is immutable. Its identity is the (suit, rank) pair; the face-up
flag travels with the card as presentation state but is ignored by equality
and hashing, so a card keeps the same identity when it is turned over.
"""

from dataclasses import dataclass, field, replace
from enum import Enum, unique


@unique
class Color(Enum):
    RED = "red"
    BLACK = "black"

    def __str__(self) -> str:
        return self.value


@unique
class Suit(Enum):
    """The four French suits, valued by their symbol."""

    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"
    SPADES = "♠"

    @property
    def color(self) -> Color:
        return _SUIT_COLORS[self]

    def __str__(self) -> str:
        return self.value


_SUIT_COLORS = {
    Suit.HEARTS: Color.RED,
    Suit.DIAMONDS: Color.RED,
    Suit.CLUBS: Color.BLACK,
    Suit.SPADES: Color.BLACK,
}


@unique
class Rank(Enum):
    """Ace low through King; the enum value is the ordinal (1..13)."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    @property
    def rank_value(self) -> int:
        return self.value

    @property
    def rank_str(self) -> str:
        """Short label: A, 2..10, J, Q, K."""
        return _FACE_LABELS.get(self, str(self.value))

    def __str__(self) -> str:
        return self.rank_str


_FACE_LABELS = {Rank.ACE: "A", Rank.JACK: "J", Rank.QUEEN: "Q", Rank.KING: "K"}


@dataclass(frozen=True)
class Card:
    """
    A single playing card.

    >>> ace = Card(Suit.SPADES, Rank.ACE)
    >>> print(ace)
    A of ♠
    >>> ace.id
    'spades-A'
    >>> ace == ace.flipped(True)
    True
    """

    suit: Suit
    rank: Rank
    face_up: bool = field(default=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.suit, Suit):
            raise TypeError(f"Invalid suit: {self.suit}")
        if not isinstance(self.rank, Rank):
            raise TypeError(f"Invalid rank: {self.rank}")

    @property
    def id(self) -> str:
        """Stable key such as ``hearts-10``, unique within one deck."""
        return f"{self.suit.name.lower()}-{self.rank.rank_str}"

    @property
    def value(self) -> int:
        return self.rank.rank_value

    @property
    def color(self) -> Color:
        return self.suit.color

    def flipped(self, face_up: bool) -> "Card":
        """Same card turned the requested way; returns self if already so."""
        if self.face_up == face_up:
            return self
        return replace(self, face_up=face_up)

    def __repr__(self) -> str:
        return f"Card(Suit.{self.suit.name}, Rank.{self.rank.name})"

    def __str__(self) -> str:
        return f"{self.rank.rank_str} of {self.suit}"
