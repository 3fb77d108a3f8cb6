"""
This module contains classes to represent piles of cards and references to them.

A `Pile` is an immutable ordered container whose last card is the top. Every
operation that would change a pile returns a new one, which lets game states
share unchanged piles and makes rejected actions free of partial mutation.

Classes:

PileKind: The four kinds of pile on a patience table.
PileRef: A validated reference to one pile (kind plus index).
Pile: An immutable sequence of cards with structural queries.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

from cardparlor.common.card import Card

FOUNDATION_COUNT = 4
TABLEAU_COUNT = 7


class PileKind(Enum):
    """Kinds of pile on a patience table."""

    FOUNDATION = "foundation"
    TABLEAU = "tableau"
    WASTE = "waste"
    STOCK = "stock"

    def __str__(self) -> str:
        return self.value


_INDEX_LIMITS = {
    PileKind.FOUNDATION: FOUNDATION_COUNT,
    PileKind.TABLEAU: TABLEAU_COUNT,
}


@dataclass(frozen=True)
class PileRef:
    """
    Reference to a single pile.

    Foundation and tableau references carry an index; waste and stock
    references must not.

    Raises:
        ValueError: If the index is missing, out of range or not allowed
            for the kind of pile.
    """

    kind: PileKind
    index: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.kind, PileKind):
            raise TypeError(f"Invalid pile kind: {self.kind}")
        limit = _INDEX_LIMITS.get(self.kind)
        if limit is None:
            if self.index is not None:
                raise ValueError(f"{self.kind} pile does not take an index")
        elif not isinstance(self.index, int) or not 0 <= self.index < limit:
            raise ValueError(
                f"{self.kind} index must be in range 0..{limit - 1}, got {self.index!r}"
            )

    @classmethod
    def foundation(cls, index: int) -> "PileRef":
        return cls(PileKind.FOUNDATION, index)

    @classmethod
    def tableau(cls, index: int) -> "PileRef":
        return cls(PileKind.TABLEAU, index)

    @classmethod
    def waste(cls) -> "PileRef":
        return cls(PileKind.WASTE)

    @classmethod
    def stock(cls) -> "PileRef":
        return cls(PileKind.STOCK)

    def __str__(self) -> str:
        if self.index is None:
            return str(self.kind)
        return f"{self.kind}[{self.index}]"


@dataclass(frozen=True)
class Pile:
    """
    An immutable pile of cards. The last card is the top of the pile.
    """

    cards: Tuple[Card, ...] = ()

    @property
    def top(self) -> Optional[Card]:
        """Returns the top card, or None if the pile is empty."""
        return self.cards[-1] if self.cards else None

    def is_empty(self) -> bool:
        return not self.cards

    def index_of(self, card: Card) -> Optional[int]:
        """
        Find a card by identity.

        Args:
            card: The card to look for (compared by suit and rank).

        Returns:
            The position of the card, or None if it is not in the pile.
        """
        for i, candidate in enumerate(self.cards):
            if candidate == card:
                return i
        return None

    @property
    def face_up_start(self) -> int:
        """Index of the first card of the face-up suffix (len if none)."""
        index = len(self.cards)
        while index > 0 and self.cards[index - 1].face_up:
            index -= 1
        return index

    def push(self, *cards: Card) -> "Pile":
        """Return a new pile with the cards placed on top."""
        return Pile(self.cards + tuple(cards))

    def split_at(self, index: int) -> Tuple["Pile", Tuple[Card, ...]]:
        """
        Split the pile in two.

        Args:
            index: Position of the first card to take.

        Returns:
            The remaining pile and the run of cards taken from the top.
        """
        return Pile(self.cards[:index]), self.cards[index:]

    def with_top_flipped(self, face_up: bool = True) -> "Pile":
        """Return a new pile whose top card has the given face-up flag."""
        if not self.cards:
            return self
        return Pile(self.cards[:-1] + (self.cards[-1].flipped(face_up),))

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __repr__(self) -> str:
        return f"Pile({list(self.cards)!r})"

    def __str__(self) -> str:
        return ", ".join(str(card) for card in self.cards)
