"""
The 52-card deck both games deal from.

The end of ``Deck.cards`` is the top of the deck, so dealing pops from the
list and a deck converted to a tuple can be drawn from with ``deck[-1]``.
Every deck owns a ``random.Random``; pass a seeded one to make a deal
reproducible.

>>> deck = Deck()
>>> deck.size
52
>>> deck.deal()
Card(Suit.SPADES, Rank.KING)
"""

from itertools import product
import random
from typing import Iterable, List, Optional, Tuple, Union

from cardparlor.common.card import Card, Rank, Suit


class Deck:
    """
    A deck of face-down cards.

    :param cards: Cards to start from, bottom first (optional). A full
                  suit-major deck is built when omitted.
    :param rng: Random number generator used by ``shuffle`` (optional).
    """

    def __init__(
        self,
        cards: Optional[Iterable[Card]] = None,
        rng: Optional[random.Random] = None,
    ):
        if cards is None:
            cards = (Card(suit, rank) for suit, rank in product(Suit, Rank))
        self.cards: List[Card] = list(cards)
        self.rng = rng or random.Random()

    def shuffle(self) -> "Deck":
        """Shuffle in place (Fisher-Yates) and return the deck for chaining."""
        self.rng.shuffle(self.cards)
        return self

    def deal(self, num_cards: int = 1) -> Union[Card, List[Card]]:
        """
        Take cards from the top of the deck.

        :return: A single card, or a list when more than one is requested.
        :raises IndexError: If the deck runs out.
        """
        if num_cards == 1:
            return self.cards.pop()
        return [self.cards.pop() for _ in range(num_cards)]

    def as_tuple(self) -> Tuple[Card, ...]:
        """Snapshot of the remaining cards for an immutable game state."""
        return tuple(self.cards)

    @property
    def size(self) -> int:
        return len(self.cards)

    def is_empty(self) -> bool:
        return not self.cards

    def __len__(self) -> int:
        return len(self.cards)

    def __repr__(self) -> str:
        return f"Deck({self.cards!r})"

    def __str__(self) -> str:
        return f"Deck of {len(self.cards)} cards"
