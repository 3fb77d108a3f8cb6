"""
Blackjack hand valuation.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from cardparlor.common.card import Card, Rank
from cardparlor.blackjack.constants import ACE_REDUCTION, BLACKJACK, get_blackjack_value


def _evaluate(cards: Iterable[Card]) -> Tuple[int, int]:
    """Return the best total and the number of aces still counted as 11."""
    total = 0
    soft_aces = 0
    for card in cards:
        if card.rank == Rank.ACE:
            soft_aces += 1
        total += get_blackjack_value(card.rank)

    # Convert aces from 11 to 1 while the hand is over 21
    while total > BLACKJACK and soft_aces > 0:
        total -= ACE_REDUCTION
        soft_aces -= 1

    return total, soft_aces


def hand_value(cards: Iterable[Card]) -> int:
    """
    Calculate the value of a blackjack hand.

    Numerals count at face value, court cards 10 and aces 11, except that
    aces drop to 1 one at a time while the total is over 21.
    """
    return _evaluate(cards)[0]


@dataclass(frozen=True)
class BlackjackHand:
    """An immutable hand in the game of blackjack."""

    cards: Tuple[Card, ...] = ()

    def add_card(self, card: Card) -> "BlackjackHand":
        """Return a new hand with the card added."""
        return BlackjackHand(self.cards + (card,))

    @property
    def value(self) -> int:
        return hand_value(self.cards)

    @property
    def is_soft(self) -> bool:
        """Determine if the hand is soft (contains an ace counted as 11)."""
        return _evaluate(self.cards)[1] > 0

    @property
    def is_bust(self) -> bool:
        return self.value > BLACKJACK

    @property
    def is_natural(self) -> bool:
        """Two cards totalling 21."""
        return len(self.cards) == 2 and self.value == BLACKJACK

    def __len__(self) -> int:
        return len(self.cards)

    def __str__(self) -> str:
        return ", ".join(str(card) for card in self.cards)
