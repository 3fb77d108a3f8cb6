"""Blackjack-specific constants and value mappings."""

from cardparlor.common.card import Rank

BLACKJACK = 21
ACE_REDUCTION = 10  # An ace counted as 1 instead of 11
DEALER_STAND_VALUE = 17  # Dealer stands on all 17s, soft 17 included
STARTING_CHIPS = 1000

# Total returned to the player per unit staked
BLACKJACK_PAYOUT = 2.5
WIN_PAYOUT = 2
PUSH_PAYOUT = 1

BLACKJACK_VALUES = {
    Rank.ACE: 11,
    Rank.TWO: 2,
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 10,
    Rank.QUEEN: 10,
    Rank.KING: 10,
}


def get_blackjack_value(rank: Rank) -> int:
    """Get the blackjack value for a given rank (aces count 11)."""
    return BLACKJACK_VALUES[rank]
