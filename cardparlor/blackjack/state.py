"""
Immutable state models for the blackjack round engine.

This module provides dataclasses for representing a single-player blackjack
table in an immutable manner. These classes are designed to be used with pure
transition functions that create new state instances rather than modifying
existing ones.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple
from enum import Enum, auto
import uuid
import time

from cardparlor.common.card import Card
from cardparlor.blackjack.constants import (
    BLACKJACK_PAYOUT,
    DEALER_STAND_VALUE,
    STARTING_CHIPS,
)
from cardparlor.blackjack.hand import BlackjackHand


class RoundStage(Enum):
    """
    Possible stages of a blackjack round.
    """

    IDLE = auto()
    BET_PLACED = auto()
    PLAYER_TURN = auto()
    DEALER_TURN = auto()
    RESOLVED = auto()


class Outcome(Enum):
    """How a round ended for the player."""

    BLACKJACK = "blackjack"
    DEALER_BUST = "dealer_bust"
    WIN = "win"
    PUSH = "push"
    LOSS = "loss"
    BUST = "bust"

    @property
    def is_win(self) -> bool:
        return self in (Outcome.BLACKJACK, Outcome.DEALER_BUST, Outcome.WIN)

    @property
    def message(self) -> str:
        return _OUTCOME_MESSAGES[self]


_OUTCOME_MESSAGES = {
    Outcome.BLACKJACK: "Blackjack! You win!",
    Outcome.DEALER_BUST: "Dealer busts! You win!",
    Outcome.WIN: "You win!",
    Outcome.PUSH: "Push! It's a tie.",
    Outcome.LOSS: "Dealer wins!",
    Outcome.BUST: "Bust! You lose.",
}


@dataclass(frozen=True)
class BlackjackRules:
    """
    Immutable representation of the table rules.

    Attributes:
        starting_chips: Chip balance of a new game
        dealer_stand_value: Dealer draws below this value and stands at or above it
        blackjack_payout: Total returned per unit staked on a winning natural
    """

    starting_chips: int = STARTING_CHIPS
    dealer_stand_value: int = DEALER_STAND_VALUE
    blackjack_payout: float = BLACKJACK_PAYOUT


@dataclass(frozen=True)
class BlackjackState:
    """
    Immutable representation of a blackjack table.

    Attributes:
        id: Unique identifier for this game
        chips: Player's chip balance (the stake is deducted when dealt)
        bet: Current bet
        stage: Current stage of the round
        deck: Cards left to draw this round (the last card is drawn next)
        player: The player's hand
        dealer: The dealer's hand
        dealer_revealed: Whether the dealer's hole card is visible
        can_double: Whether double-down is still available this round
        outcome: How the last round ended (None until resolved)
        payout: Chips returned to the player by the last resolution
        rounds_played: Number of rounds resolved since the game started
        rules: Rules for this table
        timestamp: Time when this state was created
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    chips: int = STARTING_CHIPS
    bet: int = 0
    stage: RoundStage = RoundStage.IDLE
    deck: Tuple[Card, ...] = ()
    player: BlackjackHand = field(default_factory=BlackjackHand)
    dealer: BlackjackHand = field(default_factory=BlackjackHand)
    dealer_revealed: bool = False
    can_double: bool = False
    outcome: Optional[Outcome] = None
    payout: int = 0
    rounds_played: int = 0
    rules: BlackjackRules = field(default_factory=BlackjackRules)
    timestamp: float = field(default_factory=lambda: time.time())

    @property
    def round_in_progress(self) -> bool:
        return self.stage in (RoundStage.PLAYER_TURN, RoundStage.DEALER_TURN)

    @property
    def reset_pending(self) -> bool:
        """The round is over and the player has run out of chips."""
        return self.stage == RoundStage.RESOLVED and self.chips <= 0

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the state to a dictionary suitable for rendering.

        The dealer's first card and the dealer total are hidden until the
        dealer hand is revealed.

        Returns:
            Dictionary representation of the table
        """
        dealer_cards = [card.id for card in self.dealer.cards]
        if dealer_cards and not self.dealer_revealed:
            dealer_cards[0] = None

        return {
            "id": self.id,
            "stage": self.stage.name,
            "chips": self.chips,
            "bet": self.bet,
            "rounds_played": self.rounds_played,
            "player": {
                "cards": [card.id for card in self.player.cards],
                "value": self.player.value,
            },
            "dealer": {
                "cards": dealer_cards,
                "value": self.dealer.value if self.dealer_revealed else None,
            },
            "can_double": self.can_double,
            "outcome": self.outcome.value if self.outcome else None,
            "message": self.outcome.message if self.outcome else None,
            "payout": self.payout,
            "timestamp": self.timestamp,
        }
