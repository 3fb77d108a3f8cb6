"""
Immutable state models for the patience game.

This module provides dataclasses for representing the state of a patience
game in an immutable manner. These classes are designed to be used with pure
transition functions that create new state instances rather than modifying
existing ones, so a snapshot handed to a renderer can never change under it.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple
from enum import Enum, auto
import uuid
import time

from cardparlor.common.card import Card
from cardparlor.common.pile import Pile, PileKind, PileRef
from cardparlor.solitaire.constants import (
    AUTOPLAY_HISTORY_SIZE,
    FLIP_POINTS,
    FOUNDATION_COUNT,
    FOUNDATION_POINTS,
    MAX_STOCK_CYCLES,
    TABLEAU_COUNT,
    WASTE_TO_TABLEAU_POINTS,
)


class GameStage(Enum):
    """Possible stages of a patience game."""

    PLAYING = auto()
    WON = auto()
    LOST = auto()


@dataclass(frozen=True)
class SolitaireRules:
    """
    Immutable representation of the scoring and autoplay rules.

    Attributes:
        flip_points: Points for turning a tableau card face-up
        foundation_points: Points for any card reaching a foundation
        waste_to_tableau_points: Points for playing the waste top onto the tableau
        autoplay_history_size: Number of recent autoplay moves never repeated
        max_stock_cycles: Times autoplay may recycle the waste into the stock
    """

    flip_points: int = FLIP_POINTS
    foundation_points: int = FOUNDATION_POINTS
    waste_to_tableau_points: int = WASTE_TO_TABLEAU_POINTS
    autoplay_history_size: int = AUTOPLAY_HISTORY_SIZE
    max_stock_cycles: int = MAX_STOCK_CYCLES


def _empty_piles(count: int) -> Tuple[Pile, ...]:
    return tuple(Pile() for _ in range(count))


@dataclass(frozen=True)
class SolitaireState:
    """
    Immutable representation of a patience table.

    Attributes:
        id: Unique identifier for this game
        stock: Face-down draw pile
        waste: Face-up discard pile fed from the stock
        foundations: The four ascending same-suit piles
        tableau: The seven cascading columns
        score: Current score
        moves: Number of executed moves, deals and flips
        stage: Current stage of the game
        rules: Scoring and autoplay rules for this game
        timestamp: Time when this state was created
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    stock: Pile = field(default_factory=Pile)
    waste: Pile = field(default_factory=Pile)
    foundations: Tuple[Pile, ...] = field(
        default_factory=lambda: _empty_piles(FOUNDATION_COUNT)
    )
    tableau: Tuple[Pile, ...] = field(
        default_factory=lambda: _empty_piles(TABLEAU_COUNT)
    )
    score: int = 0
    moves: int = 0
    stage: GameStage = GameStage.PLAYING
    rules: SolitaireRules = field(default_factory=SolitaireRules)
    timestamp: float = field(default_factory=lambda: time.time())

    def pile(self, ref: PileRef) -> Pile:
        """Get the pile a reference points at."""
        if ref.kind == PileKind.FOUNDATION:
            return self.foundations[ref.index]
        if ref.kind == PileKind.TABLEAU:
            return self.tableau[ref.index]
        if ref.kind == PileKind.WASTE:
            return self.waste
        return self.stock

    def top(self, ref: PileRef) -> Optional[Card]:
        """Get the top card of a pile, or None if it is empty."""
        return self.pile(ref).top

    @property
    def foundation_count(self) -> int:
        """Total number of cards on the foundations."""
        return sum(len(pile) for pile in self.foundations)

    @property
    def is_won(self) -> bool:
        return self.stage == GameStage.WON

    @property
    def is_over(self) -> bool:
        return self.stage != GameStage.PLAYING

    def all_cards(self) -> List[Card]:
        """Every card on the table, in pile order."""
        cards = list(self.stock) + list(self.waste)
        for pile in self.foundations + self.tableau:
            cards.extend(pile)
        return cards

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the game state to a dictionary suitable for rendering.

        Face-down cards are reported without their identity.

        Returns:
            Dictionary representation of the game state
        """

        def describe(pile: Pile) -> List[Optional[str]]:
            return [card.id if card.face_up else None for card in pile]

        return {
            "id": self.id,
            "stage": self.stage.name,
            "score": self.score,
            "moves": self.moves,
            "stock_size": len(self.stock),
            "waste": describe(self.waste),
            "foundations": [describe(pile) for pile in self.foundations],
            "tableau": [describe(pile) for pile in self.tableau],
            "foundation_count": self.foundation_count,
            "timestamp": self.timestamp,
        }
