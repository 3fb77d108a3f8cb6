"""
Heuristic autoplay for the patience game.

The solver picks exactly one action per step, trying each kind of action in a
fixed priority order and taking the first that applies:

1. Move a card to a foundation (tableau columns left to right, then the waste).
2. Turn over a face-down tableau top card.
3. Move a tableau top card onto another column, preferring moves that expose
   a face-down card.
4. Play the waste top card onto a column.
5. Deal from the stock, or recycle the waste a limited number of times.

Tableau and waste moves equivalent to one of the recently executed moves are
skipped so the solver does not shuffle a card back and forth. The solver is
best-effort; it can report that nothing is left to do on a board that is
still winnable.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
import logging

from cardparlor.common.card import Card
from cardparlor.common.pile import PileRef
from cardparlor.solitaire.constants import (
    DEFAULT_PRIORITY,
    EXPOSE_PRIORITY,
    FOUNDATION_COUNT,
    TABLEAU_COUNT,
)
from cardparlor.solitaire.state import SolitaireRules, SolitaireState
from cardparlor.solitaire.transitions import StateTransitionEngine

logger = logging.getLogger(__name__)


class MoveKind(Enum):
    """Kinds of autoplay action."""

    FOUNDATION = "foundation"
    FLIP = "flip"
    TABLEAU = "tableau"
    WASTE_TO_TABLEAU = "waste-to-tableau"
    STOCK = "stock"


@dataclass(frozen=True)
class AutoMove:
    """
    A single autoplay action.

    Attributes:
        kind: What sort of action this is
        card: The card being moved or flipped (None for stock actions)
        source: Pile the card comes from
        destination: Pile the card goes to (None for flips and stock actions)
    """

    kind: MoveKind
    card: Optional[Card] = None
    source: Optional[PileRef] = None
    destination: Optional[PileRef] = None

    def is_equivalent(self, other: "AutoMove") -> bool:
        """
        Check whether two moves count as the same for repetition purposes.

        All stock actions are equivalent to each other. Other moves are
        equivalent when they share kind, source, destination and card.
        """
        if self.kind != other.kind:
            return False
        if self.kind == MoveKind.STOCK:
            return True
        return (
            self.source == other.source
            and self.destination == other.destination
            and self.card is not None
            and other.card is not None
            and self.card.id == other.card.id
        )

    def __str__(self) -> str:
        if self.kind == MoveKind.STOCK:
            return "deal from stock"
        if self.kind == MoveKind.FLIP:
            return f"flip {self.card} in {self.source}"
        return f"{self.card} {self.source} -> {self.destination}"


STOCK_MOVE = AutoMove(MoveKind.STOCK, source=PileRef.stock(), destination=PileRef.waste())


class AutoplaySolver:
    """
    Stateful autoplay heuristic.

    The solver remembers the last few executed moves and how many times it
    has recycled the waste. Both are reset when a new game starts.
    """

    def __init__(self, rules: Optional[SolitaireRules] = None):
        rules = rules or SolitaireRules()
        self.max_stock_cycles = rules.max_stock_cycles
        self.history = deque(maxlen=rules.autoplay_history_size)
        self.stock_cycles = 0

    def reset(self) -> None:
        """Forget the move history and recycle count."""
        self.history.clear()
        self.stock_cycles = 0

    def is_recent(self, move: AutoMove) -> bool:
        """Check if an equivalent move is in the recent history."""
        return any(move.is_equivalent(recent) for recent in self.history)

    def find_foundation_move(self, state: SolitaireState) -> Optional[AutoMove]:
        candidates = [
            (PileRef.tableau(column), state.tableau[column].top)
            for column in range(TABLEAU_COUNT)
        ]
        candidates.append((PileRef.waste(), state.waste.top))

        for source, card in candidates:
            if card is None or not card.face_up:
                continue
            for index in range(FOUNDATION_COUNT):
                if StateTransitionEngine.can_move_to_foundation(state, card, index):
                    return AutoMove(
                        MoveKind.FOUNDATION, card, source, PileRef.foundation(index)
                    )
        return None

    def find_flip_move(self, state: SolitaireState) -> Optional[AutoMove]:
        for column in range(TABLEAU_COUNT):
            top = state.tableau[column].top
            if top is not None and not top.face_up:
                return AutoMove(MoveKind.FLIP, top, PileRef.tableau(column))
        return None

    def find_strategic_tableau_move(
        self, state: SolitaireState
    ) -> Optional[AutoMove]:
        """
        Pick the best single-card move between tableau columns.

        Moves that would expose a face-down card score higher; ties go to the
        lowest source column, then the lowest destination column.
        """
        best: Optional[Tuple[int, AutoMove]] = None

        for from_col in range(TABLEAU_COUNT):
            pile = state.tableau[from_col]
            top = pile.top
            if top is None or not top.face_up:
                continue
            exposes = len(pile) > 1 and not pile.cards[-2].face_up
            priority = EXPOSE_PRIORITY if exposes else DEFAULT_PRIORITY

            for to_col in range(TABLEAU_COUNT):
                if from_col == to_col:
                    continue
                destination = PileRef.tableau(to_col)
                if not StateTransitionEngine.is_valid_move(state, [top], destination):
                    continue
                move = AutoMove(
                    MoveKind.TABLEAU, top, PileRef.tableau(from_col), destination
                )
                if self.is_recent(move):
                    continue
                if best is None or priority > best[0]:
                    best = (priority, move)

        return best[1] if best else None

    def find_waste_to_tableau_move(
        self, state: SolitaireState
    ) -> Optional[AutoMove]:
        card = state.waste.top
        if card is None:
            return None
        for column in range(TABLEAU_COUNT):
            destination = PileRef.tableau(column)
            if not StateTransitionEngine.is_valid_move(state, [card], destination):
                continue
            move = AutoMove(MoveKind.WASTE_TO_TABLEAU, card, PileRef.waste(), destination)
            if not self.is_recent(move):
                return move
        return None

    def can_deal_from_stock(self, state: SolitaireState) -> bool:
        if not state.stock.is_empty():
            return True
        return not state.waste.is_empty() and self.stock_cycles < self.max_stock_cycles

    def choose(self, state: SolitaireState) -> Optional[AutoMove]:
        """
        Select the next action without executing it.

        Returns:
            The chosen move, or None if there is nothing left to do
        """
        if state.is_over:
            return None

        for finder in (
            self.find_foundation_move,
            self.find_flip_move,
            self.find_strategic_tableau_move,
            self.find_waste_to_tableau_move,
        ):
            move = finder(state)
            if move is not None:
                return move

        if self.can_deal_from_stock(state):
            return STOCK_MOVE
        return None

    def apply(self, state: SolitaireState, move: AutoMove) -> SolitaireState:
        """Execute a chosen move through the rule engine."""
        if move.kind == MoveKind.FLIP:
            return StateTransitionEngine.flip_tableau_top(state, move.source.index)
        if move.kind == MoveKind.STOCK:
            if state.stock.is_empty() and not state.waste.is_empty():
                self.stock_cycles += 1
            return StateTransitionEngine.deal_from_stock(state)
        return StateTransitionEngine.move_cards(
            state, move.card, move.source, move.destination
        )

    def step(self, state: SolitaireState) -> Tuple[SolitaireState, Optional[AutoMove]]:
        """
        Choose, record and execute one action.

        Args:
            state: Current game state

        Returns:
            The new state and the executed move, or the original state and
            None if no action applies
        """
        move = self.choose(state)
        if move is None:
            logger.debug("Autoplay found no move")
            return state, None

        self.history.append(move)
        logger.debug(f"Autoplay: {move}")
        return self.apply(state, move), move
