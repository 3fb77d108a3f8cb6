"""
Detection of patience games in which no legal action remains.

`has_available_moves` is the loss test: it is False only when none of the
checks below find something to do. A face-down tableau top card counts as an
available action, and so does any card left in the stock or the waste, since
dealing and recycling are always possible.
"""

from typing import Optional

from cardparlor.common.card import Card
from cardparlor.common.pile import PileRef
from cardparlor.solitaire.constants import FOUNDATION_COUNT, TABLEAU_COUNT
from cardparlor.solitaire.state import SolitaireState
from cardparlor.solitaire.transitions import StateTransitionEngine


def _face_up_top(state: SolitaireState, column: int) -> Optional[Card]:
    top = state.tableau[column].top
    if top is not None and top.face_up:
        return top
    return None


def _reaches_foundation(state: SolitaireState, card: Card) -> bool:
    return any(
        StateTransitionEngine.can_move_to_foundation(state, card, index)
        for index in range(FOUNDATION_COUNT)
    )


def _reaches_tableau(state: SolitaireState, card: Card, skip: Optional[int] = None) -> bool:
    return any(
        StateTransitionEngine.is_valid_move(state, [card], PileRef.tableau(column))
        for column in range(TABLEAU_COUNT)
        if column != skip
    )


def tableau_to_foundation(state: SolitaireState) -> bool:
    """A face-up tableau top card can reach some foundation."""
    for column in range(TABLEAU_COUNT):
        top = _face_up_top(state, column)
        if top is not None and _reaches_foundation(state, top):
            return True
    return False


def waste_to_foundation(state: SolitaireState) -> bool:
    """The waste top card can reach some foundation."""
    top = state.waste.top
    return top is not None and _reaches_foundation(state, top)


def tableau_to_tableau(state: SolitaireState) -> bool:
    """A face-up tableau top card can move to a different column."""
    for column in range(TABLEAU_COUNT):
        top = _face_up_top(state, column)
        if top is not None and _reaches_tableau(state, top, skip=column):
            return True
    return False


def waste_to_tableau(state: SolitaireState) -> bool:
    """The waste top card can move to some column."""
    top = state.waste.top
    return top is not None and _reaches_tableau(state, top)


def face_down_top(state: SolitaireState) -> bool:
    """Some tableau column has a face-down top card."""
    return any(
        pile.top is not None and not pile.top.face_up for pile in state.tableau
    )


def stock_or_waste(state: SolitaireState) -> bool:
    """Cards remain to deal or recycle."""
    return not state.stock.is_empty() or not state.waste.is_empty()


CHECKS = (
    tableau_to_foundation,
    waste_to_foundation,
    tableau_to_tableau,
    waste_to_tableau,
    face_down_top,
    stock_or_waste,
)


def has_available_moves(state: SolitaireState) -> bool:
    """
    Check whether any legal action remains.

    Args:
        state: Current game state

    Returns:
        False only when the game is stuck
    """
    return any(check(state) for check in CHECKS)
