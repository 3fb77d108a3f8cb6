"""
Patience (Klondike, draw one) rules for Cardparlor.

This package provides the immutable table state, the move rules, the
deadlock detector and the autoplay heuristic.
"""

from cardparlor.solitaire.state import GameStage, SolitaireRules, SolitaireState
from cardparlor.solitaire.transitions import StateTransitionEngine
from cardparlor.solitaire.deadlock import has_available_moves
from cardparlor.solitaire.autoplay import AutoMove, AutoplaySolver, MoveKind

__all__ = [
    "GameStage",
    "SolitaireRules",
    "SolitaireState",
    "StateTransitionEngine",
    "has_available_moves",
    "AutoMove",
    "AutoplaySolver",
    "MoveKind",
]
