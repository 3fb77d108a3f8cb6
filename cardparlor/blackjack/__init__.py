"""
Blackjack rules for Cardparlor.

This package provides hand valuation, the immutable table state, the round
transitions with the fixed dealer strategy, and session statistics.
"""

from cardparlor.blackjack.hand import BlackjackHand, hand_value
from cardparlor.blackjack.state import (
    BlackjackRules,
    BlackjackState,
    Outcome,
    RoundStage,
)
from cardparlor.blackjack.transitions import StateTransitionEngine
from cardparlor.blackjack.stats import SessionStats

__all__ = [
    "BlackjackHand",
    "hand_value",
    "BlackjackRules",
    "BlackjackState",
    "Outcome",
    "RoundStage",
    "StateTransitionEngine",
    "SessionStats",
]
