"""
This module contains the SessionStats class which is responsible for
tracking the results of the blackjack rounds played in one session.
"""

from collections import Counter
from typing import Any, Dict, List

import numpy as np

from cardparlor.blackjack.state import BlackjackState, Outcome


class SessionStats:
    """
    A class that holds the statistics of a blackjack session.
    """

    def __init__(self):
        """
        Initializes the SessionStats with default values.
        """
        self.outcomes: Counter = Counter()
        self.bets: List[int] = []
        self.returns: List[int] = []

    @property
    def rounds_played(self) -> int:
        return len(self.returns)

    def update(self, state: BlackjackState) -> None:
        """Record a resolved round."""
        if state.outcome is None:
            raise ValueError("Only resolved rounds can be recorded")
        self.outcomes[state.outcome] += 1
        self.bets.append(state.bet)
        self.returns.append(state.payout - state.bet)

    def reset(self) -> None:
        self.outcomes.clear()
        self.bets.clear()
        self.returns.clear()

    def report(self) -> Dict[str, Any]:
        """
        Returns a dictionary containing the current statistics.
        """
        returns = np.asarray(self.returns, dtype=float)
        wins = sum(count for outcome, count in self.outcomes.items() if outcome.is_win)
        return {
            "rounds_played": self.rounds_played,
            "outcomes": {outcome.value: self.outcomes[outcome] for outcome in Outcome},
            "win_rate": wins / self.rounds_played if self.rounds_played else 0.0,
            "total_wagered": int(np.sum(self.bets)) if self.bets else 0,
            "net_result": int(returns.sum()) if returns.size else 0,
            "mean_return": float(returns.mean()) if returns.size else 0.0,
            "std_return": float(returns.std()) if returns.size else 0.0,
        }
