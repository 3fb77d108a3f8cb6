"""
Blackjack engine implementation.

This module provides the BlackjackEngine class, which implements the
CardparlorEngine interface for a single player against a fixed-strategy
dealer.
"""

from typing import Dict, Any, Callable, Optional
import logging

from cardparlor.blackjack import (
    BlackjackRules,
    BlackjackState,
    RoundStage,
    SessionStats,
    StateTransitionEngine,
)
from cardparlor.common.result import ActionResult, ErrorCode, Result
from cardparlor.engine.base import CardparlorEngine

logger = logging.getLogger(__name__)


class BlackjackEngine(CardparlorEngine):
    """
    Engine implementation for Blackjack.

    The dealer's turn is played one card per ``dealer_step`` call so that an
    external scheduler can pace it; ``play_dealer`` runs it to completion.
    A resolved round stays on the table until ``finish_round`` is called
    after the presentation layer's display delay.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the blackjack engine with a fresh stake.

        Args:
            config: Configuration options for the game (``rules``, ``seed``)
        """
        super().__init__(config)
        self.rules: BlackjackRules = self.config.get("rules") or BlackjackRules()
        self.stats = SessionStats()
        self.state: BlackjackState = None
        self.new_game()

    def new_game(self) -> None:
        """
        Restore the starting stake and clear the round counter.
        """
        super().new_game()
        self.stats.reset()
        with self.event_bus.deferred():
            self.state = StateTransitionEngine.new_game(self.rules)

    def _apply(
        self,
        action: str,
        check: Callable[[BlackjackState], Optional[Result]],
        transition: Callable[[BlackjackState], BlackjackState],
        message: str = "",
    ) -> Result:
        problem = check(self.state)
        if problem is not None:
            return self._reject(action, problem)

        with self.event_bus.deferred():
            self._commit(transition(self.state))
            state = self.state
        if state.outcome is not None and state.stage == RoundStage.RESOLVED:
            message = state.outcome.message
        elif state.stage == RoundStage.DEALER_TURN:
            message = "Dealer's turn."
        return Result.success(message)

    def _commit(self, new_state: BlackjackState) -> None:
        """Swap in a new state, recording the round if it just resolved."""
        just_resolved = (
            new_state.stage == RoundStage.RESOLVED
            and self.state.stage != RoundStage.RESOLVED
        )
        self.state = new_state
        if just_resolved:
            self.stats.update(new_state)

    def place_bet(self, amount: int) -> Result:
        """
        Place a bet for the next round.

        Args:
            amount: Amount to bet

        Returns:
            Result of the bet
        """
        return self._apply(
            "place_bet",
            lambda state: StateTransitionEngine.check_place_bet(state, amount),
            lambda state: StateTransitionEngine.place_bet(state, amount),
            f"Bet placed: ${amount}",
        )

    def deal(self) -> Result:
        """
        Deal a new round for the current bet.
        """
        return self._apply(
            "deal",
            StateTransitionEngine.check_deal,
            lambda state: StateTransitionEngine.deal(state, self.rng),
            "Make your move!",
        )

    def hit(self) -> Result:
        return self._apply("hit", StateTransitionEngine.check_hit, StateTransitionEngine.hit)

    def stand(self) -> Result:
        return self._apply(
            "stand", StateTransitionEngine.check_stand, StateTransitionEngine.stand
        )

    def double_down(self) -> Result:
        return self._apply(
            "double_down",
            StateTransitionEngine.check_double_down,
            StateTransitionEngine.double_down,
        )

    def dealer_step(self, generation: Optional[int] = None) -> ActionResult:
        """
        Play one step of the dealer's turn.

        Args:
            generation: The game the caller was scheduled for. A step from an
                earlier game is cancelled.

        Returns:
            ACTED after a draw or the resolving stand, NO_ACTION_AVAILABLE
            outside the dealer's turn, CANCELLED for a stale game
        """
        if generation is not None and generation != self.generation:
            return ActionResult.CANCELLED
        if self.state.stage != RoundStage.DEALER_TURN:
            return ActionResult.NO_ACTION_AVAILABLE

        with self.event_bus.deferred():
            self._commit(StateTransitionEngine.dealer_step(self.state))
        return ActionResult.ACTED

    def play_dealer(self) -> Result:
        """
        Run the dealer's turn to completion without pauses.
        """
        if self.state.stage != RoundStage.DEALER_TURN:
            return self._reject(
                "play_dealer",
                Result.failure(ErrorCode.ILLEGAL_ACTION, "It is not the dealer's turn"),
            )
        with self.event_bus.deferred():
            while self.state.stage == RoundStage.DEALER_TURN:
                self._commit(StateTransitionEngine.dealer_step(self.state))
            outcome = self.state.outcome
        return Result.success(outcome.message)

    def finish_round(self, generation: Optional[int] = None) -> Result:
        """
        Clear a resolved round so the next bet can be placed.

        If the player is out of chips the whole game is reset.

        Args:
            generation: The game the caller was scheduled for (optional)

        Returns:
            Result carrying the message to show for the next hand
        """
        if generation is not None and generation != self.generation:
            return Result.failure(ErrorCode.ILLEGAL_ACTION, "The game has been restarted")
        if self.state.stage != RoundStage.RESOLVED:
            return self._reject(
                "finish_round",
                Result.failure(ErrorCode.ILLEGAL_ACTION, "The round is not over"),
            )

        if self.state.reset_pending:
            self.stats.reset()
            message = "Game Over! No more chips. Starting new game..."
        else:
            message = "Place your bet for the next hand."

        with self.event_bus.deferred():
            self.state = StateTransitionEngine.finish_round(self.state)
        return Result.success(message)
