"""
Patience engine implementation.

This module provides the SolitaireEngine class, which implements the
CardparlorEngine interface for the patience game.
"""

from typing import Dict, Any, Optional
import logging

from cardparlor.common.card import Card
from cardparlor.common.pile import PileRef
from cardparlor.common.result import ActionResult, ErrorCode, Result
from cardparlor.engine.base import CardparlorEngine
from cardparlor.events import EngineEventType
from cardparlor.solitaire import (
    AutoplaySolver,
    SolitaireRules,
    SolitaireState,
    StateTransitionEngine,
    has_available_moves,
)

logger = logging.getLogger(__name__)


class SolitaireEngine(CardparlorEngine):
    """
    Engine implementation for the patience game.

    Holds the table of one session, validates intents against it and runs
    the autoplay heuristic one step at a time. The loss check runs after
    every user intent, but never while autoplay is active.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the patience engine and deal the first game.

        Args:
            config: Configuration options for the game (``rules``, ``seed``)
        """
        super().__init__(config)
        self.rules: SolitaireRules = self.config.get("rules") or SolitaireRules()
        self.solver = AutoplaySolver(self.rules)
        self.is_autoplaying = False
        self.autoplay_session = 0
        self.state: SolitaireState = None
        self.new_game()

    def new_game(self) -> None:
        """
        Stop autoplay and deal a new game.
        """
        self.stop_autoplay()
        super().new_game()
        self.solver.reset()
        with self.event_bus.deferred():
            self.state = StateTransitionEngine.new_game(self.rules, self.rng)

    def attempt_move(self, card: Card, source: PileRef, destination: PileRef) -> Result:
        """
        Move a card, and the cards stacked above it, to another pile.

        Args:
            card: Bottom card of the run to move
            source: Pile the run is taken from
            destination: Pile the run is placed on

        Returns:
            Result of the move
        """
        problem = StateTransitionEngine.check_move(self.state, card, source, destination)
        if problem is not None:
            return self._reject("move", Result.failure(ErrorCode.INVALID_MOVE, problem))

        with self.event_bus.deferred():
            self.state = StateTransitionEngine.move_cards(
                self.state, card, source, destination
            )
            self._check_game_over()
        return Result.success()

    def auto_move_to_foundation(self, card: Card, source: PileRef) -> Result:
        """
        Send a card to whichever foundation accepts it.

        Returns:
            Result of the move
        """
        with self.event_bus.deferred():
            new_state = StateTransitionEngine.try_auto_foundation(
                self.state, card, source
            )
            if new_state is self.state:
                return self._reject(
                    "auto_move",
                    Result.failure(
                        ErrorCode.INVALID_MOVE, f"No foundation accepts {card}"
                    ),
                )

            self.state = new_state
            self._check_game_over()
        return Result.success()

    def deal_from_stock(self) -> Result:
        """
        Deal one card from the stock, or recycle the waste.

        Returns:
            Result of the deal
        """
        if self.state.is_over:
            return self._reject(
                "deal", Result.failure(ErrorCode.ILLEGAL_ACTION, "The game is over")
            )

        with self.event_bus.deferred():
            new_state = StateTransitionEngine.deal_from_stock(self.state)
            if new_state is self.state:
                return self._reject(
                    "deal",
                    Result.failure(
                        ErrorCode.ILLEGAL_ACTION, "There are no cards left to deal"
                    ),
                )

            self.state = new_state
            self._check_game_over()
        return Result.success()

    def has_available_moves(self) -> bool:
        return has_available_moves(self.state)

    def _check_game_over(self) -> None:
        if self.is_autoplaying or self.state.is_over:
            return
        if not has_available_moves(self.state):
            self.state = StateTransitionEngine.mark_lost(self.state)

    def start_autoplay(self) -> Result:
        """
        Turn autoplay on.

        Each call opens a new autoplay session; steps scheduled for an older
        session are cancelled.

        Returns:
            Result of the request
        """
        if self.state.is_over:
            return self._reject(
                "start_autoplay",
                Result.failure(ErrorCode.ILLEGAL_ACTION, "The game is over"),
            )

        self.is_autoplaying = True
        self.autoplay_session += 1
        logger.debug(f"Autoplay session {self.autoplay_session} started")
        self.event_bus.emit(
            EngineEventType.AUTOPLAY_STARTED,
            {"game_id": self.state.id, "session": self.autoplay_session},
        )
        return Result.success()

    def stop_autoplay(self, reason: str = "stopped") -> None:
        """
        Turn autoplay off. Any step already scheduled will be cancelled.
        """
        if not self.is_autoplaying:
            return

        self.is_autoplaying = False
        logger.debug(f"Autoplay session {self.autoplay_session} ended: {reason}")
        self.event_bus.emit(
            EngineEventType.AUTOPLAY_STOPPED,
            {
                "game_id": self.state.id,
                "session": self.autoplay_session,
                "reason": reason,
            },
        )

    def autoplay_step(self, session: Optional[int] = None) -> ActionResult:
        """
        Perform exactly one autoplay action.

        Args:
            session: The autoplay session the caller was scheduled for. A step
                from an older session is cancelled.

        Returns:
            ACTED after an action, NO_ACTION_AVAILABLE when autoplay has run
            out of moves (autoplay is then stopped), CANCELLED if autoplay is
            off or the session is stale
        """
        if not self.is_autoplaying:
            return ActionResult.CANCELLED
        if session is not None and session != self.autoplay_session:
            return ActionResult.CANCELLED

        with self.event_bus.deferred():
            new_state, move = self.solver.step(self.state)
            if move is None:
                self.stop_autoplay("no_move")
                self._check_game_over()
                return ActionResult.NO_ACTION_AVAILABLE

            self.state = new_state
            if self.state.is_won:
                self.stop_autoplay("won")
        return ActionResult.ACTED
