"""
State transition functions for the blackjack round engine.

This module provides pure functions for transitioning between table states,
without modifying the original state objects. Every intent has a matching
``check_*`` function that reports why it would be rejected; the transition
itself returns the original state unchanged in that case.
"""

from typing import Optional, Tuple
from dataclasses import replace
import logging
import math
import random

from cardparlor.common.card import Card
from cardparlor.common.deck import Deck
from cardparlor.common.result import ErrorCode, Result
from cardparlor.events import EventBus, EngineEventType
from cardparlor.blackjack.constants import BLACKJACK, PUSH_PAYOUT, WIN_PAYOUT
from cardparlor.blackjack.hand import BlackjackHand
from cardparlor.blackjack.state import (
    BlackjackRules,
    BlackjackState,
    Outcome,
    RoundStage,
)

logger = logging.getLogger(__name__)

_BETTING_STAGES = (RoundStage.IDLE, RoundStage.BET_PLACED)


def _draw(deck: Tuple[Card, ...]) -> Tuple[Card, Tuple[Card, ...]]:
    """Take the next card from a deck tuple."""
    return deck[-1].flipped(True), deck[:-1]


class StateTransitionEngine:
    """
    Pure functions for state transitions in blackjack.

    This class contains static methods that implement the round lifecycle.
    Each method takes a state and returns a new state, without modifying the
    original.
    """

    @staticmethod
    def new_game(rules: Optional[BlackjackRules] = None) -> BlackjackState:
        """
        Create a fresh table with the starting stake.

        Args:
            rules: Rules for the new game (defaults apply if None)

        Returns:
            New table state waiting for a bet
        """
        rules = rules or BlackjackRules()
        new_state = BlackjackState(chips=rules.starting_chips, rules=rules)

        event_bus = EventBus.get_instance()
        event_bus.emit(
            EngineEventType.GAME_CREATED,
            {
                "game_id": new_state.id,
                "game": "blackjack",
                "chips": new_state.chips,
                "timestamp": new_state.timestamp,
            },
        )

        return new_state

    @staticmethod
    def check_place_bet(state: BlackjackState, amount: int) -> Optional[Result]:
        if state.stage not in _BETTING_STAGES:
            return Result.failure(
                ErrorCode.ILLEGAL_ACTION, "Bets can only be placed between rounds"
            )
        if isinstance(amount, bool) or not isinstance(amount, int):
            return Result.failure(
                ErrorCode.ILLEGAL_ACTION, "Bets must be a whole number of chips"
            )
        if amount < 0:
            return Result.failure(ErrorCode.ILLEGAL_ACTION, "Bets cannot be negative")
        if amount > state.chips:
            return Result.failure(ErrorCode.INSUFFICIENT_FUNDS, "Insufficient chips!")
        return None

    @staticmethod
    def place_bet(state: BlackjackState, amount: int) -> BlackjackState:
        """
        Set the bet for the next round.

        Args:
            state: Current table state
            amount: Amount to bet (0 clears the bet)

        Returns:
            New table state with the bet placed
        """
        if StateTransitionEngine.check_place_bet(state, amount) is not None:
            return state

        new_state = replace(
            state,
            bet=amount,
            stage=RoundStage.BET_PLACED if amount > 0 else RoundStage.IDLE,
        )

        event_bus = EventBus.get_instance()
        event_bus.emit(
            EngineEventType.PLAYER_BET,
            {
                "game_id": state.id,
                "amount": amount,
                "chips": state.chips,
                "timestamp": new_state.timestamp,
            },
        )

        return new_state

    @staticmethod
    def check_deal(state: BlackjackState) -> Optional[Result]:
        if state.stage not in _BETTING_STAGES:
            return Result.failure(ErrorCode.ILLEGAL_ACTION, "A round is already in play")
        if state.bet == 0:
            return Result.failure(ErrorCode.NO_BET_PLACED, "Please place a bet first!")
        if state.bet > state.chips:
            return Result.failure(ErrorCode.INSUFFICIENT_FUNDS, "Insufficient chips!")
        return None

    @staticmethod
    def deal(
        state: BlackjackState, rng: Optional[random.Random] = None
    ) -> BlackjackState:
        """
        Shuffle a fresh deck, take the stake and deal the opening hands.

        Cards go player, dealer, player, dealer. A player total of 21 stands
        immediately.

        Args:
            state: Current table state
            rng: Random number generator used for the shuffle

        Returns:
            New table state in the player's turn (or the dealer's turn)
        """
        if StateTransitionEngine.check_deal(state) is not None:
            return state

        deck = Deck(rng=rng).shuffle().as_tuple()
        player = BlackjackHand()
        dealer = BlackjackHand()
        event_bus = EventBus.get_instance()

        for to_dealer in (False, True, False, True):
            card, deck = _draw(deck)
            if to_dealer:
                dealer = dealer.add_card(card)
            else:
                player = player.add_card(card)
            # The dealer's first card is the hole card
            is_hole_card = to_dealer and len(dealer) == 1
            event_bus.emit(
                EngineEventType.CARD_DEALT,
                {
                    "game_id": state.id,
                    "is_dealer": to_dealer,
                    "card": None if is_hole_card else card.id,
                    "is_hole_card": is_hole_card,
                },
            )

        new_state = replace(
            state,
            chips=state.chips - state.bet,
            stage=RoundStage.PLAYER_TURN,
            deck=deck,
            player=player,
            dealer=dealer,
            dealer_revealed=False,
            can_double=True,
            outcome=None,
            payout=0,
        )
        logger.debug(
            f"Dealt round with bet {state.bet}: player {player.value}, chips {new_state.chips}"
        )

        if player.value == BLACKJACK:
            return StateTransitionEngine.stand(new_state)
        return new_state

    @staticmethod
    def check_hit(state: BlackjackState) -> Optional[Result]:
        if state.stage != RoundStage.PLAYER_TURN:
            return Result.failure(ErrorCode.ILLEGAL_ACTION, "It is not the player's turn")
        return None

    @staticmethod
    def hit(state: BlackjackState) -> BlackjackState:
        """
        Draw one card to the player's hand.

        A bust ends the round, 21 stands automatically, and any other total
        takes double-down off the table.

        Returns:
            New table state after the draw
        """
        if StateTransitionEngine.check_hit(state) is not None:
            return state

        card, deck = _draw(state.deck)
        player = state.player.add_card(card)
        new_state = replace(state, deck=deck, player=player)

        event_bus = EventBus.get_instance()
        event_bus.emit(
            EngineEventType.PLAYER_ACTION,
            {"game_id": state.id, "action": "HIT", "card": card.id, "value": player.value},
        )

        if player.is_bust:
            return StateTransitionEngine._settle(new_state, Outcome.BUST)
        if player.value == BLACKJACK:
            return StateTransitionEngine.stand(new_state)
        return replace(new_state, can_double=False)

    @staticmethod
    def check_double_down(state: BlackjackState) -> Optional[Result]:
        if state.stage != RoundStage.PLAYER_TURN:
            return Result.failure(ErrorCode.ILLEGAL_ACTION, "It is not the player's turn")
        if not state.can_double or len(state.player) != 2:
            return Result.failure(
                ErrorCode.ILLEGAL_ACTION, "Double down is only allowed as the first action"
            )
        if state.bet > state.chips:
            return Result.failure(
                ErrorCode.INSUFFICIENT_FUNDS, "Insufficient chips to double down!"
            )
        return None

    @staticmethod
    def double_down(state: BlackjackState) -> BlackjackState:
        """
        Double the bet, draw exactly one card and stand.

        Returns:
            New table state in the dealer's turn, or resolved on a bust
        """
        if StateTransitionEngine.check_double_down(state) is not None:
            return state

        card, deck = _draw(state.deck)
        player = state.player.add_card(card)
        new_state = replace(
            state,
            chips=state.chips - state.bet,
            bet=state.bet * 2,
            deck=deck,
            player=player,
            can_double=False,
        )

        event_bus = EventBus.get_instance()
        event_bus.emit(
            EngineEventType.PLAYER_ACTION,
            {
                "game_id": state.id,
                "action": "DOUBLE",
                "card": card.id,
                "value": player.value,
                "bet": new_state.bet,
            },
        )

        if player.is_bust:
            return StateTransitionEngine._settle(new_state, Outcome.BUST)
        return StateTransitionEngine.stand(new_state)

    @staticmethod
    def check_stand(state: BlackjackState) -> Optional[Result]:
        return StateTransitionEngine.check_hit(state)

    @staticmethod
    def stand(state: BlackjackState) -> BlackjackState:
        """
        End the player's turn and reveal the dealer's hand.

        Returns:
            New table state in the dealer's turn
        """
        if StateTransitionEngine.check_stand(state) is not None:
            return state

        new_state = replace(
            state,
            stage=RoundStage.DEALER_TURN,
            dealer_revealed=True,
            can_double=False,
        )

        event_bus = EventBus.get_instance()
        event_bus.emit(
            EngineEventType.CARD_REVEALED,
            {
                "game_id": state.id,
                "card": state.dealer.cards[0].id,
                "dealer_value": state.dealer.value,
            },
        )

        return new_state

    @staticmethod
    def dealer_step(state: BlackjackState) -> BlackjackState:
        """
        Play one step of the fixed dealer strategy.

        The dealer draws while below the stand value and stands on every 17,
        soft or hard. Standing resolves the round.

        Returns:
            New table state, or the original state outside the dealer's turn
        """
        if state.stage != RoundStage.DEALER_TURN:
            return state

        event_bus = EventBus.get_instance()

        if state.dealer.value < state.rules.dealer_stand_value:
            card, deck = _draw(state.deck)
            dealer = state.dealer.add_card(card)
            new_state = replace(state, deck=deck, dealer=dealer)
            event_bus.emit(
                EngineEventType.DEALER_ACTION,
                {"game_id": state.id, "action": "HIT", "card": card.id, "value": dealer.value},
            )
            return new_state

        event_bus.emit(
            EngineEventType.DEALER_ACTION,
            {"game_id": state.id, "action": "STAND", "value": state.dealer.value},
        )
        return StateTransitionEngine._settle(
            state, StateTransitionEngine.determine_outcome(state)
        )

    @staticmethod
    def determine_outcome(state: BlackjackState) -> Outcome:
        """Compare the finished hands once the dealer has stopped drawing."""
        player_value = state.player.value
        dealer_value = state.dealer.value

        if dealer_value > BLACKJACK:
            outcome = Outcome.DEALER_BUST
        elif player_value > dealer_value:
            outcome = Outcome.WIN
        elif player_value < dealer_value:
            return Outcome.LOSS
        else:
            return Outcome.PUSH

        if state.player.is_natural:
            return Outcome.BLACKJACK
        return outcome

    @staticmethod
    def payout_for(outcome: Outcome, bet: int, rules: BlackjackRules) -> int:
        """Chips returned to the player for an outcome, stake included."""
        if outcome == Outcome.BLACKJACK:
            return math.floor(bet * rules.blackjack_payout)
        if outcome.is_win:
            return bet * WIN_PAYOUT
        if outcome == Outcome.PUSH:
            return bet * PUSH_PAYOUT
        return 0

    @staticmethod
    def _settle(state: BlackjackState, outcome: Outcome) -> BlackjackState:
        """Pay out and close the round."""
        payout = StateTransitionEngine.payout_for(outcome, state.bet, state.rules)
        new_state = replace(
            state,
            chips=state.chips + payout,
            stage=RoundStage.RESOLVED,
            dealer_revealed=True,
            can_double=False,
            outcome=outcome,
            payout=payout,
            rounds_played=state.rounds_played + 1,
        )

        logger.info(
            f"Round resolved: {outcome.value}, bet {state.bet}, payout {payout}, chips {new_state.chips}"
        )

        event_bus = EventBus.get_instance()
        if outcome == Outcome.BUST:
            event_bus.emit(
                EngineEventType.HAND_BUSTED,
                {"game_id": state.id, "value": state.player.value},
            )
        event_bus.emit(
            EngineEventType.ROUND_RESOLVED,
            {
                "game_id": state.id,
                "outcome": outcome.value,
                "message": outcome.message,
                "bet": state.bet,
                "payout": payout,
                "player_value": state.player.value,
                "dealer_value": state.dealer.value,
                "timestamp": new_state.timestamp,
            },
        )
        event_bus.emit(
            EngineEventType.BANKROLL_UPDATED,
            {"game_id": state.id, "chips": new_state.chips},
        )

        return new_state

    @staticmethod
    def finish_round(state: BlackjackState) -> BlackjackState:
        """
        Return a resolved table to betting.

        A player with no chips left gets a fresh stake and the round counter
        is cleared.

        Returns:
            New table state ready for the next bet
        """
        if state.stage != RoundStage.RESOLVED:
            return state

        if state.chips <= 0:
            new_state = BlackjackState(
                id=state.id,
                chips=state.rules.starting_chips,
                rules=state.rules,
            )
            logger.info(f"Game {state.id} out of chips, restoring stake")
            event_bus = EventBus.get_instance()
            event_bus.emit(
                EngineEventType.GAME_RESET,
                {
                    "game_id": state.id,
                    "chips": new_state.chips,
                    "timestamp": new_state.timestamp,
                },
            )
            return new_state

        return replace(state, stage=RoundStage.IDLE, bet=0)
