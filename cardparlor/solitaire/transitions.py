"""
State transition functions for the patience game.

This module provides pure functions for transitioning between game states,
without modifying the original state objects. A transition that is not legal
returns the very same state object it was given, so callers can detect a
rejection with an identity check and no partial mutation is ever visible.
"""

from typing import Dict, Optional, Sequence
from dataclasses import replace
import logging
import random

from cardparlor.common.card import Card, Rank
from cardparlor.common.deck import Deck
from cardparlor.common.pile import Pile, PileKind, PileRef
from cardparlor.events import EventBus, EngineEventType
from cardparlor.solitaire.constants import (
    DECK_SIZE,
    FOUNDATION_COUNT,
    FOUNDATION_SIZE,
    TABLEAU_COUNT,
)
from cardparlor.solitaire.state import GameStage, SolitaireRules, SolitaireState

logger = logging.getLogger(__name__)


def _with_piles(state: SolitaireState, updates: Dict[PileRef, Pile]) -> dict:
    """Build the replace() arguments that swap in the updated piles."""
    foundations = list(state.foundations)
    tableau = list(state.tableau)
    changes = {}
    for ref, pile in updates.items():
        if ref.kind == PileKind.FOUNDATION:
            foundations[ref.index] = pile
        elif ref.kind == PileKind.TABLEAU:
            tableau[ref.index] = pile
        elif ref.kind == PileKind.WASTE:
            changes["waste"] = pile
        else:
            changes["stock"] = pile
    changes["foundations"] = tuple(foundations)
    changes["tableau"] = tuple(tableau)
    return changes


class StateTransitionEngine:
    """
    Pure functions for state transitions in the patience game.

    This class contains static methods that implement the move rules. Each
    transition takes a state and returns a new state, without modifying the
    original.
    """

    @staticmethod
    def new_game(
        rules: Optional[SolitaireRules] = None, rng: Optional[random.Random] = None
    ) -> SolitaireState:
        """
        Shuffle a fresh deck and deal the classic layout.

        Column i receives i + 1 cards with only the last one face-up; the
        remaining cards form the stock.

        Args:
            rules: Rules for the new game (defaults apply if None)
            rng: Random number generator used for the shuffle

        Returns:
            A new game state ready for play
        """
        deck = Deck(rng=rng).shuffle()

        columns = []
        for col in range(TABLEAU_COUNT):
            column = [deck.deal().flipped(row == col) for row in range(col + 1)]
            columns.append(Pile(tuple(column)))

        new_state = SolitaireState(
            stock=Pile(deck.as_tuple()),
            tableau=tuple(columns),
            rules=rules or SolitaireRules(),
        )

        logger.debug(f"Dealt new patience game {new_state.id}")
        event_bus = EventBus.get_instance()
        event_bus.emit(
            EngineEventType.GAME_CREATED,
            {
                "game_id": new_state.id,
                "game": "solitaire",
                "stock_size": len(new_state.stock),
                "timestamp": new_state.timestamp,
            },
        )

        return new_state

    @staticmethod
    def can_move_to_foundation(
        state: SolitaireState, card: Card, foundation_index: int
    ) -> bool:
        """
        Check whether a card may be placed on a foundation.

        An empty foundation accepts only an Ace; otherwise the card must
        follow the top card in suit and be exactly one rank higher.
        """
        top = state.foundations[foundation_index].top
        if top is None:
            return card.rank == Rank.ACE
        return card.suit == top.suit and card.value == top.value + 1

    @staticmethod
    def is_valid_move(
        state: SolitaireState, cards: Sequence[Card], destination: PileRef
    ) -> bool:
        """
        Check whether a run of cards may be placed on a destination pile.

        Args:
            state: Current game state
            cards: The run to move, bottom card first
            destination: Pile the run would land on

        Returns:
            True if the placement is legal
        """
        if not cards:
            return False

        first = cards[0]

        if destination.kind == PileKind.FOUNDATION:
            # Only single cards can move to a foundation
            if len(cards) > 1:
                return False
            return StateTransitionEngine.can_move_to_foundation(
                state, first, destination.index
            )

        if destination.kind == PileKind.TABLEAU:
            top = state.tableau[destination.index].top
            if top is None:
                return first.rank == Rank.KING
            return first.color != top.color and first.value == top.value - 1

        return False

    @staticmethod
    def check_move(
        state: SolitaireState, card: Card, source: PileRef, destination: PileRef
    ) -> Optional[str]:
        """
        Explain why a move cannot be made.

        Returns:
            None if the move is legal, otherwise a description of the problem
        """
        if state.is_over:
            return "The game is over"
        if source.kind not in (PileKind.WASTE, PileKind.TABLEAU):
            return "Cards can only be moved from the waste or the tableau"
        if source == destination:
            return "Source and destination are the same pile"

        pile = state.pile(source)
        index = pile.index_of(card)
        if index is None:
            return f"{card} is not in {source}"
        if not pile.cards[index].face_up:
            return f"{card} is face-down"
        if source.kind == PileKind.WASTE and index != len(pile) - 1:
            return "Only the top waste card can be played"

        if not StateTransitionEngine.is_valid_move(
            state, pile.cards[index:], destination
        ):
            return f"{card} cannot be placed on {destination}"
        return None

    @staticmethod
    def move_cards(
        state: SolitaireState, card: Card, source: PileRef, destination: PileRef
    ) -> SolitaireState:
        """
        Move a card, and every card stacked above it, to another pile.

        A face-down card exposed at the top of a tableau source is turned
        face-up.

        Args:
            state: Current game state
            card: The bottom card of the run to move
            source: Pile the run is taken from
            destination: Pile the run is placed on

        Returns:
            New game state after the move, or the original state if illegal
        """
        problem = StateTransitionEngine.check_move(state, card, source, destination)
        if problem is not None:
            logger.debug(f"Rejected move {card} {source} -> {destination}: {problem}")
            return state

        rules = state.rules
        from_pile = state.pile(source)
        remaining, run = from_pile.split_at(from_pile.index_of(card))
        to_pile = state.pile(destination).push(*run)

        score = state.score
        flipped = None
        if source.kind == PileKind.TABLEAU and remaining.top is not None:
            if not remaining.top.face_up:
                remaining = remaining.with_top_flipped()
                flipped = remaining.top
                score += rules.flip_points

        if destination.kind == PileKind.FOUNDATION:
            score += rules.foundation_points
        elif source.kind == PileKind.WASTE:
            score += rules.waste_to_tableau_points

        new_state = replace(
            state,
            **_with_piles(state, {source: remaining, destination: to_pile}),
            score=score,
            moves=state.moves + 1,
        )

        event_bus = EventBus.get_instance()
        event_bus.emit(
            EngineEventType.MOVE_EXECUTED,
            {
                "game_id": state.id,
                "cards": [moved.id for moved in run],
                "source": str(source),
                "destination": str(destination),
                "score": new_state.score,
                "moves": new_state.moves,
                "timestamp": new_state.timestamp,
            },
        )

        if flipped is not None:
            event_bus.emit(
                EngineEventType.CARD_FLIPPED,
                {
                    "game_id": state.id,
                    "card": flipped.id,
                    "column": source.index,
                    "timestamp": new_state.timestamp,
                },
            )

        if destination.kind == PileKind.FOUNDATION and len(to_pile) == FOUNDATION_SIZE:
            event_bus.emit(
                EngineEventType.FOUNDATION_COMPLETED,
                {
                    "game_id": state.id,
                    "foundation": destination.index,
                    "suit": to_pile.top.suit.name,
                    "timestamp": new_state.timestamp,
                },
            )

        if new_state.foundation_count == DECK_SIZE:
            new_state = replace(new_state, stage=GameStage.WON)
            logger.info(
                f"Game {state.id} won with score {new_state.score} in {new_state.moves} moves"
            )
            event_bus.emit(
                EngineEventType.GAME_WON,
                {
                    "game_id": state.id,
                    "score": new_state.score,
                    "moves": new_state.moves,
                    "timestamp": new_state.timestamp,
                },
            )

        return new_state

    @staticmethod
    def try_auto_foundation(
        state: SolitaireState, card: Card, source: PileRef
    ) -> SolitaireState:
        """
        Send a card to the first foundation that accepts it.

        Returns:
            New game state after the move, or the original state if no
            foundation accepts the card
        """
        for index in range(FOUNDATION_COUNT):
            destination = PileRef.foundation(index)
            if StateTransitionEngine.check_move(state, card, source, destination) is None:
                return StateTransitionEngine.move_cards(state, card, source, destination)
        return state

    @staticmethod
    def deal_from_stock(state: SolitaireState) -> SolitaireState:
        """
        Turn the next stock card onto the waste, or recycle the waste.

        When the stock is empty, the waste is turned back over into the stock
        face-down so that the cards are drawn again in their original order.

        Returns:
            New game state, or the original state if both piles are empty
        """
        if state.is_over:
            return state

        event_bus = EventBus.get_instance()

        if not state.stock.is_empty():
            stock, (card,) = state.stock.split_at(len(state.stock) - 1)
            card = card.flipped(True)
            new_state = replace(
                state,
                stock=stock,
                waste=state.waste.push(card),
                moves=state.moves + 1,
            )
            event_bus.emit(
                EngineEventType.STOCK_DEALT,
                {
                    "game_id": state.id,
                    "card": card.id,
                    "stock_size": len(new_state.stock),
                    "timestamp": new_state.timestamp,
                },
            )
            return new_state

        if not state.waste.is_empty():
            stock = Pile(tuple(card.flipped(False) for card in reversed(state.waste.cards)))
            new_state = replace(
                state, stock=stock, waste=Pile(), moves=state.moves + 1
            )
            logger.debug(f"Recycled {len(stock)} waste cards into the stock")
            event_bus.emit(
                EngineEventType.STOCK_RECYCLED,
                {
                    "game_id": state.id,
                    "stock_size": len(stock),
                    "timestamp": new_state.timestamp,
                },
            )
            return new_state

        return state

    @staticmethod
    def flip_tableau_top(state: SolitaireState, column: int) -> SolitaireState:
        """
        Turn a face-down tableau top card face-up.

        Args:
            state: Current game state
            column: Index of the tableau column

        Returns:
            New game state, or the original state if there is nothing to flip
        """
        pile = state.tableau[column]
        if state.is_over or pile.top is None or pile.top.face_up:
            return state

        pile = pile.with_top_flipped()
        new_state = replace(
            state,
            **_with_piles(state, {PileRef.tableau(column): pile}),
            score=state.score + state.rules.flip_points,
            moves=state.moves + 1,
        )

        event_bus = EventBus.get_instance()
        event_bus.emit(
            EngineEventType.CARD_FLIPPED,
            {
                "game_id": state.id,
                "card": pile.top.id,
                "column": column,
                "timestamp": new_state.timestamp,
            },
        )

        return new_state

    @staticmethod
    def mark_lost(state: SolitaireState) -> SolitaireState:
        """
        Record that no legal action remains.

        Returns:
            New game state in the LOST stage
        """
        if state.is_over:
            return state

        new_state = replace(state, stage=GameStage.LOST)
        logger.info(f"Game {state.id} lost with score {state.score}")
        event_bus = EventBus.get_instance()
        event_bus.emit(
            EngineEventType.GAME_LOST,
            {
                "game_id": state.id,
                "score": state.score,
                "moves": state.moves,
                "timestamp": new_state.timestamp,
            },
        )
        return new_state
