"""
Pytest configuration for tests at the root level.

This module contains pytest fixtures shared by the patience, blackjack and
engine tests.
"""

import pytest

from cardparlor.common.card import Card, Suit
from cardparlor.blackjack import BlackjackHand, BlackjackState, RoundStage
from cardparlor.events import EventBus


class StackedRandom:
    """
    Stands in for random.Random when dealing: instead of shuffling, moves
    the given cards to the top of the deck so they are drawn in order.
    """

    def __init__(self, draws):
        self.draws = list(draws)

    def shuffle(self, cards):
        for card in self.draws:
            cards.remove(card)
        cards.extend(reversed(self.draws))


def _card(rank, suit):
    return Card(suit, rank, face_up=True)


# Reset event bus before each test
@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None


@pytest.fixture
def recorded_events():
    """Record every event published on the bus as (event_type, data) pairs."""
    events = []
    EventBus.get_instance().on_any(events.append)
    return events


@pytest.fixture
def event_names(recorded_events):
    """Return a function listing the names of the events recorded so far."""
    return lambda: [event_type for event_type, _ in recorded_events]


@pytest.fixture
def stacked_rng():
    """Return a factory for generators that deal the given ranks in order."""

    def factory(*ranks):
        seen = {}
        draws = []
        for rank in ranks:
            # Use a different suit for repeated ranks
            index = seen.get(rank, 0)
            seen[rank] = index + 1
            draws.append(Card(list(Suit)[index], rank))
        return StackedRandom(draws)

    return factory


@pytest.fixture
def table_in_play():
    """
    Return a factory for a blackjack table in the player's turn.

    The deck is given in draw order.
    """

    def factory(player, dealer, deck=(), bet=100, chips=900, **kwargs):
        return BlackjackState(
            chips=chips,
            bet=bet,
            stage=kwargs.pop("stage", RoundStage.PLAYER_TURN),
            deck=tuple(_card(rank, Suit.CLUBS) for rank in reversed(deck)),
            player=BlackjackHand(tuple(_card(rank, Suit.SPADES) for rank in player)),
            dealer=BlackjackHand(tuple(_card(rank, Suit.HEARTS) for rank in dealer)),
            can_double=kwargs.pop("can_double", len(player) == 2),
            **kwargs,
        )

    return factory
