"""
Tests for the SolitaireEngine class.

This module contains tests for the SolitaireEngine class to ensure it
validates intents, runs the loss check and drives autoplay one step at a
time.
"""

import pytest

from cardparlor.common.card import Card, Rank, Suit
from cardparlor.common.pile import Pile, PileRef
from cardparlor.common.result import ActionResult, ErrorCode
from cardparlor.engine import SolitaireEngine
from cardparlor.events import EngineEventType
from cardparlor.solitaire import GameStage, SolitaireState


def up(rank, suit):
    return Card(suit, rank, face_up=True)


def table(tableau=None, waste=(), stock=(), foundations=None):
    columns = [Pile(tuple(column)) for column in (tableau or [])]
    columns += [Pile()] * (7 - len(columns))
    piles = [Pile(tuple(pile)) for pile in (foundations or [])]
    piles += [Pile()] * (4 - len(piles))
    return SolitaireState(
        stock=Pile(tuple(stock)),
        waste=Pile(tuple(waste)),
        foundations=tuple(piles),
        tableau=tuple(columns),
    )


BLOCKERS = [
    [up(Rank.FIVE, Suit.SPADES)],
    [up(Rank.FIVE, Suit.CLUBS)],
    [up(Rank.NINE, Suit.SPADES)],
    [up(Rank.NINE, Suit.CLUBS)],
    [up(Rank.JACK, Suit.SPADES)],
    [up(Rank.JACK, Suit.CLUBS)],
]


def last_move_table():
    """One move away from a stuck table."""
    return table(
        tableau=[[up(Rank.TWO, Suit.HEARTS)]] + BLOCKERS,
        foundations=[[up(Rank.ACE, Suit.HEARTS)]],
    )


def almost_won_table():
    suits = [[up(rank, suit) for rank in Rank] for suit in Suit]
    suits[-1] = suits[-1][:-1]
    return table(tableau=[[up(Rank.KING, Suit.SPADES)]], foundations=suits)


@pytest.fixture
def engine():
    return SolitaireEngine({"seed": 42})


def test_initialization(engine):
    assert engine.state is not None
    assert engine.get_state() is engine.state
    assert engine.generation == 1
    assert not engine.is_autoplaying
    assert len(engine.state.all_cards()) == 52


def test_seed_reproduces_deal():
    first = SolitaireEngine({"seed": 7})
    second = SolitaireEngine({"seed": 7})
    assert first.state.tableau == second.state.tableau


def test_render_state(engine):
    rendered = engine.render_state()
    assert rendered["stage"] == "PLAYING"
    assert len(rendered["tableau"]) == 7


def test_new_game_replaces_state(engine):
    old_state = engine.state
    engine.new_game()
    assert engine.state.id != old_state.id
    assert engine.generation == 2


def test_invalid_move_rejected(engine, event_names):
    engine.state = table(
        tableau=[[up(Rank.SIX, Suit.CLUBS)], [up(Rank.SEVEN, Suit.SPADES)]]
    )
    before = engine.state

    result = engine.attempt_move(
        up(Rank.SIX, Suit.CLUBS), PileRef.tableau(0), PileRef.tableau(1)
    )

    assert not result
    assert result.error == ErrorCode.INVALID_MOVE
    assert result.message
    assert engine.state is before
    assert event_names() == [EngineEventType.ACTION_REJECTED.name]


def test_valid_move(engine):
    engine.state = table(
        tableau=[[up(Rank.SIX, Suit.HEARTS)], [up(Rank.SEVEN, Suit.SPADES)]],
        stock=[Card(Suit.CLUBS, Rank.TWO)],
    )

    result = engine.attempt_move(
        up(Rank.SIX, Suit.HEARTS), PileRef.tableau(0), PileRef.tableau(1)
    )

    assert result
    assert len(engine.state.tableau[1]) == 2
    assert engine.state.stage == GameStage.PLAYING


def test_move_into_stuck_table_loses(engine, event_names):
    engine.state = last_move_table()

    result = engine.attempt_move(
        up(Rank.TWO, Suit.HEARTS), PileRef.tableau(0), PileRef.foundation(0)
    )

    assert result
    assert engine.state.stage == GameStage.LOST
    assert event_names()[-1] == EngineEventType.GAME_LOST.name


def test_auto_move_to_foundation(engine):
    engine.state = last_move_table()
    result = engine.auto_move_to_foundation(up(Rank.TWO, Suit.HEARTS), PileRef.tableau(0))
    assert result
    assert len(engine.state.foundations[0]) == 2


def test_auto_move_without_target(engine):
    engine.state = last_move_table()
    result = engine.auto_move_to_foundation(up(Rank.FIVE, Suit.SPADES), PileRef.tableau(1))
    assert result.error == ErrorCode.INVALID_MOVE


def test_deal_from_stock(engine):
    stock_size = len(engine.state.stock)
    assert engine.deal_from_stock()
    assert len(engine.state.stock) == stock_size - 1
    assert len(engine.state.waste) == 1


def test_deal_from_empty_stock(engine):
    engine.state = table(tableau=[[up(Rank.KING, Suit.SPADES)], [Card(Suit.CLUBS, Rank.TWO)]])
    result = engine.deal_from_stock()
    assert result.error == ErrorCode.ILLEGAL_ACTION


def test_deal_after_game_over(engine):
    engine.state = SolitaireState(stage=GameStage.LOST)
    result = engine.deal_from_stock()
    assert result.error == ErrorCode.ILLEGAL_ACTION
    assert result.message == "The game is over"


def test_handlers_see_the_stored_move(engine):
    engine.state = table(
        tableau=[[up(Rank.QUEEN, Suit.HEARTS)], [up(Rank.KING, Suit.SPADES)]],
        stock=[Card(Suit.CLUBS, Rank.TWO)],
    )
    seen = []
    engine.event_bus.on(
        EngineEventType.MOVE_EXECUTED, lambda _: seen.append(engine.get_state().moves)
    )

    engine.attempt_move(
        up(Rank.QUEEN, Suit.HEARTS), PileRef.tableau(0), PileRef.tableau(1)
    )

    assert seen == [1]
    assert engine.state.moves == 1


def test_intent_from_a_handler_is_kept(engine):
    engine.state = table(
        tableau=[[up(Rank.QUEEN, Suit.HEARTS)], [up(Rank.KING, Suit.SPADES)]],
        stock=[Card(Suit.CLUBS, Rank.TWO)],
    )
    engine.event_bus.once(EngineEventType.MOVE_EXECUTED, lambda _: engine.deal_from_stock())

    engine.attempt_move(
        up(Rank.QUEEN, Suit.HEARTS), PileRef.tableau(0), PileRef.tableau(1)
    )

    assert len(engine.state.tableau[1]) == 2
    assert len(engine.state.waste) == 1
    assert engine.state.moves == 2


def test_has_available_moves(engine):
    assert engine.has_available_moves()
    engine.state = table(tableau=BLOCKERS + [[up(Rank.THREE, Suit.SPADES)]])
    assert not engine.has_available_moves()


def test_winning_move(engine):
    engine.state = almost_won_table()
    result = engine.attempt_move(
        up(Rank.KING, Suit.SPADES), PileRef.tableau(0), PileRef.foundation(3)
    )
    assert result
    assert engine.state.is_won


class TestAutoplay:
    """Tests for stepping autoplay from an external scheduler."""

    def test_step_when_off(self, engine):
        assert engine.autoplay_step() == ActionResult.CANCELLED

    def test_start_and_step(self, engine, event_names):
        assert engine.start_autoplay()
        assert engine.is_autoplaying
        before = engine.state

        assert engine.autoplay_step(engine.autoplay_session) == ActionResult.ACTED
        assert engine.state is not before
        assert EngineEventType.AUTOPLAY_STARTED.name in event_names()

    def test_stop_cancels_scheduled_step(self, engine, event_names):
        engine.start_autoplay()
        session = engine.autoplay_session
        engine.stop_autoplay()

        before = engine.state
        assert engine.autoplay_step(session) == ActionResult.CANCELLED
        assert engine.state is before
        assert event_names()[-1] == EngineEventType.AUTOPLAY_STOPPED.name

    def test_stale_session_cancelled(self, engine):
        engine.start_autoplay()
        stale = engine.autoplay_session
        engine.stop_autoplay()
        engine.start_autoplay()
        assert engine.autoplay_step(stale) == ActionResult.CANCELLED
        assert engine.autoplay_step(engine.autoplay_session) == ActionResult.ACTED

    def test_new_game_stops_autoplay(self, engine):
        engine.start_autoplay()
        session = engine.autoplay_session
        engine.new_game()
        assert not engine.is_autoplaying
        assert engine.autoplay_step(session) == ActionResult.CANCELLED

    def test_no_move_stops_and_checks_loss(self, engine):
        engine.state = table(tableau=BLOCKERS + [[up(Rank.THREE, Suit.SPADES)]])
        engine.start_autoplay()

        assert engine.autoplay_step() == ActionResult.NO_ACTION_AVAILABLE
        assert not engine.is_autoplaying
        assert engine.state.stage == GameStage.LOST

    def test_loss_check_skipped_while_autoplaying(self, engine):
        engine.state = last_move_table()
        engine.start_autoplay()

        engine.attempt_move(
            up(Rank.TWO, Suit.HEARTS), PileRef.tableau(0), PileRef.foundation(0)
        )

        assert engine.state.stage == GameStage.PLAYING

    def test_autoplay_wins(self, engine, recorded_events):
        engine.state = almost_won_table()
        engine.start_autoplay()

        assert engine.autoplay_step() == ActionResult.ACTED
        assert engine.state.is_won
        assert not engine.is_autoplaying
        stopped = [
            data
            for event_type, data in recorded_events
            if event_type == EngineEventType.AUTOPLAY_STOPPED.name
        ]
        assert stopped[-1]["reason"] == "won"

    def test_cannot_start_on_finished_game(self, engine):
        engine.state = almost_won_table()
        engine.attempt_move(
            up(Rank.KING, Suit.SPADES), PileRef.tableau(0), PileRef.foundation(3)
        )
        result = engine.start_autoplay()
        assert result.error == ErrorCode.ILLEGAL_ACTION
        assert not engine.is_autoplaying

    def test_autoplay_runs_to_a_stop(self, engine):
        engine.start_autoplay()
        for _ in range(5000):
            if engine.autoplay_step() != ActionResult.ACTED:
                break
            cards = engine.state.all_cards()
            assert len(cards) == 52
            assert len({card.id for card in cards}) == 52
            for pile in engine.state.tableau:
                start = pile.face_up_start
                assert all(card.face_up for card in pile.cards[start:])
                assert not any(card.face_up for card in pile.cards[:start])
        assert engine.state.moves > 0
