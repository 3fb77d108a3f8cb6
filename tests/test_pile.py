import pytest

from cardparlor.common.card import Card, Rank, Suit
from cardparlor.common.pile import Pile, PileKind, PileRef


def make_pile(*face_up_flags):
    ranks = list(Rank)
    return Pile(
        tuple(
            Card(Suit.SPADES, ranks[i], face_up=flag)
            for i, flag in enumerate(face_up_flags)
        )
    )


def test_pile_ref_constructors():
    assert PileRef.foundation(3) == PileRef(PileKind.FOUNDATION, 3)
    assert PileRef.tableau(0).kind == PileKind.TABLEAU
    assert PileRef.waste().index is None
    assert PileRef.stock().kind == PileKind.STOCK


@pytest.mark.parametrize(
    "kind, index",
    [
        (PileKind.FOUNDATION, 4),
        (PileKind.FOUNDATION, -1),
        (PileKind.TABLEAU, 7),
        (PileKind.TABLEAU, None),
        (PileKind.WASTE, 0),
        (PileKind.STOCK, 2),
    ],
)
def test_pile_ref_rejects_bad_index(kind, index):
    with pytest.raises(ValueError):
        PileRef(kind, index)


def test_pile_ref_str():
    assert str(PileRef.tableau(3)) == "tableau[3]"
    assert str(PileRef.waste()) == "waste"


def test_empty_pile():
    pile = Pile()
    assert pile.is_empty()
    assert pile.top is None
    assert len(pile) == 0
    assert pile.face_up_start == 0


def test_push_returns_new_pile():
    pile = Pile()
    card = Card(Suit.HEARTS, Rank.ACE)
    pushed = pile.push(card)
    assert pile.is_empty()
    assert pushed.top == card
    assert len(pushed) == 1


def test_index_of():
    pile = make_pile(False, True, True)
    assert pile.index_of(Card(Suit.SPADES, Rank.TWO)) == 1
    assert pile.index_of(Card(Suit.HEARTS, Rank.TWO)) is None


def test_split_at():
    pile = make_pile(False, True, True)
    remaining, run = pile.split_at(1)
    assert len(remaining) == 1
    assert [card.rank for card in run] == [Rank.TWO, Rank.THREE]
    assert len(pile) == 3


def test_face_up_start():
    assert make_pile(False, False, True, True).face_up_start == 2
    assert make_pile(False, False).face_up_start == 2
    assert make_pile(True, True).face_up_start == 0


def test_with_top_flipped():
    pile = make_pile(True, False)
    flipped = pile.with_top_flipped()
    assert flipped.top.face_up
    assert not pile.top.face_up
    assert Pile().with_top_flipped() == Pile()
