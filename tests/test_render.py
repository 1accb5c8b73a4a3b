import pytest

from builders import card, make_game, make_position
from suitcell.game.board import COLUMN, FOUNDATION, FREE_CELL, Selection
from suitcell.game.rules import SELECTABLE, SELECTED
from suitcell.render import (
    CardValueError,
    board_view,
    card_label,
    describe_move,
    rank_label,
    render_text,
    suit_color,
    suit_glyph,
)


def test_rank_labels():
    assert [rank_label(rank) for rank in range(1, 14)] == [
        "A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K",
    ]


def test_suit_glyphs_and_colors():
    assert [suit_glyph(suit) for suit in range(1, 5)] == ["♠", "♦", "♣", "♥"]
    assert [suit_color(suit) for suit in range(1, 5)] == ["black", "red", "black", "red"]
    assert card_label(card("Th")) == "10♥"


@pytest.mark.parametrize("rank", [0, 14, -1])
def test_out_of_range_rank_fails_closed(rank):
    with pytest.raises(CardValueError):
        rank_label(rank)


@pytest.mark.parametrize("suit", [0, 5])
def test_out_of_range_suit_fails_closed(suit):
    with pytest.raises(CardValueError):
        suit_glyph(suit)
    with pytest.raises(CardValueError):
        suit_color(suit)


def test_board_view_hides_sentinels_and_carries_highlights():
    game = make_game(make_position([["Kc", "Qc"], []], free_cells=["5d"], foundations=(2, 0, 0, 0)))
    source = game.position.column_top(0)
    game.select(source)

    view = board_view(game)

    assert [cell.card for cell in view.free_cells] == [card("5d"), None, None, None]
    assert view.free_cells[1].highlight == SELECTABLE
    assert view.foundations[0].card == card("2s")
    assert view.foundations[1].card is None
    assert view.foundations[0].selection == Selection(FOUNDATION, 0, 2)
    assert [cell.card for cell in view.columns[0]] == [None, card("Kc"), card("Qc")]
    assert view.columns[0][2].highlight == SELECTED
    assert view.columns[1][0].highlight == SELECTABLE


def test_render_text_marks_selectable_cards():
    game = make_game(make_position([["Kc", "Qc"], ["9h"]], free_cells=["5d"]))
    text = render_text(game)

    assert "f0" in text and "c1" in text
    assert "h0 [   ]" in text and "h3 [   ]" in text
    assert "*[ Q♣]" in text
    assert "*[ 9♥]" in text
    assert " [ K♣]" in text


def test_describe_move():
    move = (Selection(COLUMN, 3, 5), Selection(FREE_CELL, 1, 0))
    assert describe_move(move) == "column 3 -> free cell 1"
