"""Display helpers shared by the terminal and pygame front-ends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .game.board import COLUMN, FOUNDATION, FREE_CELL, Card, Move, Selection
from .game.rules import SELECTED, SELECTABLE, Game


RANK_LABELS = {1: "A", 11: "J", 12: "Q", 13: "K"}
SUIT_GLYPHS = {1: "♠", 2: "♦", 3: "♣", 4: "♥"}
SUIT_COLORS = {1: "black", 2: "red", 3: "black", 4: "red"}


class CardValueError(ValueError):
    pass


def rank_label(rank: int) -> str:
    if not 1 <= rank <= 13:
        raise CardValueError(f"Unexpected card value: {rank}")
    return RANK_LABELS.get(rank, str(rank))


def suit_glyph(suit: int) -> str:
    try:
        return SUIT_GLYPHS[suit]
    except KeyError as exc:
        raise CardValueError(f"Unexpected card suit: {suit}") from exc


def suit_color(suit: int) -> str:
    try:
        return SUIT_COLORS[suit]
    except KeyError as exc:
        raise CardValueError(f"Unexpected card suit: {suit}") from exc


def card_label(card: Card) -> str:
    return rank_label(card.rank) + suit_glyph(card.suit)


@dataclass(frozen=True)
class CellView:
    selection: Selection
    card: Optional[Card]
    highlight: Optional[str] = None


@dataclass(frozen=True)
class BoardView:
    free_cells: List[CellView]
    foundations: List[CellView]
    columns: List[List[CellView]]


def _cell(game: Game, selection: Selection) -> CellView:
    card = game.position.card_at(selection)
    return CellView(
        selection=selection,
        card=card if card.is_real else None,
        highlight=game.highlights.get(selection),
    )


def board_view(game: Game) -> BoardView:
    # Every slot with its card (None when empty) and highlight state
    position = game.position
    free_cells = [_cell(game, Selection(FREE_CELL, i, 0)) for i in range(position.num_free_cells)]
    foundations = [_cell(game, position.foundation_top(i)) for i in range(len(position.foundations))]
    columns = []
    for i, column in enumerate(position.columns):
        cells = [_cell(game, Selection(COLUMN, i, row)) for row in range(len(column))]
        columns.append(cells)
    return BoardView(free_cells=free_cells, foundations=foundations, columns=columns)


def _format_cell(cell: CellView) -> str:
    marker = " "
    if cell.highlight == SELECTED:
        marker = ">"
    elif cell.highlight == SELECTABLE:
        marker = "*"
    label = card_label(cell.card) if cell.card is not None else "  "
    return f"{marker}[{label:>3}]"


def render_text(game: Game) -> str:
    view = board_view(game)
    lines = []
    cells = " ".join(f"f{i}{_format_cell(cell)}" for i, cell in enumerate(view.free_cells))
    piles = " ".join(f"h{i}{_format_cell(cell)}" for i, cell in enumerate(view.foundations))
    lines.append(f"{cells}    {piles}")
    lines.append("")
    lines.append(" ".join(f"   c{i:<4}" for i in range(len(view.columns))))

    # Row 0 of every column is its empty base; show it only for empty columns
    height = max(len(column) for column in view.columns)
    for row in range(height):
        parts = []
        for column in view.columns:
            if row < len(column) and (row > 0 or len(column) == 1):
                parts.append(f"{_format_cell(column[row]):>8}")
            else:
                parts.append(" " * 8)
        lines.append(" ".join(parts).rstrip())
    return "\n".join(lines)


def describe_selection(selection: Selection) -> str:
    if selection.location == FREE_CELL:
        return f"free cell {selection.column}"
    if selection.location == FOUNDATION:
        return f"foundation {selection.column}"
    return f"column {selection.column}"


def describe_move(move: Move) -> str:
    source, destination = move
    return f"{describe_selection(source)} -> {describe_selection(destination)}"
