"""Compact card codes and the symmetry-collapsing position key.

Every card is written as two characters, one for the rank and one for the
suit. The search key sorts free cells and columns before encoding them, so
positions that only differ by which free cell or which column holds what
collapse onto the same key.
"""

from __future__ import annotations

from typing import Iterable, List

from .game.board import Card, Position


# fmt: off
# Sentinel, A..K, then reserved symbols
RANK_CODES = "0A23456789TJQKabcdefgh"
# Sentinel, spades, diamonds, clubs, hearts
SUIT_CODES = "zsdch"
# fmt: on

SECTION_SEPARATOR = " | "
PILE_SEPARATOR = ","


def card_code(card: Card) -> str:
    """Return the two-character code for ``card``."""

    try:
        return RANK_CODES[card.rank] + SUIT_CODES[card.suit]
    except IndexError as exc:
        raise ValueError(f"Card outside the code alphabet: {card}") from exc


def parse_card_code(code: str) -> Card:
    if len(code) != 2:
        raise ValueError(f"Card codes are two characters, got {code!r}")
    rank = RANK_CODES.find(code[0])
    suit = SUIT_CODES.find(code[1])
    if rank < 0 or suit < 0:
        raise ValueError(f"Unknown card code: {code!r}")
    return Card(rank, suit)


def encode_pile(cards: Iterable[Card]) -> str:
    return "".join(card_code(card) for card in cards)


def canonical_key(position: Position) -> str:
    # Free cells and columns are fungible slots; foundations keep suit order
    cells = sorted(position.free_cells, key=lambda card: card.sort_value, reverse=True)
    columns: List[List[Card]] = sorted(
        position.columns, key=lambda column: column[-1].sort_value, reverse=True
    )
    return SECTION_SEPARATOR.join(
        [
            encode_pile(cells),
            PILE_SEPARATOR.join(encode_pile(pile) for pile in position.foundations),
            PILE_SEPARATOR.join(encode_pile(column) for column in columns),
        ]
    )
