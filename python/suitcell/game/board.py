from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple


FREE_CELL = "free_cell"
COLUMN = "column"
FOUNDATION = "foundation"
LOCATIONS = (FREE_CELL, COLUMN, FOUNDATION)

NUM_FOUNDATIONS = 4
NUM_RANKS = 13
DECK_SIZE = NUM_RANKS * NUM_FOUNDATIONS

DEFAULT_COLUMNS = 8
DEFAULT_FREE_CELLS = 4


class InvalidLocationError(ValueError):
    pass


@dataclass(frozen=True)
class Card:
    rank: int = 0
    suit: int = 0

    @property
    def is_real(self) -> bool:
        return self.rank != 0

    @property
    def sort_value(self) -> int:
        return self.rank * 1000 + self.suit

    def builds_on(self, top: "Card") -> bool:
        # Column builds are same suit, destination exactly one rank higher
        return top.suit == self.suit and top.rank == self.rank + 1

    def follows(self, top: "Card") -> bool:
        # Foundations grow by one rank within their own suit
        return top.suit == self.suit and top.rank + 1 == self.rank


EMPTY = Card(0, 0)


@dataclass(frozen=True)
class Selection:
    location: str
    column: int
    row: int = 0


Move = Tuple[Selection, Selection]


def foundation_base(index: int) -> Card:
    return Card(0, index + 1)


def full_deck() -> List[Card]:
    return [Card(rank, suit) for rank in range(1, NUM_RANKS + 1) for suit in range(1, NUM_FOUNDATIONS + 1)]


@dataclass
class Position:
    free_cells: List[Card]
    foundations: List[List[Card]]
    columns: List[List[Card]]

    @classmethod
    def empty(cls, num_columns: int = DEFAULT_COLUMNS, num_free_cells: int = DEFAULT_FREE_CELLS) -> "Position":
        return cls(
            free_cells=[EMPTY] * num_free_cells,
            foundations=[[foundation_base(i)] for i in range(NUM_FOUNDATIONS)],
            columns=[[EMPTY] for _ in range(num_columns)],
        )

    @property
    def num_columns(self) -> int:
        return len(self.columns)

    @property
    def num_free_cells(self) -> int:
        return len(self.free_cells)

    def copy(self) -> "Position":
        # Cards are immutable, so copying the containers is enough
        return Position(
            free_cells=list(self.free_cells),
            foundations=[list(pile) for pile in self.foundations],
            columns=[list(column) for column in self.columns],
        )

    def card_at(self, selection: Selection) -> Card:
        if selection.column < 0 or selection.row < 0:
            raise InvalidLocationError(f"Negative index in selection: {selection}")
        try:
            if selection.location == FREE_CELL:
                return self.free_cells[selection.column]
            if selection.location == FOUNDATION:
                return self.foundations[selection.column][selection.row]
            if selection.location == COLUMN:
                return self.columns[selection.column][selection.row]
        except IndexError as exc:
            raise InvalidLocationError(f"Selection out of range: {selection}") from exc
        raise InvalidLocationError(f"Invalid selection location: {selection.location}")

    def column_top(self, index: int) -> Selection:
        return Selection(COLUMN, index, len(self.columns[index]) - 1)

    def foundation_top(self, index: int) -> Selection:
        return Selection(FOUNDATION, index, len(self.foundations[index]) - 1)

    def source_candidates(self) -> Iterator[Selection]:
        # Scan order matters for auto-foundation tie breaks: free cells, then columns
        for i in range(len(self.free_cells)):
            yield Selection(FREE_CELL, i, 0)
        for i in range(len(self.columns)):
            yield self.column_top(i)

    def legal_destinations(self, source: Selection, truncate: bool = False) -> List[Selection]:
        """Return every slot the card at ``source`` may legally move to.

        Destinations are listed foundations first, then free cells, then
        columns. With ``truncate`` the search stops at the first hit, which is
        all :meth:`scan_sources` needs to know.
        """

        card = self.card_at(source)
        options: List[Selection] = []
        if not card.is_real:
            return options

        for i, pile in enumerate(self.foundations):
            if card.follows(pile[-1]):
                options.append(self.foundation_top(i))
                if truncate:
                    return options

        if source.location != FREE_CELL:
            for i, cell in enumerate(self.free_cells):
                if not cell.is_real:
                    options.append(Selection(FREE_CELL, i, 0))
                    if truncate:
                        return options

        for i, column in enumerate(self.columns):
            top = column[-1]
            if not top.is_real or card.builds_on(top):
                options.append(self.column_top(i))
                if truncate:
                    return options

        return options

    def scan_sources(self, auto_foundations: bool = True) -> Tuple[List[Selection], Optional[Move]]:
        """Find movable cards and the pending automatic foundation move.

        When several cards could go to a foundation, the last one met in scan
        order wins.
        """

        sources: List[Selection] = []
        pending: Optional[Move] = None
        for selection in self.source_candidates():
            if not self.card_at(selection).is_real:
                continue
            destinations = self.legal_destinations(selection, truncate=True)
            if not destinations:
                continue
            sources.append(selection)
            if auto_foundations:
                for destination in destinations:
                    if destination.location == FOUNDATION:
                        pending = (selection, destination)
        return sources, pending

    def remove_card(self, source: Selection) -> Card:
        # Only free cells and column tops ever give up a card
        card = self.card_at(source)
        if source.location == FREE_CELL:
            self.free_cells[source.column] = EMPTY
        elif source.location == COLUMN:
            self.columns[source.column].pop()
        else:
            raise InvalidLocationError(f"Unsupported source location: {source.location}")
        return card

    def place_card(self, destination: Selection, card: Card) -> None:
        if destination.location == FREE_CELL:
            self.free_cells[destination.column] = card
        elif destination.location == COLUMN:
            self.columns[destination.column].append(card)
        elif destination.location == FOUNDATION:
            self.foundations[destination.column].append(card)
        else:
            raise InvalidLocationError(f"Unsupported destination location: {destination.location}")

    def real_cards(self) -> Iterator[Card]:
        for card in self.free_cells:
            if card.is_real:
                yield card
        for pile in self.foundations:
            yield from (card for card in pile if card.is_real)
        for column in self.columns:
            yield from (card for card in column if card.is_real)

    def cards_remaining(self) -> int:
        # Real cards not yet on a foundation
        in_cells = sum(1 for card in self.free_cells if card.is_real)
        return in_cells + sum(len(column) - 1 for column in self.columns)

    def is_won(self) -> bool:
        if any(card.is_real for card in self.free_cells):
            return False
        return all(len(column) == 1 for column in self.columns)


def deal(
    num_columns: int = DEFAULT_COLUMNS,
    num_free_cells: int = DEFAULT_FREE_CELLS,
    rng: Optional[random.Random] = None,
) -> Position:
    if num_columns < 1:
        raise ValueError(f"Cannot deal onto {num_columns} columns")
    # Shuffle a fresh deck and deal it round-robin from column 0
    position = Position.empty(num_columns, num_free_cells)
    deck = full_deck()
    (rng or random).shuffle(deck)
    for index, card in enumerate(deck):
        position.columns[index % num_columns].append(card)
    return position
