"""Selection protocol and game options built on top of :mod:`suitcell.game.board`."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .board import (
    DEFAULT_COLUMNS,
    DEFAULT_FREE_CELLS,
    Card,
    Move,
    Position,
    Selection,
    deal,
)


LOG = logging.getLogger("suitcell.rules")

SELECTABLE = "selectable"
SELECTED = "selected"


class IllegalMoveError(ValueError):
    pass


@dataclass(frozen=True)
class GameOptions:
    """Settings fixed for the life of a game."""

    num_columns: int = DEFAULT_COLUMNS
    num_free_cells: int = DEFAULT_FREE_CELLS
    hard_columns: bool = False  # Reserved; the legality rules ignore it.
    auto_foundations: bool = True

    def __post_init__(self) -> None:
        if self.num_columns < 1:
            raise ValueError(f"A game needs at least one column, got {self.num_columns}")
        if self.num_free_cells < 0:
            raise ValueError(f"Free cell count cannot be negative, got {self.num_free_cells}")

    @classmethod
    def for_position(cls, position: Position, **overrides) -> "GameOptions":
        return cls(num_columns=position.num_columns, num_free_cells=position.num_free_cells, **overrides)


MoveListener = Callable[["Game"], None]


class Game:
    """Two-phase click protocol over a single mutable :class:`Position`.

    In the idle state :attr:`choices` holds the legal sources. Selecting one
    of them marks it as the pending source and offers its legal destinations;
    selecting one of those completes the move. Anything else cancels and
    restarts from the idle state.
    """

    def __init__(
        self,
        position: Position,
        options: Optional[GameOptions] = None,
        on_move: Optional[MoveListener] = None,
    ) -> None:
        self.options = options or GameOptions.for_position(position)
        if (
            position.num_columns != self.options.num_columns
            or position.num_free_cells != self.options.num_free_cells
        ):
            raise ValueError("Position layout does not match the game options")
        self.position = position
        self.on_move = on_move
        self.choices: List[Selection] = []
        self.source: Optional[Selection] = None
        self.highlights: Dict[Selection, str] = {}

    @classmethod
    def new(
        cls,
        options: Optional[GameOptions] = None,
        rng: Optional[random.Random] = None,
        on_move: Optional[MoveListener] = None,
    ) -> "Game":
        options = options or GameOptions()
        position = deal(options.num_columns, options.num_free_cells, rng=rng)
        return cls(position, options, on_move=on_move)

    def copy(self) -> "Game":
        # Clones never persist; the listener stays with the original
        clone = Game(self.position.copy(), self.options)
        clone.choices = list(self.choices)
        clone.source = self.source
        clone.highlights = dict(self.highlights)
        return clone

    def start(self) -> List[Card]:
        # Compute the first option set, draining anything foundation-ready
        self._clear_selection()
        return self._refresh_sources()

    @property
    def is_idle(self) -> bool:
        return self.source is None

    def is_won(self) -> bool:
        return self.position.is_won()

    def is_lost(self) -> bool:
        return self.is_idle and not self.choices and not self.position.is_won()

    def legal_destinations(self, source: Selection, truncate: bool = False) -> List[Selection]:
        return self.position.legal_destinations(source, truncate=truncate)

    def legal_sources(self) -> List[Selection]:
        """Recompute the legal sources.

        This is not a pure query: with auto foundations enabled every card
        that can go straight to a foundation is moved there first.
        """

        self._clear_selection()
        self._refresh_sources()
        return list(self.choices)

    def select(self, target: Selection) -> List[Card]:
        """Handle a click on ``target`` and return the cards that moved, in order."""

        offered = self.choices
        source = self.source
        self._clear_selection()
        if target not in offered:
            return self._refresh_sources()

        if source is None:
            self.source = target
            self.choices = self.position.legal_destinations(target)
            self.highlights[target] = SELECTED
            self._mark(self.choices)
            return []

        moved = [self._complete_move(source, target)]
        moved.extend(self._refresh_sources())
        return moved

    def play(self, source: Selection, destination: Selection) -> List[Card]:
        # Both clicks of a move at once; refuses anything not on offer
        if not self.is_idle:
            self._clear_selection()
            self._refresh_sources()
        if source not in self.choices:
            raise IllegalMoveError(f"{source} is not a legal source")
        self.select(source)
        if destination not in self.choices:
            self.select(destination)
            raise IllegalMoveError(f"{destination} is not a legal destination for {source}")
        return self.select(destination)

    def legal_moves(self) -> List[Move]:
        # Every complete single-card move available from the idle state
        moves: List[Move] = []
        if not self.is_idle:
            return moves
        for source in self.choices:
            for destination in self.position.legal_destinations(source):
                moves.append((source, destination))
        return moves

    def _complete_move(self, source: Selection, destination: Selection) -> Card:
        card = self.position.remove_card(source)
        self.position.place_card(destination, card)
        LOG.debug("Moved %s from %s to %s", card, source, destination)
        if self.on_move is not None:
            self.on_move(self)
        return card

    def _refresh_sources(self) -> List[Card]:
        moved: List[Card] = []
        while True:
            sources, pending = self.position.scan_sources(self.options.auto_foundations)
            if pending is None:
                self.choices = sources
                self._mark(sources)
                return moved
            start, end = pending
            LOG.debug("Auto-promoting %s to foundation %d", self.position.card_at(start), end.column)
            moved.append(self._complete_move(start, end))

    def _clear_selection(self) -> None:
        self.highlights.clear()
        self.choices = []
        self.source = None

    def _mark(self, selections: List[Selection]) -> None:
        for selection in selections:
            self.highlights[selection] = SELECTABLE
