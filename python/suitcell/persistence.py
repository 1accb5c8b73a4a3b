"""JSON storage helpers for saving and resuming a game."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .game.board import NUM_FOUNDATIONS, NUM_RANKS, Card, Position, foundation_base
from .game.rules import Game, GameOptions


LOG = logging.getLogger("suitcell.persistence")

Message = Dict[str, Any]
ENCODING = "utf-8"
FORMAT_VERSION = 1
STATE_FILE_ENV = "SUITCELL_STATE_FILE"


class StorageError(RuntimeError):
    pass


def default_state_path() -> Path:
    override = os.getenv(STATE_FILE_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".suitcell" / "state.json"


def _card_to_json(card: Card) -> List[int]:
    return [card.rank, card.suit]


def _card_from_json(raw: Any) -> Card:
    if not isinstance(raw, list) or len(raw) != 2 or not all(type(v) is int for v in raw):
        raise StorageError(f"Malformed card: {raw!r}")
    rank, suit = raw
    if not 0 <= rank <= NUM_RANKS or not 0 <= suit <= NUM_FOUNDATIONS:
        raise StorageError(f"Card out of range: {raw!r}")
    return Card(rank, suit)


def _pile_from_json(raw: Any) -> List[Card]:
    if not isinstance(raw, list) or not raw:
        raise StorageError(f"Malformed pile: {raw!r}")
    return [_card_from_json(item) for item in raw]


def position_to_message(game: Game) -> Message:
    position = game.position
    options = game.options
    return {
        "version": FORMAT_VERSION,
        "options": {
            "hard_columns": options.hard_columns,
            "auto_foundations": options.auto_foundations,
        },
        "free_cells": [_card_to_json(card) for card in position.free_cells],
        "foundations": [[_card_to_json(card) for card in pile] for pile in position.foundations],
        "columns": [[_card_to_json(card) for card in column] for column in position.columns],
    }


def position_from_message(message: Message) -> Tuple[Position, GameOptions]:
    if not isinstance(message, dict):
        raise StorageError("Stored state must be a JSON object")
    if message.get("version") != FORMAT_VERSION:
        raise StorageError(f"Unsupported state version: {message.get('version')!r}")

    try:
        raw_cells = message["free_cells"]
        raw_foundations = message["foundations"]
        raw_columns = message["columns"]
    except KeyError as exc:
        raise StorageError(f"Missing field: {exc.args[0]}") from exc

    if not isinstance(raw_cells, list) or not isinstance(raw_columns, list) or not raw_columns:
        raise StorageError("Free cells and columns must be lists")
    if not isinstance(raw_foundations, list) or len(raw_foundations) != NUM_FOUNDATIONS:
        raise StorageError(f"Expected {NUM_FOUNDATIONS} foundations")

    position = Position(
        free_cells=[_card_from_json(item) for item in raw_cells],
        foundations=[_pile_from_json(pile) for pile in raw_foundations],
        columns=[_pile_from_json(column) for column in raw_columns],
    )
    _validate(position)

    raw_options = message.get("options", {})
    if not isinstance(raw_options, dict):
        raise StorageError("Options must be a JSON object")
    flags = {"hard_columns": False, "auto_foundations": True}
    for name in flags:
        value = raw_options.get(name, flags[name])
        if not isinstance(value, bool):
            raise StorageError(f"Option {name} must be true or false, got {value!r}")
        flags[name] = value
    options = GameOptions.for_position(position, **flags)
    return position, options


def _validate(position: Position) -> None:
    for index, pile in enumerate(position.foundations):
        if pile[0] != foundation_base(index):
            raise StorageError(f"Foundation {index} has the wrong base")
        for rank, card in enumerate(pile):
            if card.rank != rank or card.suit != index + 1:
                raise StorageError(f"Foundation {index} is out of sequence")

    for index, column in enumerate(position.columns):
        if column[0].is_real or column[0].suit != 0:
            raise StorageError(f"Column {index} is missing its empty base")
        if any(not card.is_real for card in column[1:]):
            raise StorageError(f"Column {index} holds an empty marker above its base")

    for card in position.free_cells:
        if not card.is_real and card.suit != 0:
            raise StorageError(f"Malformed empty free cell: {card}")

    seen = set()
    for card in position.real_cards():
        if card.suit == 0:
            raise StorageError(f"Card without a suit: {card}")
        if card in seen:
            raise StorageError(f"Duplicate card: {card}")
        seen.add(card)


def encode_position(game: Game) -> bytes:
    """Serialize the board and options; highlights are not stored."""

    return json.dumps(position_to_message(game), separators=(",", ":")).encode(ENCODING)


def decode_position(payload: bytes) -> Tuple[Position, GameOptions]:
    try:
        message = json.loads(payload.decode(ENCODING))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StorageError("Malformed payload") from exc
    return position_from_message(message)


class PositionStore:
    """File-backed storage for the current game.

    An instance can be passed straight to :class:`Game` as its ``on_move``
    listener so every completed move is written out.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else default_state_path()

    def __call__(self, game: Game) -> None:
        self.save(game)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Optional[Game]:
        # None means "no saved game, deal a new one"
        if not self.exists():
            return None
        position, options = decode_position(self.path.read_bytes())
        LOG.info("Resumed game from %s", self.path)
        return Game(position, options, on_move=self)

    def save(self, game: Game) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_bytes(encode_position(game))
        tmp.replace(self.path)

    def clear(self) -> None:
        if self.exists():
            self.path.unlink()
