import json
import random

import pytest

from builders import king_over_queen, make_game, make_position
from suitcell.game.board import FREE_CELL, Selection
from suitcell.game.rules import Game, GameOptions
from suitcell.persistence import (
    STATE_FILE_ENV,
    PositionStore,
    StorageError,
    decode_position,
    default_state_path,
    encode_position,
    position_to_message,
)


def _payload(**overrides) -> bytes:
    game = make_game(make_position([["Kc", "Qh"], []], free_cells=["2d"], foundations=(3, 0, 0, 0)))
    message = position_to_message(game)
    message.update(overrides)
    return json.dumps(message).encode("utf-8")


def test_round_trip_keeps_exact_layout_and_options():
    options = GameOptions(num_columns=6, num_free_cells=3, hard_columns=True, auto_foundations=False)
    game = Game.new(options, rng=random.Random(21))
    game.start()
    game.play(game.choices[0], game.legal_destinations(game.choices[0])[0])

    position, restored = decode_position(encode_position(game))

    assert position == game.position
    assert restored == options


def test_highlights_are_not_stored():
    game = make_game(make_position([["Kc"], []]))
    game.select(game.position.column_top(0))
    assert game.highlights

    message = json.loads(encode_position(game))
    assert set(message) == {"version", "options", "free_cells", "foundations", "columns"}


def test_store_round_trip(tmp_path):
    store = PositionStore(tmp_path / "nested" / "state.json")
    assert store.load() is None

    game = make_game(king_over_queen())
    store.save(game)
    loaded = store.load()

    assert loaded is not None
    assert loaded.position == game.position
    assert loaded.on_move is store

    store.clear()
    assert not store.exists()


def test_store_writes_after_every_move(tmp_path):
    store = PositionStore(tmp_path / "state.json")
    game = make_game(make_position([["Kc", "Qd"], []]), on_move=store)

    game.play(game.position.column_top(0), Selection(FREE_CELL, 2, 0))

    position, _ = decode_position(store.path.read_bytes())
    assert position == game.position
    assert position.free_cells[2].rank == 12


def test_default_path_honours_environment(monkeypatch, tmp_path):
    monkeypatch.setenv(STATE_FILE_ENV, str(tmp_path / "custom.json"))
    assert default_state_path() == tmp_path / "custom.json"

    monkeypatch.delenv(STATE_FILE_ENV)
    assert default_state_path().name == "state.json"


@pytest.mark.parametrize(
    "payload",
    [
        b"not json",
        b"\xff\xfe",
        b"[]",
        _payload(version=99),
        _payload(columns=[[[0, 0], [14, 1]]]),
        _payload(columns=[[[13, 3]]]),
        _payload(columns=[[[0, 0], [0, 0]]]),
        _payload(columns=[[[0, 0], [5, 2]], [[0, 0], [5, 2]]]),
        _payload(foundations=[[[0, 1], [2, 1]], [[0, 2]], [[0, 3]], [[0, 4]]]),
        _payload(foundations=[[[0, 2]], [[0, 1]], [[0, 3]], [[0, 4]]]),
        _payload(foundations=[[[0, 1]]]),
        _payload(free_cells=[[3, 0]]),
        _payload(free_cells="nope"),
        _payload(columns=[]),
        _payload(options={"hard_columns": "false", "auto_foundations": True}),
        _payload(options={"hard_columns": False, "auto_foundations": 1}),
        _payload(options=["auto_foundations"]),
    ],
)
def test_malformed_payloads_are_rejected(payload):
    with pytest.raises(StorageError):
        decode_position(payload)


def test_missing_field_is_rejected():
    message = json.loads(_payload())
    del message["columns"]
    with pytest.raises(StorageError):
        decode_position(json.dumps(message).encode("utf-8"))


def test_missing_options_fall_back_to_defaults():
    message = json.loads(_payload())
    del message["options"]
    _, options = decode_position(json.dumps(message).encode("utf-8"))
    assert options.hard_columns is False
    assert options.auto_foundations is True
