import pytest

from builders import king_over_queen, make_game, make_position
from suitcell import cli
from suitcell.persistence import PositionStore


def _feed(monkeypatch, *lines):
    replies = iter(lines)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(replies))


def test_deal_prints_and_saves(tmp_path, capsys):
    state = tmp_path / "state.json"
    assert cli.main(["--state-file", str(state), "--seed", "1", "deal", "--save"]) == 0

    out = capsys.readouterr().out
    assert "c7" in out
    assert state.exists()


def test_solve_resumes_a_saved_game(tmp_path, capsys):
    state = tmp_path / "state.json"
    PositionStore(state).save(make_game(king_over_queen(), start=False))

    assert cli.main(["--state-file", str(state), "solve", "--resume"]) == 0

    out = capsys.readouterr().out
    assert "solved" in out
    assert "Solution in 1 moves" in out
    assert "K♠" in out


def test_solve_reports_failure(tmp_path, capsys):
    state = tmp_path / "state.json"
    stuck = make_position([["As", "Kc"], ["Ad", "Qh"]], free_cells=["5s", "9d"], num_free_cells=2)
    PositionStore(state).save(make_game(stuck, start=False))

    assert cli.main(["--state-file", str(state), "solve", "--resume"]) == 1
    assert "unsolvable" in capsys.readouterr().out


def test_play_to_a_win(tmp_path, monkeypatch, capsys):
    state = tmp_path / "state.json"
    PositionStore(state).save(make_game(king_over_queen(), start=False))
    _feed(monkeypatch, "c0", "f0")

    assert cli.main(["--state-file", str(state), "play"]) == 0

    out = capsys.readouterr().out
    assert "Moved: K♠ Q♠ K♠" in out
    assert "You win!" in out
    assert not state.exists()


def test_play_ignores_unknown_commands_and_quits(tmp_path, monkeypatch, capsys):
    state = tmp_path / "state.json"
    _feed(monkeypatch, "zz", "c99", "q")

    assert cli.main(["--state-file", str(state), "--seed", "3", "play", "--new"]) == 0

    out = capsys.readouterr().out
    assert out.count("Unknown command.") == 2
    assert state.exists()


def test_corrupt_state_falls_back_to_a_new_deal(tmp_path, monkeypatch, capsys):
    state = tmp_path / "state.json"
    state.write_text("{broken")
    _feed(monkeypatch, "q")

    assert cli.main(["--state-file", str(state), "play"]) == 0
    assert "unreadable" in capsys.readouterr().out
    assert PositionStore(state).load() is not None


def test_play_moves_a_card_onto_a_foundation(tmp_path, monkeypatch, capsys):
    state = tmp_path / "state.json"
    PositionStore(state).save(make_game(make_position([["Ac"]]), auto_foundations=False, start=False))
    _feed(monkeypatch, "c0", "h2")

    assert cli.main(["--state-file", str(state), "play"]) == 0

    out = capsys.readouterr().out
    assert "h2*[   ]" in out
    assert "Unknown command." not in out
    assert "Moved: A♣" in out
    assert "You win!" in out
    assert not state.exists()


def test_foundation_index_out_of_range_is_unknown(tmp_path, monkeypatch, capsys):
    state = tmp_path / "state.json"
    _feed(monkeypatch, "h4", "q")

    assert cli.main(["--state-file", str(state), "--seed", "5", "play", "--new"]) == 0
    assert "Unknown command." in capsys.readouterr().out


@pytest.mark.parametrize("flags", [["--columns", "0"], ["--free-cells", "-1"]])
def test_invalid_layout_flags_exit_with_an_error(tmp_path, flags):
    state = tmp_path / "state.json"
    assert cli.main(["--state-file", str(state), *flags, "deal"]) == 2
    assert not state.exists()
