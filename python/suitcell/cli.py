"""Command-line interface for playing and solving suitcell deals."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

from .game.board import FREE_CELL, Selection
from .game.rules import Game, GameOptions
from .persistence import PositionStore, StorageError
from .render import card_label, describe_move, render_text
from .solver import BruteForceSolver, SearchLimits, SolveResult


LOG = logging.getLogger("suitcell.cli")

DEFAULT_MAX_NODES = 200_000
HINT_MAX_NODES = 20_000


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Same-suit FreeCell engine and solver")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--columns", type=int, default=8)
    parser.add_argument("--free-cells", type=int, default=4)
    parser.add_argument("--no-auto-foundations", action="store_true")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--state-file", type=Path, default=None)

    commands = parser.add_subparsers(dest="command")
    play = commands.add_parser("play", help="play interactively in the terminal")
    play.add_argument("--new", action="store_true", help="ignore any saved game")

    solve = commands.add_parser("solve", help="search for the shortest solution")
    solve.add_argument("--resume", action="store_true", help="solve the saved game instead of a new deal")
    solve.add_argument("--max-nodes", type=int, default=DEFAULT_MAX_NODES)

    deal = commands.add_parser("deal", help="print a new deal")
    deal.add_argument("--save", action="store_true", help="store the deal as the current game")

    parser.set_defaults(new=False, resume=False, max_nodes=DEFAULT_MAX_NODES, save=False)
    return parser


def _options(args: argparse.Namespace) -> GameOptions:
    return GameOptions(
        num_columns=args.columns,
        num_free_cells=args.free_cells,
        auto_foundations=not args.no_auto_foundations,
    )


def _new_game(
    args: argparse.Namespace,
    store: Optional[PositionStore] = None,
    reseed: bool = False,
) -> Game:
    rng = random.Random(None if reseed else args.seed)
    return Game.new(_options(args), rng=rng, on_move=store)


def _load_or_deal(args: argparse.Namespace, store: PositionStore, resume: bool) -> Game:
    game: Optional[Game] = None
    if resume:
        try:
            game = store.load()
        except StorageError as exc:
            print(f"Saved game is unreadable ({exc}); dealing a new one.")
    if game is None:
        game = _new_game(args, store)
        store.save(game)
    return game


def _parse_target(text: str, game: Game) -> Optional[Selection]:
    # "f2" is free cell 2, "c5" is the top of column 5, "h1" is foundation 1
    if len(text) < 2 or text[0] not in {"f", "c", "h"}:
        return None
    try:
        index = int(text[1:])
    except ValueError:
        return None
    if text[0] == "f":
        if not 0 <= index < game.position.num_free_cells:
            return None
        return Selection(FREE_CELL, index, 0)
    if text[0] == "h":
        if not 0 <= index < len(game.position.foundations):
            return None
        return game.position.foundation_top(index)
    if not 0 <= index < game.position.num_columns:
        return None
    return game.position.column_top(index)


def _print_solution(game: Game, result: SolveResult) -> None:
    replayed = game.copy()
    replayed.start()
    for step, (source, destination) in enumerate(result.scorecard.moves, start=1):
        card = replayed.position.card_at(source)
        print(f"{step:3}. {card_label(card):>3}  {describe_move((source, destination))}")
        replayed.play(source, destination)


def _hint(game: Game) -> None:
    result = BruteForceSolver(SearchLimits(max_nodes=HINT_MAX_NODES)).solve(game)
    if result.solved and result.scorecard.moves:
        move = result.scorecard.moves[0]
        print(f"Try {describe_move(move)} ({result.scorecard.steps} moves to win).")
    elif result.solved:
        print("Nothing left to do.")
    elif result.status == "unsolvable":
        print("No winning line exists from here.")
    else:
        print("No solution found within the hint budget.")


def _run_play(args: argparse.Namespace, store: PositionStore) -> int:
    game = _load_or_deal(args, store, resume=not args.new)
    game.start()
    print("Commands: f<i> free cell, c<i> column, h<i> foundation, n new deal, s hint, q quit.")

    while True:
        print()
        print(render_text(game))
        if game.is_won():
            print("All cards are home. You win!")
            store.clear()
            return 0
        if game.is_lost():
            print("No moves left. Type 'n' for a new deal or 'q' to quit.")

        try:
            command = input("> ").strip().lower()
        except EOFError:
            return 0

        if command in {"q", "quit", "exit"}:
            return 0
        if command == "n":
            game = _new_game(args, store, reseed=True)
            store.save(game)
            game.start()
            continue
        if command == "s":
            _hint(game)
            continue

        target = _parse_target(command, game)
        if target is None:
            print("Unknown command.")
            continue
        moved = game.select(target)
        if moved:
            print("Moved: " + " ".join(card_label(card) for card in moved))


def _run_solve(args: argparse.Namespace, store: PositionStore) -> int:
    if args.resume:
        game = _load_or_deal(args, store, resume=True)
    else:
        game = _new_game(args)
    print(render_text(game))
    print()

    solver = BruteForceSolver(SearchLimits(max_nodes=args.max_nodes))
    result = solver.solve(game)
    print(f"{solver.description}: {result.status} ({result.stats.expanded} positions expanded)")
    if not result.solved:
        return 1
    print(f"Solution in {result.scorecard.steps} moves:")
    _print_solution(game, result)
    return 0


def _run_deal(args: argparse.Namespace, store: PositionStore) -> int:
    game = _new_game(args, store)
    if args.save:
        store.save(game)
    print(render_text(game))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    store = PositionStore(args.state_file)
    handlers = {"play": _run_play, "solve": _run_solve, "deal": _run_deal}
    handler = handlers.get(args.command or "play")
    try:
        return handler(args, store)
    except (ValueError, StorageError) as exc:
        # Bad layout options and rejected locations both land here
        LOG.error("%s", exc)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    sys.exit(main())
