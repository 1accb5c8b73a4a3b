"""Entry point for the pygame client."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from ..game.rules import GameOptions
from ..persistence import PositionStore


def main() -> None:
    parser = argparse.ArgumentParser(description="suitcell graphical client")
    parser.add_argument("--columns", type=int, default=8)
    parser.add_argument("--free-cells", type=int, default=4)
    parser.add_argument("--no-auto-foundations", action="store_true")
    parser.add_argument("--state-file", type=Path, default=None)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    # Imported late so the CLI works without pygame installed
    from .pygame_app import main as run_app

    try:
        options = GameOptions(
            num_columns=args.columns,
            num_free_cells=args.free_cells,
            auto_foundations=not args.no_auto_foundations,
        )
    except ValueError as exc:
        parser.error(str(exc))
    run_app(PositionStore(args.state_file), options)


if __name__ == "__main__":
    main()
