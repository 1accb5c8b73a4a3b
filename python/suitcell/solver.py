from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .canonical import canonical_key
from .game.board import Move, Position, Selection
from .game.rules import Game


LOG = logging.getLogger("suitcell.solver")

# Step count standing in for "no solution yet"
INFINITE_STEPS = 10 ** 6

SOLVED = "solved"
UNSOLVABLE = "unsolvable"
EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Scorecard:
    position: Position
    steps: int = 0
    moves: Tuple[Move, ...] = ()

    @property
    def actions(self) -> Tuple[Selection, ...]:
        # Destination of every move, first move first
        return tuple(destination for _, destination in self.moves)

    @property
    def found(self) -> bool:
        return self.steps < INFINITE_STEPS

    def extend(self, position: Position, move: Move) -> "Scorecard":
        return Scorecard(position=position, steps=self.steps + 1, moves=self.moves + (move,))


Lookup = Dict[str, Scorecard]


@dataclass(frozen=True)
class SearchLimits:
    max_nodes: Optional[int] = None


@dataclass
class SearchStats:
    entered: int = 0
    expanded: int = 0
    memo_pruned: int = 0
    bound_pruned: int = 0
    dead_ends: int = 0
    wins: int = 0


class SearchBudgetExhausted(RuntimeError):
    def __init__(self, best: Scorecard, stats: SearchStats) -> None:
        super().__init__(f"Search budget exhausted after {stats.entered} positions")
        self.best = best
        self.stats = stats


@dataclass
class SolveResult:
    status: str
    scorecard: Scorecard
    stats: SearchStats = field(default_factory=SearchStats)
    lookup_size: int = 0

    @property
    def solved(self) -> bool:
        return self.status == SOLVED


def _lower_bound(game: Game) -> int:
    # Cascaded foundation moves are free, so only a manual game has a useful bound
    if game.options.auto_foundations:
        return 0
    return game.position.cards_remaining()


def _successors(game: Game, scorecard: Scorecard) -> Iterator[Tuple[Game, Scorecard]]:
    # Each move is two clicks: pick the source, then the destination
    for source in list(game.choices):
        intermediate = game.copy()
        intermediate.select(source)
        for destination in list(intermediate.choices):
            child = intermediate.copy()
            child.select(destination)
            yield child, scorecard.extend(child.position, (source, destination))


def brute_solve(
    game: Game,
    scorecard: Scorecard,
    lookup: Lookup,
    winning: Scorecard,
    limits: Optional[SearchLimits] = None,
    stats: Optional[SearchStats] = None,
) -> Scorecard:
    """Exhaustive depth-first search for the shortest winning line.

    ``game`` must already have its option set computed (see
    :meth:`Game.start`). ``lookup`` maps canonical keys to the cheapest
    scorecard seen for that position and is updated in place. Returns the
    better of ``winning`` and any win found below ``game``; an unchanged
    ``winning`` means nothing better exists in this subtree.
    """

    limits = limits or SearchLimits()
    stats = stats if stats is not None else SearchStats()
    best = winning

    stack: List[Iterator[Tuple[Game, Scorecard]]] = [iter([(game, scorecard)])]
    while stack:
        try:
            current, card = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue

        stats.entered += 1
        if limits.max_nodes is not None and stats.entered > limits.max_nodes:
            raise SearchBudgetExhausted(best, stats)

        if best.found and card.steps + _lower_bound(current) >= best.steps:
            stats.bound_pruned += 1
            continue

        if current.is_won():
            stats.wins += 1
            if card.steps < best.steps:
                LOG.info("Found winning line in %d steps", card.steps)
                best = card
            continue

        if not current.choices:
            stats.dead_ends += 1
            continue

        key = canonical_key(current.position)
        seen = lookup.get(key)
        if seen is not None and seen.steps <= card.steps:
            stats.memo_pruned += 1
            continue
        lookup[key] = card
        LOG.debug("%d steps: %s", card.steps, key)

        stats.expanded += 1
        stack.append(_successors(current, card))

    return best


class BruteForceSolver:
    def __init__(self, limits: Optional[SearchLimits] = None) -> None:
        self.limits = limits or SearchLimits()

    def solve(self, game: Game) -> SolveResult:
        # Search a private clone so the caller's game is never touched
        root = game.copy()
        root.start()
        start = Scorecard(position=root.position, steps=0)
        seed = Scorecard(position=root.position, steps=INFINITE_STEPS)
        lookup: Lookup = {}
        stats = SearchStats()

        try:
            best = brute_solve(root, start, lookup, seed, limits=self.limits, stats=stats)
        except SearchBudgetExhausted as exc:
            LOG.warning("%s", exc)
            return SolveResult(EXHAUSTED, exc.best, exc.stats, len(lookup))

        status = SOLVED if best.found else UNSOLVABLE
        LOG.info(
            "Search finished: %s, %d positions expanded, %d memo prunes",
            status,
            stats.expanded,
            stats.memo_pruned,
        )
        return SolveResult(status, best, stats, len(lookup))

    @property
    def description(self) -> str:
        if self.limits.max_nodes is None:
            return "BruteForce(unbounded)"
        return f"BruteForce(max_nodes={self.limits.max_nodes})"


def replay(game: Game, moves: Iterable[Move]) -> Game:
    """Apply ``moves`` to ``game`` in order, raising on the first illegal one."""

    if game.is_idle and not game.choices:
        game.start()
    for source, destination in moves:
        game.play(source, destination)
    return game


__all__ = [
    "BruteForceSolver",
    "INFINITE_STEPS",
    "Scorecard",
    "SearchBudgetExhausted",
    "SearchLimits",
    "SearchStats",
    "SolveResult",
    "brute_solve",
    "replay",
]
