"""Pygame front-end for the suitcell solitaire engine."""

from __future__ import annotations

import random
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

try:
    import pygame
except ImportError as exc:  # pragma: no cover - handled at runtime
    raise SystemExit(
        "Pygame is required for the graphical client. Install it with 'pip install suitcell[gui]'."
    ) from exc

from ..game.board import COLUMN, FREE_CELL, Position, Selection
from ..game.rules import SELECTED, SELECTABLE, Game, GameOptions
from ..persistence import PositionStore, StorageError
from ..render import CellView, board_view, describe_move, rank_label, suit_color, suit_glyph
from ..solver import BruteForceSolver, SearchLimits


# ---------------------------------------------------------------------------
# Rendering configuration
# ---------------------------------------------------------------------------

WINDOW_WIDTH = 1020
WINDOW_HEIGHT = 760
FPS = 30

TABLE_BG = (33, 105, 62)
SLOT_FILL = (28, 86, 52)
SLOT_OUTLINE = (120, 170, 130)
CARD_FILL = (250, 250, 250)
CARD_OUTLINE = (38, 50, 56)
INK = {"black": (33, 33, 33), "red": (211, 47, 47)}
SELECTION_COLOR = (255, 152, 0)
HIGHLIGHT_MOVE = (129, 199, 132)
TEXT_COLOR = (240, 240, 240)

CARD_WIDTH = 90
CARD_HEIGHT = 126
CARD_GAP = 14
FAN_OFFSET = 28
TOP_ROW_Y = 30
COLUMNS_Y = TOP_ROW_Y + CARD_HEIGHT + 40

HISTORY_LIMIT = 200
SOLVE_MAX_NODES = 50_000


@dataclass
class Button:
    label: str
    rect: pygame.Rect

    def draw(self, surface: pygame.Surface, font: pygame.font.Font, hovered: bool) -> None:
        base_color = (33, 150, 243)
        color = tuple(min(c + 40, 255) for c in base_color) if hovered else base_color
        pygame.draw.rect(surface, color, self.rect, border_radius=6)
        pygame.draw.rect(surface, (13, 71, 161), self.rect, width=2, border_radius=6)
        text_surf = font.render(self.label, True, (255, 255, 255))
        surface.blit(text_surf, text_surf.get_rect(center=self.rect.center))

    def contains(self, pos: Tuple[int, int]) -> bool:
        return self.rect.collidepoint(pos)


class SuitcellPygameApp:
    def __init__(self, store: PositionStore, options: Optional[GameOptions] = None) -> None:
        pygame.init()
        pygame.display.set_caption("suitcell")
        self.screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
        self.clock = pygame.time.Clock()

        self.font_small = pygame.font.Font(None, 24)
        self.font_card = pygame.font.SysFont("dejavusans", 26)
        self.font_large = pygame.font.Font(None, 48)

        self.buttons = [
            Button("New Game", pygame.Rect(40, WINDOW_HEIGHT - 70, 140, 45)),
            Button("Undo", pygame.Rect(200, WINDOW_HEIGHT - 70, 100, 45)),
            Button("Hint", pygame.Rect(320, WINDOW_HEIGHT - 70, 100, 45)),
        ]

        self.store = store
        self.options = options or GameOptions()
        self.message: Optional[str] = None
        self.game = self._load_or_deal()
        self.history: List[Position] = [self.game.position.copy()]

    # ------------------------------------------------------------------
    # Game flow helpers
    # ------------------------------------------------------------------
    def _load_or_deal(self) -> Game:
        game: Optional[Game] = None
        try:
            game = self.store.load()
        except StorageError as exc:
            self.message = f"Saved game unreadable: {exc}"
        if game is None:
            game = Game.new(self.options, rng=random.Random(), on_move=self.store)
            self.store.save(game)
        game.start()
        return game

    def reset(self) -> None:
        self.game = Game.new(self.options, rng=random.Random(), on_move=self.store)
        self.store.save(self.game)
        self.game.start()
        self.history = [self.game.position.copy()]
        self.message = None

    def undo(self) -> None:
        if len(self.history) <= 1:
            return
        self.history.pop()
        self.game = Game(self.history[-1].copy(), self.game.options, on_move=self.store)
        self.store.save(self.game)
        self.game.start()
        self.message = "Undid last move"

    def hint(self) -> None:
        result = BruteForceSolver(SearchLimits(max_nodes=SOLVE_MAX_NODES)).solve(self.game)
        if result.solved and result.scorecard.moves:
            self.message = f"Hint: {describe_move(result.scorecard.moves[0])} ({result.scorecard.steps} to win)"
        elif result.status == "unsolvable":
            self.message = "No winning line from here"
        else:
            self.message = "No hint found within the search budget"

    def _push_history(self) -> None:
        self.history.append(self.game.position.copy())
        if len(self.history) > HISTORY_LIMIT:
            self.history = self.history[-HISTORY_LIMIT:]

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------
    def handle_click(self, pos: Tuple[int, int]) -> None:
        for button in self.buttons:
            if button.contains(pos):
                self._handle_button(button)
                return

        target = self._selection_at(pos)
        if target is None:
            # Clicking the table clears the current selection
            self.game.legal_sources()
            return

        moved = self.game.select(target)
        if moved:
            self._push_history()
            self.message = None
        if self.game.is_won():
            self.message = "All cards are home. You win!"
        elif self.game.is_lost():
            self.message = "No moves left"

    def _handle_button(self, button: Button) -> None:
        if button.label.startswith("New"):
            self.reset()
        elif button.label.startswith("Undo"):
            self.undo()
        elif button.label.startswith("Hint"):
            self.hint()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _free_cell_rect(self, index: int) -> pygame.Rect:
        return pygame.Rect(40 + index * (CARD_WIDTH + CARD_GAP), TOP_ROW_Y, CARD_WIDTH, CARD_HEIGHT)

    def _foundation_rect(self, index: int) -> pygame.Rect:
        right = WINDOW_WIDTH - 40 - (4 - index) * (CARD_WIDTH + CARD_GAP) + CARD_GAP
        return pygame.Rect(right, TOP_ROW_Y, CARD_WIDTH, CARD_HEIGHT)

    def _column_rect(self, column: int, row: int) -> pygame.Rect:
        x = 40 + column * (CARD_WIDTH + CARD_GAP)
        # Row 0 is the empty base; the first real card sits on top of it
        y = COLUMNS_Y + max(row - 1, 0) * FAN_OFFSET
        return pygame.Rect(x, y, CARD_WIDTH, CARD_HEIGHT)

    def _selection_at(self, pos: Tuple[int, int]) -> Optional[Selection]:
        position = self.game.position
        for i in range(position.num_free_cells):
            if self._free_cell_rect(i).collidepoint(pos):
                return Selection(FREE_CELL, i, 0)
        for i in range(len(position.foundations)):
            if self._foundation_rect(i).collidepoint(pos):
                return position.foundation_top(i)
        for i, column in enumerate(position.columns):
            # Later rows are drawn on top, so test them first
            for row in range(len(column) - 1, -1, -1):
                if self._column_rect(i, row).collidepoint(pos):
                    return Selection(COLUMN, i, row)
        return None

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------
    def draw(self) -> None:
        self.screen.fill(TABLE_BG)
        view = board_view(self.game)
        for i, cell in enumerate(view.free_cells):
            self._draw_cell(self._free_cell_rect(i), cell)
        for i, cell in enumerate(view.foundations):
            self._draw_cell(self._foundation_rect(i), cell)
        for i, column in enumerate(view.columns):
            for row, cell in enumerate(column):
                if row == 0 and len(column) > 1:
                    continue
                self._draw_cell(self._column_rect(i, row), cell)
        self._draw_ui()

    def _draw_cell(self, rect: pygame.Rect, cell: CellView) -> None:
        if cell.card is None:
            pygame.draw.rect(self.screen, SLOT_FILL, rect, border_radius=8)
            pygame.draw.rect(self.screen, SLOT_OUTLINE, rect, width=2, border_radius=8)
        else:
            pygame.draw.rect(self.screen, CARD_FILL, rect, border_radius=8)
            pygame.draw.rect(self.screen, CARD_OUTLINE, rect, width=2, border_radius=8)
            ink = INK[suit_color(cell.card.suit)]
            label = f"{rank_label(cell.card.rank)}{suit_glyph(cell.card.suit)}"
            text = self.font_card.render(label, True, ink)
            self.screen.blit(text, (rect.x + 8, rect.y + 4))

        if cell.highlight == SELECTED:
            pygame.draw.rect(self.screen, SELECTION_COLOR, rect.inflate(6, 6), width=4, border_radius=10)
        elif cell.highlight == SELECTABLE:
            pygame.draw.rect(self.screen, HIGHLIGHT_MOVE, rect.inflate(4, 4), width=3, border_radius=10)

    def _draw_ui(self) -> None:
        mouse_pos = pygame.mouse.get_pos()
        for button in self.buttons:
            button.draw(self.screen, self.font_small, button.contains(mouse_pos))

        remaining = self.game.position.cards_remaining()
        counts = self.font_small.render(f"Cards left: {remaining}", True, TEXT_COLOR)
        self.screen.blit(counts, (460, WINDOW_HEIGHT - 58))

        if self.message:
            msg = self.font_small.render(self.message, True, TEXT_COLOR)
            self.screen.blit(msg, (620, WINDOW_HEIGHT - 58))

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run(self) -> None:
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    self.handle_click(event.pos)

            self.draw()
            pygame.display.flip()
            self.clock.tick(FPS)

        pygame.quit()
        sys.exit(0)


def main(store: Optional[PositionStore] = None, options: Optional[GameOptions] = None) -> int:
    app = SuitcellPygameApp(store or PositionStore(), options)
    app.run()
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution
    main()
