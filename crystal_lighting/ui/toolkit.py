"""pygame renderer and input handling for a simulation context.

Rendering is deterministic so it can run under the SDL ``dummy`` video
driver in automated tests.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional, Tuple

from ..evaluation import ManualSession, SimulationContext
from ..model import ItemCategory
from . import layout

_logger = logging.getLogger(__name__)

# pygame is imported lazily in ``ensure_pygame`` so callers can choose the
# SDL drivers first.
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
        _PYGAME.font.init()
    return _PYGAME


LEFT_BUTTON = 1
RIGHT_BUTTON = 3


class CrystalLightingUI:
    """Draws the board and turns mouse clicks into manual edits."""

    def __init__(
        self,
        context: SimulationContext,
        *,
        session: Optional[ManualSession] = None,
        cell_size: int = 24,
        surface=None,
        use_display: bool = False,
        plain: bool = False,
        mark: bool = False,
        show_rays: bool = False,
    ) -> None:
        pygame = ensure_pygame()
        self.context = context
        self.session = session
        self.geometry = layout.compute_geometry(
            context.board.height, context.board.width, cell_size
        )
        self.cell_size = cell_size
        self.plain = plain or cell_size < layout.MIN_DETAILED_CELL_SIZE
        self.mark = mark
        self.show_rays = show_rays
        self.surface = surface or pygame.Surface(self.geometry.window)
        self.screen = None
        if use_display:
            self.screen = pygame.display.set_mode(self.geometry.window)
        self.font = pygame.font.Font(pygame.font.get_default_font(), 13)
        self.last_message: str = ""

    # ------------------------------------------------------------------
    # Input handling
    def process_events(self, events: Iterable[object]) -> None:
        pygame = ensure_pygame()
        for event in events:
            if event.type == pygame.MOUSEBUTTONDOWN and event.button in (LEFT_BUTTON, RIGHT_BUTTON):
                self._handle_click(event.pos, event.button)

    def _button_at(self, pos: Tuple[int, int]) -> Optional[str]:
        x, y = pos
        for name, (bx, by, bw, bh) in self.geometry.buttons.items():
            if bx <= x <= bx + bw and by <= y <= by + bh:
                return name
        return None

    def _cell_from_pixel(self, pos: Tuple[int, int]) -> Optional[Tuple[int, int]]:
        x, y = pos
        row, col = y // self.cell_size, x // self.cell_size
        if not self.context.board.in_bounds(row, col):
            return None
        return row, col

    def _handle_click(self, pos: Tuple[int, int], button: int) -> None:
        name = self._button_at(pos)
        if name == "PLAIN":
            self.plain = not self.plain
            return
        if name == "MARK":
            self.mark = not self.mark
            return
        if name == "RAYS":
            self.show_rays = not self.show_rays
            return
        if self.session is None or self.session.ready:
            return
        if name == "READY":
            self.session.mark_ready()
            return

        cell = self._cell_from_pixel(pos)
        if cell is None:
            return
        row, col = cell
        if button == LEFT_BUTTON:
            if not self.context.board.target_cell(row, col).is_empty:
                self._show_message("You can only place lanterns on empty cells of the board.")
                return
            applied = self.session.cycle(row, col)
        else:
            applied = self.session.remove(row, col)
        if not applied:
            self._show_message(self.session.last_message)
        else:
            self.last_message = ""

    def _show_message(self, message: str) -> None:
        self.last_message = message
        _logger.info(message)

    # ------------------------------------------------------------------
    # Rendering
    def render(self):
        pygame = ensure_pygame()
        self.surface.fill(layout.BACKGROUND_COLOR)
        self.surface.fill(layout.BOARD_BACKGROUND_COLOR, pygame.Rect(*self.geometry.board))
        if self.mark:
            self._draw_marks()
        self._draw_invalid_lanterns()
        if self.show_rays:
            self._draw_rays()
        self._draw_lit_crystals()
        self._draw_items()
        self._draw_targets()
        self._draw_grid()
        self._draw_sidebar()
        if self.screen:
            self.screen.blit(self.surface, (0, 0))
            pygame.display.flip()
        return self.surface

    def _cell_rect(self, row: int, col: int, inset: int = 1):
        pygame = ensure_pygame()
        size = self.cell_size
        return pygame.Rect(col * size + inset, row * size + inset, size - inset, size - inset)

    def _center(self, row: int, col: int) -> Tuple[int, int]:
        size = self.cell_size
        return col * size + size // 2, row * size + size // 2

    def _crystal_outline(self, row: int, col: int) -> List[Tuple[int, int]]:
        cx, cy = self._center(row, col)
        third, sixth = self.cell_size // 3, self.cell_size // 6
        return [
            (cx - third, cy),
            (cx, cy + third),
            (cx + third, cy),
            (cx + sixth, cy - sixth),
            (cx - sixth, cy - sixth),
        ]

    def _draw_marks(self) -> None:
        board = self.context.board
        for row in range(board.height):
            for col in range(board.width):
                wanted = board.target_cell(row, col)
                if not wanted.is_crystal:
                    continue
                actual = board.result_cell(row, col)
                if actual.color == wanted.color:
                    self.surface.fill(layout.MARK_CORRECT_COLOR, self._cell_rect(row, col))
                elif actual.color != 0:
                    self.surface.fill(layout.MARK_WRONG_COLOR, self._cell_rect(row, col))

    def _draw_invalid_lanterns(self) -> None:
        pygame = ensure_pygame()
        for item in self.context.invalid_lanterns():
            pygame.draw.rect(self.surface, layout.INVALID_COLOR, self._cell_rect(item.row, item.col), 2)

    def _draw_rays(self) -> None:
        pygame = ensure_pygame()
        board = self.context.board
        width = 2 if self.cell_size > 10 else 1
        for ray in self.context.propagation.rays:
            start = self._center(ray.origin_row, ray.origin_col)
            end_x, end_y = self._center(ray.row, ray.col)
            end = (
                max(0, min(board.width * self.cell_size, end_x)),
                max(0, min(board.height * self.cell_size, end_y)),
            )
            color = layout.LIGHT_COLORS[ray.source.kind.color]
            pygame.draw.line(self.surface, color, start, end, width)

    def _draw_lit_crystals(self) -> None:
        pygame = ensure_pygame()
        board = self.context.board
        for row in range(board.height):
            for col in range(board.width):
                actual = board.result_cell(row, col)
                if actual.is_crystal and actual.color:
                    pygame.draw.polygon(
                        self.surface, layout.LIGHT_COLORS[actual.color], self._crystal_outline(row, col)
                    )

    def _draw_items(self) -> None:
        pygame = ensure_pygame()
        size = self.cell_size
        for item in self.context.registry:
            x, y = item.col * size, item.row * size
            if item.kind.is_lantern:
                cx, cy = self._center(item.row, item.col)
                radius = max(2, size // 6)
                ray = size // 3
                diagonal = size // 4
                outline = layout.TARGET_COLORS[item.kind.color]
                pygame.draw.line(self.surface, outline, (cx - ray, cy), (cx + ray, cy))
                pygame.draw.line(self.surface, outline, (cx, cy - ray), (cx, cy + ray))
                pygame.draw.line(self.surface, outline, (cx - diagonal, cy - diagonal), (cx + diagonal, cy + diagonal))
                pygame.draw.line(self.surface, outline, (cx - diagonal, cy + diagonal), (cx + diagonal, cy - diagonal))
                pygame.draw.circle(self.surface, layout.LIGHT_COLORS[item.kind.color], (cx, cy), radius)
                pygame.draw.circle(self.surface, outline, (cx, cy), radius, 1)
            elif item.kind.is_obstacle:
                third = size // 3
                rect = pygame.Rect(x + third, y + third, third, third)
                self.surface.fill(layout.BOARD_BACKGROUND_COLOR, rect)
                pygame.draw.rect(self.surface, layout.ITEM_COLOR, rect, 1)
                pygame.draw.line(self.surface, layout.ITEM_COLOR, rect.topleft, rect.bottomright)
                pygame.draw.line(self.surface, layout.ITEM_COLOR, rect.topright, rect.bottomleft)
            elif item.kind.glyph == "\\":
                pygame.draw.line(self.surface, layout.ITEM_COLOR, (x, y), (x + size, y + size), 2)
            else:
                pygame.draw.line(self.surface, layout.ITEM_COLOR, (x, y + size), (x + size, y), 2)

    def _draw_targets(self) -> None:
        pygame = ensure_pygame()
        board = self.context.board
        for row in range(board.height):
            for col in range(board.width):
                wanted = board.target_cell(row, col)
                if wanted.is_obstacle:
                    self.surface.fill(layout.ITEM_COLOR, self._cell_rect(row, col))
                elif wanted.is_crystal:
                    color = layout.TARGET_COLORS[wanted.color]
                    outline = self._crystal_outline(row, col)
                    pygame.draw.lines(self.surface, color, True, outline)
                    if not self.plain:
                        cx, cy = self._center(row, col)
                        third, sixth = self.cell_size // 3, self.cell_size // 6
                        pygame.draw.line(self.surface, color, (cx - third, cy), (cx + third, cy))
                        pygame.draw.lines(
                            self.surface,
                            color,
                            False,
                            [(cx + sixth, cy), (cx, cy + third), (cx - sixth, cy), (cx, cy - sixth), (cx + sixth, cy)],
                        )

    def _draw_grid(self) -> None:
        pygame = ensure_pygame()
        board = self.context.board
        size = self.cell_size
        for row in range(board.height + 1):
            pygame.draw.line(self.surface, layout.GRID_LINE_COLOR, (0, row * size), (board.width * size, row * size))
        for col in range(board.width + 1):
            pygame.draw.line(self.surface, layout.GRID_LINE_COLOR, (col * size, 0), (col * size, board.height * size))

    def _draw_text(self, text: str, x: int, y: int, color=layout.TEXT_COLOR) -> None:
        label = self.font.render(text, True, color)
        self.surface.blit(label, (x, y))

    def _draw_sidebar(self) -> None:
        pygame = ensure_pygame()
        active = {
            "READY": bool(self.session and self.session.ready),
            "PLAIN": self.plain,
            "MARK": self.mark,
            "RAYS": self.show_rays,
        }
        for name, rect_values in self.geometry.buttons.items():
            rect = pygame.Rect(*rect_values)
            if active[name]:
                self.surface.fill(layout.BUTTON_ACTIVE_COLOR, rect)
            pygame.draw.rect(self.surface, layout.GRID_LINE_COLOR, rect, 1)
            label = self.font.render(name, True, layout.TEXT_COLOR)
            self.surface.blit(label, label.get_rect(center=rect.center))

        x = self.geometry.sidebar[0]
        y = self.geometry.text_top()
        registry = self.context.registry
        costs = self.context.instance.costs
        current = self.context.score()
        invalid = len(self.context.invalid_lanterns())
        lines = [
            ("SCORE", layout.TEXT_COLOR),
            (f"{int(current.value)}", layout.TEXT_COLOR),
            ("", layout.TEXT_COLOR),
            ("COSTS", layout.TEXT_COLOR),
            (f"Lantern: {costs.lantern}", layout.TEXT_COLOR),
            (f"Mirror: {costs.mirror}", layout.TEXT_COLOR),
            (f"Obstacle: {costs.obstacle}", layout.TEXT_COLOR),
            ("", layout.TEXT_COLOR),
            ("ADDED ITEMS", layout.TEXT_COLOR),
            (f"Lanterns: {registry.count(ItemCategory.LANTERN)}", layout.TEXT_COLOR),
            (f"Invalid: {invalid}", layout.INVALID_COLOR if invalid else layout.TEXT_COLOR),
            (f"Mirrors: {registry.count(ItemCategory.MIRROR)}/{self.context.instance.max_mirrors}", layout.TEXT_COLOR),
            (f"Obstacles: {registry.count(ItemCategory.OBSTACLE)}/{self.context.instance.max_obstacles}", layout.TEXT_COLOR),
            ("", layout.TEXT_COLOR),
            ("CRYSTALS", layout.TEXT_COLOR),
            (f"Total: {self.context.board.crystal_count()}", layout.TEXT_COLOR),
            (f"Prim.OK: {current.correct_primary}", layout.TEXT_COLOR),
            (f"Sec.OK: {current.correct_secondary}", layout.TEXT_COLOR),
            (f"Incorrect: {current.incorrect}", layout.TEXT_COLOR),
        ]
        for text, color in lines:
            if text:
                self._draw_text(text, x, y, color)
            y += layout.TEXT_HEIGHT


__all__ = ["CrystalLightingUI", "ensure_pygame"]
