"""Layout constants for the crystal lighting viewer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

# Sidebar metrics
SIDEBAR_WIDTH: int = 126
SIDEBAR_PADDING: int = 10
BUTTON_WIDTH: int = 100
BUTTON_HEIGHT: int = 30
BUTTON_GAP: int = 10
TEXT_HEIGHT: int = 20
MIN_WINDOW_HEIGHT: int = 550
MIN_DETAILED_CELL_SIZE: int = 20

BUTTONS: Tuple[str, ...] = ("READY", "PLAIN", "MARK", "RAYS")

# Colors expressed as RGB tuples
BACKGROUND_COLOR: Tuple[int, int, int] = (221, 221, 221)
BOARD_BACKGROUND_COLOR: Tuple[int, int, int] = (255, 255, 255)
GRID_LINE_COLOR: Tuple[int, int, int] = (0, 0, 0)
TEXT_COLOR: Tuple[int, int, int] = (0, 0, 0)
ITEM_COLOR: Tuple[int, int, int] = (64, 64, 64)
INVALID_COLOR: Tuple[int, int, int] = (255, 0, 0)
MARK_CORRECT_COLOR: Tuple[int, int, int] = (187, 255, 187)
MARK_WRONG_COLOR: Tuple[int, int, int] = (255, 187, 187)
BUTTON_ACTIVE_COLOR: Tuple[int, int, int] = (255, 255, 255)

# RYB: 1 blue, 2 yellow, 3 green, 4 red, 5 violet, 6 orange.
LIGHT_COLORS: Dict[int, Tuple[int, int, int]] = {
    0: (255, 255, 255),
    1: (0, 102, 255),
    2: (240, 240, 0),
    3: (51, 255, 51),
    4: (255, 77, 77),
    5: (230, 0, 230),
    6: (255, 173, 49),
    7: (102, 51, 0),
}
TARGET_COLORS: Dict[int, Tuple[int, int, int]] = {
    0: (255, 255, 255),
    1: (0, 0, 204),
    2: (224, 224, 0),
    3: (0, 238, 0),
    4: (238, 0, 0),
    5: (170, 0, 170),
    6: (255, 153, 0),
    7: (102, 51, 0),
}


@dataclass(frozen=True)
class BoardGeometry:
    """Pixel rectangles for the board, the sidebar and its buttons."""

    cell_size: int
    board: Tuple[int, int, int, int]
    sidebar: Tuple[int, int, int, int]
    buttons: Dict[str, Tuple[int, int, int, int]]
    window: Tuple[int, int]

    def text_top(self) -> int:
        return SIDEBAR_PADDING + len(BUTTONS) * (BUTTON_HEIGHT + BUTTON_GAP)


def fit_cell_size(height: int, width: int, screen_size: Tuple[int, int]) -> int:
    """Largest cell size that keeps the board and sidebar on screen."""

    screen_width, screen_height = screen_size
    size = min((screen_width - SIDEBAR_WIDTH) // width, screen_height // height)
    return max(4, size)


def compute_geometry(height: int, width: int, cell_size: int) -> BoardGeometry:
    board_width = width * cell_size
    board_height = height * cell_size
    sidebar_x = board_width + SIDEBAR_PADDING

    buttons: Dict[str, Tuple[int, int, int, int]] = {}
    y = SIDEBAR_PADDING
    for name in BUTTONS:
        buttons[name] = (sidebar_x, y, BUTTON_WIDTH, BUTTON_HEIGHT)
        y += BUTTON_HEIGHT + BUTTON_GAP

    window = (board_width + SIDEBAR_WIDTH, max(board_height + 1, MIN_WINDOW_HEIGHT))
    return BoardGeometry(
        cell_size=cell_size,
        board=(0, 0, board_width, board_height),
        sidebar=(sidebar_x, 0, BUTTON_WIDTH, window[1]),
        buttons=buttons,
        window=window,
    )
