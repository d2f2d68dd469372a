"""Light propagation across the result grid.

The engine always rebuilds the whole result grid from the target grid and the
item registry. Rays are expanded breadth first: every lantern emits four unit
rays and each processed ray appends at most one follow-up ray to the queue.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Sequence, Tuple

from .model import Cell, CellKind, Grid, Item, baseline_grid


# (dRow, dCol) for down, up, right, left.
LANTERN_DIRECTIONS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


def reflect_forward(d_row: int, d_col: int) -> Tuple[int, int]:
    """Direction after hitting a ``/`` mirror."""

    return -d_col, -d_row


def reflect_backward(d_row: int, d_col: int) -> Tuple[int, int]:
    """Direction after hitting a ``\\`` mirror."""

    return d_col, d_row


@dataclass
class Ray:
    """One directed step of a beam, from its origin cell to ``(row, col)``."""

    origin_row: int
    origin_col: int
    row: int
    col: int
    d_row: int
    d_col: int
    source: Item

    def advance(self, d_row: int, d_col: int) -> "Ray":
        return Ray(
            origin_row=self.row,
            origin_col=self.col,
            row=self.row + d_row,
            col=self.col + d_col,
            d_row=d_row,
            d_col=d_col,
            source=self.source,
        )


@dataclass
class Propagation:
    """Outcome of a full recompute."""

    grid: Grid
    rays: List[Ray] = field(default_factory=list)


def trace(target: Sequence[Sequence[Cell]], items: Iterable[Item]) -> Propagation:
    """Recompute lighting and keep every processed ray."""

    items = list(items)
    grid = baseline_grid(target)
    height = len(grid)
    width = len(grid[0]) if grid else 0

    for item in items:
        grid[item.row][item.col] = item.kind.to_cell()

    queue: Deque[Ray] = deque()
    for item in items:
        if not item.kind.is_lantern:
            continue
        item.valid = True
        for d_row, d_col in LANTERN_DIRECTIONS:
            queue.append(
                Ray(item.row, item.col, item.row + d_row, item.col + d_col, d_row, d_col, item)
            )

    processed: List[Ray] = []
    while queue:
        ray = queue.popleft()
        processed.append(ray)
        row, col = ray.row, ray.col
        if not (0 <= row < height and 0 <= col < width):
            continue
        result = grid[row][col]
        d_row, d_col = ray.d_row, ray.d_col
        if result.kind is CellKind.OBSTACLE:
            continue
        if result.kind is CellKind.MIRROR_FORWARD:
            d_row, d_col = reflect_forward(d_row, d_col)
        elif result.kind is CellKind.MIRROR_BACKWARD:
            d_row, d_col = reflect_backward(d_row, d_col)
        elif target[row][col].is_crystal:
            grid[row][col] = Cell(CellKind.CRYSTAL, result.color | ray.source.kind.color)
            continue
        elif not result.is_empty:
            # Another lantern (or the source itself after a mirror loop).
            ray.source.valid = False
            continue
        queue.append(ray.advance(d_row, d_col))

    return Propagation(grid=grid, rays=processed)


def recompute(target: Sequence[Sequence[Cell]], items: Iterable[Item]) -> Grid:
    """Return a fresh result grid; lantern validity flags are updated in place."""

    return trace(target, items).grid


__all__ = [
    "LANTERN_DIRECTIONS",
    "Propagation",
    "Ray",
    "recompute",
    "reflect_backward",
    "reflect_forward",
    "trace",
]
