"""Greedy reference candidate speaking the line protocol on stdin/stdout.

Run with ``python -m crystal_lighting.solver``. Lanterns are tried on empty
cells with a clear line of sight to a crystal, using the primary colors the
crystal needs, and kept only when every lantern stays valid and the score
improves.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Iterator, List, Optional, TextIO, Tuple

from .config import DEFAULT_SOLVER_TIME_LIMIT, SOLVER_TIME_LIMIT_ENV_VAR, read_float
from .engine import LANTERN_DIRECTIONS
from .evaluation import SimulationContext
from .model import PRIMARY_COLORS, ItemKind, PuzzleInstance
from .protocol import format_response, parse_request

_logger = logging.getLogger(__name__)


def _sight_lines(context: SimulationContext) -> Iterator[Tuple[int, int, int]]:
    """Yield ``(row, col, wanted_color)`` for empty cells that see a crystal."""

    board = context.board
    for row in range(board.height):
        for col in range(board.width):
            wanted = board.target_cell(row, col)
            if not wanted.is_crystal:
                continue
            for d_row, d_col in LANTERN_DIRECTIONS:
                r, c = row + d_row, col + d_col
                while board.in_bounds(r, c) and board.result_cell(r, c).is_empty:
                    yield r, c, wanted.color
                    r, c = r + d_row, c + d_col


def solve(instance: PuzzleInstance, time_limit: Optional[float] = None) -> List[str]:
    limit = DEFAULT_SOLVER_TIME_LIMIT if time_limit is None else time_limit
    deadline = time.monotonic() + limit
    context = SimulationContext(instance)
    best = context.score().value

    improved = True
    while improved and time.monotonic() < deadline:
        improved = False
        for row, col, wanted in list(_sight_lines(context)):
            if time.monotonic() >= deadline:
                break
            if not context.board.result_cell(row, col).is_empty:
                continue
            for primary in PRIMARY_COLORS:
                if not wanted & primary:
                    continue
                context.place(row, col, ItemKind.lantern(primary))
                outcome = context.score()
                if outcome.valid and outcome.value > best:
                    best = outcome.value
                    improved = True
                    break
                context.remove(row, col)

    _logger.debug("Greedy candidate finished with score %s", best)
    return [item.to_line() for item in context.registry]


def main(stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> int:
    instance = parse_request(stdin)
    time_limit = read_float(SOLVER_TIME_LIMIT_ENV_VAR, DEFAULT_SOLVER_TIME_LIMIT)
    stdout.write(format_response(solve(instance, time_limit)))
    stdout.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
