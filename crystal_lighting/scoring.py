"""Score a fully recomputed result grid."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .model import Cell, CellKind, Costs, Item, is_primary


INVALID_SCORE = -1000000.0

PRIMARY_REWARD = 20
SECONDARY_REWARD = 30
WRONG_COLOR_PENALTY = 10


@dataclass
class Score:
    value: float
    valid: bool = True
    crystals: int = 0
    correct_primary: int = 0
    correct_secondary: int = 0
    incorrect: int = 0

    @classmethod
    def invalid(cls) -> "Score":
        return cls(value=INVALID_SCORE, valid=False)

    def summary(self) -> str:
        if not self.valid:
            return f"Score = {self.value} (invalid)"
        return (
            f"Score = {self.value} "
            f"(primary ok: {self.correct_primary}, secondary ok: {self.correct_secondary}, "
            f"incorrect: {self.incorrect}, crystals: {self.crystals})"
        )


def _placement_cost(cell: Cell, costs: Costs) -> int:
    if cell.kind in (CellKind.MIRROR_FORWARD, CellKind.MIRROR_BACKWARD):
        return costs.mirror
    if cell.kind is CellKind.OBSTACLE:
        return costs.obstacle
    if cell.kind is CellKind.LANTERN:
        return costs.lantern
    return 0


def score(
    target: Sequence[Sequence[Cell]],
    result: Sequence[Sequence[Cell]],
    items: Iterable[Item],
    costs: Costs,
) -> Score:
    """Score ``result`` against ``target``.

    Any invalid lantern short-circuits to :data:`INVALID_SCORE`. Otherwise
    correct primary crystals earn 20, correct secondary crystals 30, lit
    crystals of the wrong color lose 10, unlit crystals are neutral, and
    every placed item subtracts its cost.
    """

    for item in items:
        if item.kind.is_lantern and not item.valid:
            return Score.invalid()

    outcome = Score(value=0.0)
    for target_row, result_row in zip(target, result):
        for wanted, actual in zip(target_row, result_row):
            if wanted.is_obstacle:
                continue
            if wanted.is_empty:
                outcome.value -= _placement_cost(actual, costs)
                continue
            outcome.crystals += 1
            if actual.color == wanted.color:
                if is_primary(wanted.color):
                    outcome.value += PRIMARY_REWARD
                    outcome.correct_primary += 1
                else:
                    outcome.value += SECONDARY_REWARD
                    outcome.correct_secondary += 1
            elif actual.color != 0:
                outcome.value -= WRONG_COLOR_PENALTY
                outcome.incorrect += 1
    return outcome


__all__ = ["INVALID_SCORE", "Score", "score"]
