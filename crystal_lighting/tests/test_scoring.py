import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from crystal_lighting.evaluation import SimulationContext
from crystal_lighting.model import PuzzleInstance
from crystal_lighting.scoring import INVALID_SCORE, Score


def make_context(rows, **options) -> SimulationContext:
    options.setdefault("cost_lantern", 3)
    options.setdefault("cost_mirror", 5)
    options.setdefault("cost_obstacle", 7)
    return SimulationContext(PuzzleInstance.from_rows(rows, **options))


def test_empty_board_scores_zero():
    context = make_context(["...", ".2.", "..."])

    outcome = context.score()

    assert outcome.value == 0
    assert outcome.crystals == 1


def test_correct_primary_crystal():
    context = make_context(["...", ".2.", "..."])
    context.place(1, 0, "2")

    outcome = context.score()

    assert outcome.value == 20 - 3
    assert outcome.correct_primary == 1


def test_correct_secondary_crystal():
    context = make_context(["...", ".3.", "..."])
    context.place(1, 0, "1")
    context.place(1, 2, "2")

    outcome = context.score()

    assert outcome.value == 30 - 2 * 3
    assert outcome.correct_secondary == 1
    assert outcome.incorrect == 0


def test_half_lit_secondary_counts_as_wrong_color():
    context = make_context(["...", ".3.", "..."])
    context.place(1, 0, "1")

    outcome = context.score()

    assert outcome.value == -10 - 3
    assert outcome.incorrect == 1


def test_wrong_color_is_penalised():
    context = make_context(["...", ".4.", "..."])
    context.place(1, 0, "1")

    outcome = context.score()

    assert outcome.value == -10 - 3
    assert outcome.correct_primary == 0
    assert outcome.incorrect == 1


def test_mirror_and_obstacle_costs():
    context = make_context(["....", "...."], max_mirrors=1, max_obstacles=1)
    context.place(0, 1, "/")
    context.place(0, 3, "X")

    assert context.score().value == -(5 + 7)


def test_unlit_crystals_are_neutral():
    context = make_context(["1.6", "...", "5.4"])
    context.place(1, 1, "1")

    assert context.score().value == -3


def test_illuminated_lantern_gives_invalid_score():
    context = make_context(["....", ".2..", "...."])
    context.place(1, 0, "2")
    context.place(0, 0, "4")

    outcome = context.score()

    assert outcome == Score.invalid()
    assert outcome.value == INVALID_SCORE
    assert not outcome.valid


@pytest.mark.parametrize(
    "rows, placements, expected",
    [
        (["2..", "..."], [(0, 2, "2")], 20 - 3),
        (["..6", "..."], [(0, 0, "2"), (1, 2, "4")], 30 - 6),
        ([".X5", "..."], [(0, 0, "1")], 0 - 3),
    ],
)
def test_score_table(rows, placements, expected):
    context = make_context(rows)
    for row, col, glyph in placements:
        context.place(row, col, glyph)

    assert context.score().value == expected
