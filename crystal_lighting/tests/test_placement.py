import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from crystal_lighting.errors import PlacementError, PlacementErrorKind
from crystal_lighting.model import (
    EMPTY_CELL,
    Board,
    Item,
    ItemCategory,
    ItemKind,
    ItemRegistry,
)
from crystal_lighting.placement import PlacementValidator


def make_validator(rows=("....", ".2..", "..X."), *, max_mirrors=1, max_obstacles=1):
    board = Board.from_rows(list(rows))
    registry = ItemRegistry()
    validator = PlacementValidator(
        board, registry, max_mirrors=max_mirrors, max_obstacles=max_obstacles
    )
    return validator, board, registry


def test_place_writes_glyph_and_registers_item():
    validator, board, registry = make_validator()

    item = validator.try_place(0, 0, "4")

    assert item == Item(0, 0, ItemKind.LANTERN_RED)
    assert board.result_cell(0, 0).to_char() == "4"
    assert registry.get(0, 0) is item


@pytest.mark.parametrize("row, col", [(-1, 0), (0, -1), (3, 0), (0, 4)])
def test_place_outside_board_is_rejected(row, col):
    validator, _, registry = make_validator()

    with pytest.raises(PlacementError) as excinfo:
        validator.try_place(row, col, "1")

    assert excinfo.value.kind is PlacementErrorKind.OUT_OF_BOUNDS
    assert len(registry) == 0


@pytest.mark.parametrize("glyph", ["3", "7", "a", "x", "|"])
def test_unknown_item_kind_is_rejected(glyph):
    validator, board, _ = make_validator()

    with pytest.raises(PlacementError) as excinfo:
        validator.try_place(0, 0, glyph)

    assert excinfo.value.kind is PlacementErrorKind.UNKNOWN_KIND
    assert f"Invalid item type: {glyph}." in str(excinfo.value)
    assert board.result_cell(0, 0).is_empty


@pytest.mark.parametrize("row, col", [(1, 1), (2, 2)])
def test_place_on_crystal_or_obstacle_is_rejected(row, col):
    validator, _, _ = make_validator()

    with pytest.raises(PlacementError) as excinfo:
        validator.try_place(row, col, "1")

    assert excinfo.value.kind is PlacementErrorKind.NOT_EMPTY_TARGET


def test_place_twice_on_same_cell_is_rejected():
    validator, board, registry = make_validator()
    validator.try_place(0, 0, "1")

    with pytest.raises(PlacementError) as excinfo:
        validator.try_place(0, 0, "2")

    assert excinfo.value.kind is PlacementErrorKind.CELL_OCCUPIED
    assert board.result_cell(0, 0).to_char() == "1"
    assert len(registry) == 1


def test_mirror_budget_is_enforced():
    validator, board, registry = make_validator(max_mirrors=1)
    validator.try_place(0, 0, "/")

    with pytest.raises(PlacementError) as excinfo:
        validator.try_place(0, 1, "\\")

    assert excinfo.value.kind is PlacementErrorKind.BUDGET_EXCEEDED
    assert excinfo.value.category is ItemCategory.MIRROR
    assert str(excinfo.value) == "You can place at most 1 mirrors."
    assert board.result_cell(0, 1) == EMPTY_CELL
    assert registry.count(ItemCategory.MIRROR) == 1


def test_obstacle_budget_of_zero_rejects_first_obstacle():
    validator, board, _ = make_validator(max_obstacles=0)

    with pytest.raises(PlacementError) as excinfo:
        validator.try_place(0, 0, "X")

    assert excinfo.value.category is ItemCategory.OBSTACLE
    assert board.result_cell(0, 0).is_empty


def test_lanterns_are_not_budgeted():
    validator, _, registry = make_validator(rows=["." * 6], max_mirrors=0, max_obstacles=0)

    for col in range(6):
        validator.try_place(0, col, "1")

    assert registry.count(ItemCategory.LANTERN) == 6


def test_remove_frees_budget_and_cell():
    validator, board, registry = make_validator(max_mirrors=1)
    validator.try_place(0, 0, "/")

    removed = validator.try_remove(0, 0)
    validator.try_place(0, 1, "/")

    assert removed.kind is ItemKind.MIRROR_FORWARD
    assert board.result_cell(0, 0) == EMPTY_CELL
    assert registry.get(0, 0) is None
    assert registry.count(ItemCategory.MIRROR) == 1


def test_remove_without_item_is_rejected():
    validator, _, _ = make_validator()

    with pytest.raises(PlacementError) as excinfo:
        validator.try_remove(0, 0)

    assert excinfo.value.kind is PlacementErrorKind.NO_ITEM_AT_CELL


def test_remove_outside_board_is_rejected():
    validator, _, _ = make_validator()

    with pytest.raises(PlacementError) as excinfo:
        validator.try_remove(5, 5)

    assert excinfo.value.kind is PlacementErrorKind.OUT_OF_BOUNDS


def test_registry_keeps_insertion_order_after_removal():
    validator, _, registry = make_validator()
    validator.try_place(0, 0, "1")
    validator.try_place(0, 1, "2")
    validator.try_place(0, 2, "4")

    validator.try_remove(0, 1)

    assert [item.position for item in registry] == [(0, 0), (0, 2)]
    assert registry.index_of(0, 2) == 2
    assert (0, 1) not in registry
    assert len(registry) == 2


def test_cycle_walks_through_every_item():
    validator, _, registry = make_validator(max_mirrors=1, max_obstacles=1)

    glyphs = []
    for _ in range(7):
        glyphs.append(validator.cycle(0, 0).kind.glyph)

    assert glyphs == ["1", "2", "4", "\\", "/", "X", "1"]
    assert len(registry) == 1


def test_cycle_skips_items_without_budget():
    validator, _, _ = make_validator(max_mirrors=0, max_obstacles=0)

    glyphs = [validator.cycle(0, 0).kind.glyph for _ in range(4)]

    assert glyphs == ["1", "2", "4", "1"]


def test_cycle_skips_mirrors_when_budget_used_elsewhere():
    validator, _, _ = make_validator(max_mirrors=1, max_obstacles=1)
    validator.try_place(0, 3, "/")
    for _ in range(3):
        validator.cycle(0, 0)

    assert validator.cycle(0, 0).kind is ItemKind.OBSTACLE


def test_cycle_on_crystal_is_rejected():
    validator, _, registry = make_validator()

    with pytest.raises(PlacementError):
        validator.cycle(1, 1)

    assert len(registry) == 0


def test_registry_compacts_once_tombstones_dominate():
    registry = ItemRegistry()
    for col in range(5):
        registry.add(Item(0, col, ItemKind.LANTERN_BLUE))

    for col in (0, 2, 3):
        registry.remove_at(0, col)

    assert [item.position for item in registry] == [(0, 1), (0, 4)]
    assert registry.index_of(0, 1) == 0
    assert registry.index_of(0, 4) == 1
    assert registry.get(0, 4).position == (0, 4)


def test_place_and_remove_churn_does_not_grow_registry():
    validator, _, registry = make_validator()
    validator.try_place(0, 0, "1")

    for _ in range(1000):
        validator.try_place(0, 1, "2")
        validator.try_remove(0, 1)

    assert len(registry) == 1
    assert registry.add(Item(0, 2, ItemKind.LANTERN_RED)) <= 2
