"""Board, item and puzzle instance data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple


BLUE = 1
YELLOW = 2
RED = 4

PRIMARY_COLORS = (BLUE, YELLOW, RED)
UNLIT = 0


def is_primary(color: int) -> bool:
    return color in PRIMARY_COLORS


class CellKind(Enum):
    """What occupies a single grid cell."""

    EMPTY = "empty"
    OBSTACLE = "obstacle"
    CRYSTAL = "crystal"
    LANTERN = "lantern"
    MIRROR_FORWARD = "mirror_forward"
    MIRROR_BACKWARD = "mirror_backward"


@dataclass(frozen=True)
class Cell:
    """Value of a target or result cell.

    ``color`` is only meaningful for crystals (accumulated RYB bits, 0 when
    unlit) and lanterns (their primary color).
    """

    kind: CellKind
    color: int = 0

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY

    @property
    def is_crystal(self) -> bool:
        return self.kind is CellKind.CRYSTAL

    @property
    def is_obstacle(self) -> bool:
        return self.kind is CellKind.OBSTACLE

    def to_char(self) -> str:
        if self.kind is CellKind.EMPTY:
            return "."
        if self.kind is CellKind.OBSTACLE:
            return "X"
        if self.kind is CellKind.MIRROR_FORWARD:
            return "/"
        if self.kind is CellKind.MIRROR_BACKWARD:
            return "\\"
        return str(self.color)

    @staticmethod
    def from_target_char(char: str) -> "Cell":
        if char == ".":
            return EMPTY_CELL
        if char == "X":
            return OBSTACLE_CELL
        if len(char) == 1 and "1" <= char <= "6":
            return Cell(CellKind.CRYSTAL, int(char))
        raise ValueError(f"Unknown target cell: {char!r}")


EMPTY_CELL = Cell(CellKind.EMPTY)
OBSTACLE_CELL = Cell(CellKind.OBSTACLE)


class ItemCategory(Enum):
    LANTERN = "lantern"
    MIRROR = "mirror"
    OBSTACLE = "obstacle"


class ItemKind(Enum):
    """The six placeable items, keyed by their protocol glyph."""

    LANTERN_BLUE = "1"
    LANTERN_YELLOW = "2"
    LANTERN_RED = "4"
    MIRROR_BACKWARD = "\\"
    MIRROR_FORWARD = "/"
    OBSTACLE = "X"

    @property
    def glyph(self) -> str:
        return self.value

    @property
    def category(self) -> ItemCategory:
        if self in (ItemKind.LANTERN_BLUE, ItemKind.LANTERN_YELLOW, ItemKind.LANTERN_RED):
            return ItemCategory.LANTERN
        if self in (ItemKind.MIRROR_FORWARD, ItemKind.MIRROR_BACKWARD):
            return ItemCategory.MIRROR
        return ItemCategory.OBSTACLE

    @property
    def is_lantern(self) -> bool:
        return self.category is ItemCategory.LANTERN

    @property
    def is_mirror(self) -> bool:
        return self.category is ItemCategory.MIRROR

    @property
    def is_obstacle(self) -> bool:
        return self.category is ItemCategory.OBSTACLE

    @property
    def color(self) -> int:
        return int(self.value) if self.is_lantern else 0

    def to_cell(self) -> Cell:
        if self.is_lantern:
            return Cell(CellKind.LANTERN, self.color)
        if self is ItemKind.MIRROR_FORWARD:
            return Cell(CellKind.MIRROR_FORWARD)
        if self is ItemKind.MIRROR_BACKWARD:
            return Cell(CellKind.MIRROR_BACKWARD)
        return OBSTACLE_CELL

    @staticmethod
    def from_glyph(glyph: str) -> "ItemKind":
        try:
            return ItemKind(glyph)
        except ValueError as exc:
            raise ValueError(f"Unknown item glyph: {glyph!r}") from exc

    @staticmethod
    def lantern(color: int) -> "ItemKind":
        return ItemKind.from_glyph(str(color))


# Order used when cycling through items on a cell.
ITEM_CYCLE: Tuple[ItemKind, ...] = tuple(ItemKind)


@dataclass
class Item:
    """A placed item. ``valid`` only matters for lanterns."""

    row: int
    col: int
    kind: ItemKind
    valid: bool = True

    @property
    def position(self) -> Tuple[int, int]:
        return self.row, self.col

    def to_line(self) -> str:
        return f"{self.row} {self.col} {self.kind.glyph}"


class ItemRegistry:
    """Ordered arena of placed items.

    Removal leaves a tombstone so iteration keeps insertion order; a position
    index gives constant time lookups by cell. Once tombstones outnumber live
    items the slots are compacted, which renumbers the surviving items.
    """

    def __init__(self) -> None:
        self._slots: List[Optional[Item]] = []
        self._index: Dict[Tuple[int, int], int] = {}

    def add(self, item: Item) -> int:
        if item.position in self._index:
            raise ValueError(f"Cell {item.position} already holds an item.")
        index = len(self._slots)
        self._slots.append(item)
        self._index[item.position] = index
        return index

    def remove_at(self, row: int, col: int) -> Optional[Item]:
        index = self._index.pop((row, col), None)
        if index is None:
            return None
        item = self._slots[index]
        self._slots[index] = None
        if len(self._slots) - len(self._index) > len(self._index):
            self._compact()
        return item

    def _compact(self) -> None:
        self._slots = [item for item in self._slots if item is not None]
        self._index = {item.position: index for index, item in enumerate(self._slots)}

    def get(self, row: int, col: int) -> Optional[Item]:
        index = self._index.get((row, col))
        if index is None:
            return None
        return self._slots[index]

    def index_of(self, row: int, col: int) -> Optional[int]:
        return self._index.get((row, col))

    def count(self, category: ItemCategory) -> int:
        return sum(1 for item in self if item.kind.category is category)

    def lanterns(self) -> List[Item]:
        return [item for item in self if item.kind.is_lantern]

    def __iter__(self) -> Iterator[Item]:
        return (item for item in self._slots if item is not None)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, position: object) -> bool:
        return position in self._index


Grid = List[List[Cell]]


class Board:
    """Immutable target grid plus the mutable result grid derived from it."""

    def __init__(self, target: Sequence[Sequence[Cell]]):
        if not target or not target[0]:
            raise ValueError("Board must have at least one row and one column.")
        width = len(target[0])
        for index, row in enumerate(target):
            if len(row) != width:
                raise ValueError(
                    f"Non-rectangular board: row 0 has {width} cells but row {index} has {len(row)}."
                )
        self._target: Tuple[Tuple[Cell, ...], ...] = tuple(tuple(row) for row in target)
        self.result: Grid = baseline_grid(self._target)

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "Board":
        return cls([[Cell.from_target_char(char) for char in row] for row in rows])

    @property
    def height(self) -> int:
        return len(self._target)

    @property
    def width(self) -> int:
        return len(self._target[0])

    @property
    def target(self) -> Tuple[Tuple[Cell, ...], ...]:
        return self._target

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def target_cell(self, row: int, col: int) -> Cell:
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside the board.")
        return self._target[row][col]

    def result_cell(self, row: int, col: int) -> Cell:
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside the board.")
        return self.result[row][col]

    def set_result_cell(self, row: int, col: int, cell: Cell) -> None:
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside the board.")
        self.result[row][col] = cell

    def target_rows(self) -> List[str]:
        return ["".join(cell.to_char() for cell in row) for row in self._target]

    def result_rows(self) -> List[str]:
        return ["".join(cell.to_char() for cell in row) for row in self.result]

    def crystal_count(self) -> int:
        return sum(1 for row in self._target for cell in row if cell.is_crystal)


def baseline_grid(target: Sequence[Sequence[Cell]]) -> Grid:
    """Copy of the target where every crystal is reset to unlit."""

    grid: Grid = []
    for row in target:
        grid.append(
            [Cell(CellKind.CRYSTAL, UNLIT) if cell.is_crystal else cell for cell in row]
        )
    return grid


@dataclass(frozen=True)
class Costs:
    lantern: int
    mirror: int
    obstacle: int

    def for_kind(self, kind: ItemKind) -> int:
        if kind.is_lantern:
            return self.lantern
        if kind.is_mirror:
            return self.mirror
        return self.obstacle


@dataclass
class PuzzleInstance:
    """One generated test case: target rows, item costs and budgets."""

    rows: List[str]
    costs: Costs
    max_mirrors: int
    max_obstacles: int
    seed: Optional[int] = None
    crystal_probability: Optional[int] = None
    obstacle_probability: Optional[int] = None

    def __post_init__(self) -> None:
        # Validates shape and alphabet up front.
        Board.from_rows(self.rows)

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[str],
        *,
        cost_lantern: int = 1,
        cost_mirror: int = 3,
        cost_obstacle: int = 2,
        max_mirrors: int = 0,
        max_obstacles: int = 0,
    ) -> "PuzzleInstance":
        return cls(
            rows=list(rows),
            costs=Costs(lantern=cost_lantern, mirror=cost_mirror, obstacle=cost_obstacle),
            max_mirrors=max_mirrors,
            max_obstacles=max_obstacles,
        )

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return len(self.rows[0])

    def new_board(self) -> Board:
        return Board.from_rows(self.rows)

    def describe(self) -> str:
        lines = [
            f"H = {self.height}",
            f"W = {self.width}",
        ]
        if self.crystal_probability is not None:
            lines.append(f"Probability of a crystal = {self.crystal_probability}")
        if self.obstacle_probability is not None:
            lines.append(f"Probability of an obstacle = {self.obstacle_probability}")
        lines.extend(
            [
                f"Lantern cost = {self.costs.lantern}",
                f"Mirror cost = {self.costs.mirror}",
                f"Obstacle cost = {self.costs.obstacle}",
                f"Max mirrors = {self.max_mirrors}",
                f"Max obstacles = {self.max_obstacles}",
            ]
        )
        lines.extend(self.rows)
        return "\n".join(lines)
