"""Placement rules for lanterns, mirrors and obstacles."""

from __future__ import annotations

from typing import Union

from .errors import PlacementError, PlacementErrorKind
from .model import ITEM_CYCLE, EMPTY_CELL, Board, Item, ItemCategory, ItemKind, ItemRegistry


KindLike = Union[ItemKind, str]


class PlacementValidator:
    """Accepts or rejects edits to the registry and the result grid.

    The validator only writes the item glyph; callers are expected to run a
    full recompute after every accepted change.
    """

    def __init__(
        self,
        board: Board,
        registry: ItemRegistry,
        *,
        max_mirrors: int,
        max_obstacles: int,
    ) -> None:
        self.board = board
        self.registry = registry
        self.max_mirrors = max_mirrors
        self.max_obstacles = max_obstacles

    def _resolve_kind(self, kind: KindLike) -> ItemKind:
        if isinstance(kind, ItemKind):
            return kind
        try:
            return ItemKind.from_glyph(str(kind))
        except ValueError:
            raise PlacementError(
                PlacementErrorKind.UNKNOWN_KIND,
                f"Invalid item type: {kind}. You can only place lanterns of primary colors "
                "(1, 2 or 4), mirrors (\\ or /) or obstacles (X).",
            ) from None

    def _check_budget(self, kind: ItemKind) -> None:
        if kind.is_obstacle:
            if self.registry.count(ItemCategory.OBSTACLE) >= self.max_obstacles:
                raise PlacementError(
                    PlacementErrorKind.BUDGET_EXCEEDED,
                    f"You can place at most {self.max_obstacles} obstacles.",
                    category=ItemCategory.OBSTACLE,
                )
        elif kind.is_mirror:
            if self.registry.count(ItemCategory.MIRROR) >= self.max_mirrors:
                raise PlacementError(
                    PlacementErrorKind.BUDGET_EXCEEDED,
                    f"You can place at most {self.max_mirrors} mirrors.",
                    category=ItemCategory.MIRROR,
                )

    def try_place(self, row: int, col: int, kind: KindLike) -> Item:
        if not self.board.in_bounds(row, col):
            raise PlacementError(
                PlacementErrorKind.OUT_OF_BOUNDS,
                "You can only place items within the board.",
            )
        item_kind = self._resolve_kind(kind)
        if not self.board.target_cell(row, col).is_empty:
            raise PlacementError(
                PlacementErrorKind.NOT_EMPTY_TARGET,
                "You can only place items on empty cells of the board.",
            )
        if not self.board.result_cell(row, col).is_empty or (row, col) in self.registry:
            raise PlacementError(
                PlacementErrorKind.CELL_OCCUPIED,
                "You can not place two items on the same cell.",
            )
        self._check_budget(item_kind)

        item = Item(row=row, col=col, kind=item_kind)
        self.board.set_result_cell(row, col, item_kind.to_cell())
        self.registry.add(item)
        return item

    def try_remove(self, row: int, col: int) -> Item:
        if not self.board.in_bounds(row, col):
            raise PlacementError(
                PlacementErrorKind.OUT_OF_BOUNDS,
                "You can only remove items from within the board.",
            )
        item = self.registry.remove_at(row, col)
        if item is None:
            raise PlacementError(
                PlacementErrorKind.NO_ITEM_AT_CELL,
                "You can only remove items already placed on the board.",
            )
        self.board.set_result_cell(row, col, EMPTY_CELL)
        return item

    def next_kind(self, current: ItemKind) -> ItemKind:
        """Kind that follows ``current`` when cycling, honouring budgets."""

        obstacles = self.registry.count(ItemCategory.OBSTACLE)
        mirrors = self.registry.count(ItemCategory.MIRROR)
        index = ITEM_CYCLE.index(current)
        while True:
            index += 1
            candidate = ITEM_CYCLE[index % len(ITEM_CYCLE)]
            if candidate.is_obstacle and obstacles >= self.max_obstacles:
                continue
            if candidate.is_mirror and not current.is_mirror and mirrors >= self.max_mirrors:
                continue
            return candidate

    def cycle(self, row: int, col: int) -> Item:
        """Place a blue lantern, or swap the existing item for the next kind."""

        if self.board.in_bounds(row, col):
            existing = self.registry.get(row, col)
            if existing is not None:
                replacement = self.next_kind(existing.kind)
                self.try_remove(row, col)
                try:
                    return self.try_place(row, col, replacement)
                except PlacementError:
                    self.try_place(row, col, existing.kind)
                    raise
        return self.try_place(row, col, ITEM_CYCLE[0])


__all__ = ["PlacementValidator"]
