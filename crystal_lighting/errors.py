"""Exception hierarchy shared by the evaluator components."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class CrystalLightingError(Exception):
    """Base class for every error raised by the evaluator."""


class ProtocolError(CrystalLightingError):
    """The candidate's response does not follow the line protocol."""


class CandidateError(CrystalLightingError):
    """The candidate program could not be started or talked to."""


class EvaluationTimeout(CrystalLightingError):
    """An external actor did not finish within the allowed time."""


class InvalidLanternError(CrystalLightingError):
    """A lantern ended up illuminated after the final recompute."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class PlacementErrorKind(Enum):
    OUT_OF_BOUNDS = "out_of_bounds"
    UNKNOWN_KIND = "unknown_kind"
    NOT_EMPTY_TARGET = "not_empty_target"
    CELL_OCCUPIED = "cell_occupied"
    BUDGET_EXCEEDED = "budget_exceeded"
    NO_ITEM_AT_CELL = "no_item_at_cell"


class PlacementError(CrystalLightingError, ValueError):
    """A placement or removal was rejected by the validator."""

    def __init__(self, kind: PlacementErrorKind, message: str, *, category=None):
        super().__init__(message)
        self.kind = kind
        # ItemCategory for BUDGET_EXCEEDED, None otherwise.
        self.category = category


__all__ = [
    "CandidateError",
    "CrystalLightingError",
    "EvaluationTimeout",
    "InvalidLanternError",
    "PlacementError",
    "PlacementErrorKind",
    "ProtocolError",
]
