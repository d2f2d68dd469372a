"""Evaluation driver: owns the board for one run and produces the score."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .config import EvaluatorConfig
from .engine import Propagation, trace
from .errors import (
    CrystalLightingError,
    EvaluationTimeout,
    InvalidLanternError,
    PlacementError,
)
from .model import Board, Item, ItemRegistry, PuzzleInstance
from .placement import KindLike, PlacementValidator
from .protocol import parse_items
from .runner import CandidateProcess
from .scoring import INVALID_SCORE, Score, score

_logger = logging.getLogger(__name__)


class SimulationContext:
    """Board, registry and validator for exactly one evaluation.

    Every accepted edit is followed by a full recompute, so ``board.result``
    and the lantern validity flags are always consistent with the registry.
    """

    def __init__(self, instance: PuzzleInstance):
        self.instance = instance
        self.board: Board = instance.new_board()
        self.registry = ItemRegistry()
        self.validator = PlacementValidator(
            self.board,
            self.registry,
            max_mirrors=instance.max_mirrors,
            max_obstacles=instance.max_obstacles,
        )
        self.propagation: Propagation = Propagation(grid=self.board.result)
        self.recompute()

    def recompute(self) -> Propagation:
        self.propagation = trace(self.board.target, self.registry)
        self.board.result = self.propagation.grid
        return self.propagation

    def place(self, row: int, col: int, kind: KindLike, *, recompute: bool = True) -> Item:
        item = self.validator.try_place(row, col, kind)
        if recompute:
            self.recompute()
        return item

    def remove(self, row: int, col: int) -> Item:
        item = self.validator.try_remove(row, col)
        self.recompute()
        return item

    def cycle(self, row: int, col: int) -> Item:
        try:
            return self.validator.cycle(row, col)
        finally:
            self.recompute()

    def invalid_lanterns(self) -> List[Item]:
        return [item for item in self.registry.lanterns() if not item.valid]

    def score(self) -> Score:
        return score(self.board.target, self.board.result, self.registry, self.instance.costs)


@dataclass
class EvaluationResult:
    score: float
    details: Optional[Score] = None
    messages: List[str] = field(default_factory=list)
    context: Optional[SimulationContext] = None

    @property
    def ok(self) -> bool:
        return self.details is not None and self.details.valid


class ManualSession:
    """Interactive editing on top of a context, finished by :meth:`mark_ready`.

    Rejected edits are reported through ``last_message`` and never abort the
    session.
    """

    def __init__(self, context: SimulationContext, *, on_message: Optional[Callable[[str], None]] = None):
        self.context = context
        self.last_message: str = ""
        self._ready = threading.Event()
        self._on_message = on_message

    def _report(self, message: str) -> None:
        self.last_message = message
        _logger.info("Manual edit rejected: %s", message)
        if self._on_message is not None:
            self._on_message(message)

    def place(self, row: int, col: int, kind: KindLike) -> bool:
        return self._apply(lambda: self.context.place(row, col, kind))

    def remove(self, row: int, col: int) -> bool:
        return self._apply(lambda: self.context.remove(row, col))

    def cycle(self, row: int, col: int) -> bool:
        return self._apply(lambda: self.context.cycle(row, col))

    def _apply(self, edit: Callable[[], Item]) -> bool:
        if self._ready.is_set():
            self._report("The board was already submitted.")
            return False
        try:
            edit()
        except PlacementError as exc:
            self._report(str(exc))
            return False
        self.last_message = ""
        return True

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    def mark_ready(self) -> None:
        self._ready.set()

    def wait(self, timeout: Optional[float]) -> None:
        if not self._ready.wait(timeout):
            raise EvaluationTimeout(f"Manual play did not finish within {timeout} seconds.")


class Evaluator:
    """Grades one puzzle instance against a candidate or a manual session."""

    def __init__(self, instance: PuzzleInstance, config: Optional[EvaluatorConfig] = None):
        self.instance = instance
        self.config = config or EvaluatorConfig()

    def _fail(self, message: str, context: Optional[SimulationContext] = None) -> EvaluationResult:
        _logger.error(message)
        return EvaluationResult(score=INVALID_SCORE, messages=[message], context=context)

    def replay(self, lines: Sequence[str]) -> SimulationContext:
        """Apply response lines in order; the first rejected item is fatal."""

        placements = parse_items(lines)
        context = SimulationContext(self.instance)
        for index, placement in enumerate(placements):
            try:
                context.place(placement.row, placement.col, placement.glyph, recompute=False)
            except PlacementError as exc:
                raise PlacementError(exc.kind, f"Item {index}: {exc}", category=exc.category) from exc
        context.recompute()
        for index, item in enumerate(context.registry):
            if item.kind.is_lantern and not item.valid:
                raise InvalidLanternError(
                    f"Item {index}: A lantern should not be illuminated by any light ray.",
                    index=index,
                )
        return context

    def evaluate_response(self, lines: Sequence[str]) -> EvaluationResult:
        try:
            context = self.replay(lines)
        except CrystalLightingError as exc:
            return self._fail(str(exc))
        details = context.score()
        _logger.info(details.summary())
        return EvaluationResult(score=details.value, details=details, context=context)

    def run_candidate(self, command) -> List[str]:
        with CandidateProcess(command, timeout=self.config.timeout) as candidate:
            return candidate.request(self.instance)

    def evaluate_candidate(self, command) -> EvaluationResult:
        try:
            lines = self.run_candidate(command)
        except CrystalLightingError as exc:
            return self._fail(str(exc))
        except OSError as exc:
            return self._fail(f"Failed to get result from placeItems: {exc}")
        return self.evaluate_response(lines)

    def start_manual(self, context: Optional[SimulationContext] = None) -> ManualSession:
        return ManualSession(context or SimulationContext(self.instance))

    def finish_manual(
        self,
        session: ManualSession,
        timeout: Optional[float] = None,
    ) -> EvaluationResult:
        """Wait for the session to be submitted, then score it."""

        wait_for = self.config.manual_timeout if timeout is None else timeout
        try:
            session.wait(wait_for)
        except EvaluationTimeout as exc:
            return self._fail(str(exc), session.context)
        return self.score_context(session.context)

    def score_context(self, context: SimulationContext) -> EvaluationResult:
        context.recompute()
        details = context.score()
        if not details.valid:
            index = next(
                i for i, item in enumerate(context.registry)
                if item.kind.is_lantern and not item.valid
            )
            message = f"Item {index}: A lantern should not be illuminated by any light ray."
            _logger.error(message)
            return EvaluationResult(
                score=details.value, details=details, messages=[message], context=context
            )
        return EvaluationResult(score=details.value, details=details, context=context)


def deadline_expired(deadline: Optional[float]) -> bool:
    return deadline is not None and time.monotonic() >= deadline


__all__ = [
    "EvaluationResult",
    "Evaluator",
    "ManualSession",
    "SimulationContext",
    "deadline_expired",
]
